"""Utility to pull a JSON object out of free-form LLM text."""

from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def extract_json(text: str) -> dict:
    """Extract a JSON object from an LLM response.

    Tries in order:
    1. Direct json.loads on the full text
    2. The body of the first fenced code block
    3. First '{' to last '}'

    Truncated output is not repaired: a partial object would only fail
    schema validation later.
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected text, got {type(text).__name__}")
    text = text.strip()

    candidates = [text]
    fence = _FENCE_RE.search(text)
    if fence:
        candidates.append(fence.group(1).strip())
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    raise ValueError(f"Could not extract JSON object from text: {text[:200]}...")
