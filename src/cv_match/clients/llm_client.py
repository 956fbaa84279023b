"""Claude API wrapper with async support and schema-constrained output."""

from __future__ import annotations

import logging

import anthropic

from cv_match.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


class LLMClient:
    """Async Claude API client. One request per call; no retries."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    async def _call_api(
        self,
        prompt: str,
        system: str,
        model: str,
        temperature: float,
        max_tokens: int,
        **extra,
    ) -> anthropic.types.Message:
        messages = [{"role": "user", "content": prompt}]
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
            **extra,
        }
        if system:
            kwargs["system"] = system
        logger.debug("LLM call: model=%s", model)
        try:
            message = await self.client.messages.create(**kwargs)
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))
        return message

    async def generate_structured(
        self,
        prompt: str,
        schema: dict,
        *,
        tool_name: str,
        tool_description: str = "",
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = 8192,
    ) -> dict:
        """Force the model to answer through a tool whose input follows ``schema``.

        Returns the tool input. If the model answered in plain text instead,
        JSON is extracted from the text (ValueError when there is none).
        """
        message = await self._call_api(
            prompt=prompt,
            system=system,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            tools=[{
                "name": tool_name,
                "description": tool_description,
                "input_schema": schema,
            }],
            tool_choice={"type": "tool", "name": tool_name},
        )
        for block in message.content:
            if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
                return block.input
        logger.warning("No %s tool call in response, parsing text instead", tool_name)
        return extract_json(_first_text(message))

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary


def _first_text(message: anthropic.types.Message) -> str:
    for block in message.content:
        if getattr(block, "type", None) == "text":
            return block.text
    raise ValueError("LLM response contained no text content")
