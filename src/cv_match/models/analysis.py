"""Pydantic models for the match analysis returned by the LLM."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel


def _whole_number(value: object) -> int:
    """Accept JSON numbers with no fractional part; reject strings and bools."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected an integer, got {type(value).__name__}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected an integer, got {value}")
    return int(value)


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys (the stored/wire layout)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequirementAnalysis(CamelModel):
    requirement: StrictStr
    evidence: StrictStr
    rating: int = Field(ge=1, le=5)  # 1 = no match, 5 = perfect match
    gap_notes: StrictStr
    action_to_improve: StrictStr

    @field_validator("rating", mode="before")
    @classmethod
    def _check_rating(cls, v: object) -> int:
        return _whole_number(v)


class AnalysisResult(CamelModel):
    overall_score: int = Field(ge=0, le=100)
    summary: StrictStr
    strengths: list[StrictStr]  # 3-5 expected
    requirements: list[RequirementAnalysis]  # 8-12 expected
    missing_keywords: list[StrictStr]
    next_steps: list[StrictStr]  # 3-5 expected, highest priority first

    @field_validator("overall_score", mode="before")
    @classmethod
    def _check_score(cls, v: object) -> int:
        return _whole_number(v)

    @property
    def average_rating(self) -> float | None:
        if not self.requirements:
            return None
        return sum(r.rating for r in self.requirements) / len(self.requirements)


# JSON schema sent to the model as the forced tool's input_schema.
ANALYSIS_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "overallScore": {
            "type": "number",
            "description": "Overall match score from 0 to 100 based on ATS criteria.",
        },
        "summary": {
            "type": "string",
            "description": "A concise summary of the match analysis.",
        },
        "strengths": {
            "type": "array",
            "items": {"type": "string"},
            "description": "List of 3-5 key strengths found in the CV relevant to the JD.",
        },
        "requirements": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "requirement": {
                        "type": "string",
                        "description": "The specific core requirement from the JD.",
                    },
                    "evidence": {
                        "type": "string",
                        "description": "Evidence found in the CV (or 'None' if missing).",
                    },
                    "rating": {
                        "type": "integer",
                        "description": "Match rating from 1 (No match) to 5 (Perfect match).",
                    },
                    "gapNotes": {
                        "type": "string",
                        "description": "Explanation of what is missing or weak.",
                    },
                    "actionToImprove": {
                        "type": "string",
                        "description": "Specific action to close the gap.",
                    },
                },
                "required": [
                    "requirement",
                    "evidence",
                    "rating",
                    "gapNotes",
                    "actionToImprove",
                ],
            },
            "description": "Analysis of 8-12 core requirements.",
        },
        "missingKeywords": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Important ATS keywords found in the JD but missing in the CV.",
        },
        "nextSteps": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Prioritized list of 3-5 steps to improve the application.",
        },
    },
    "required": [
        "overallScore",
        "summary",
        "strengths",
        "requirements",
        "missingKeywords",
        "nextSteps",
    ],
}
