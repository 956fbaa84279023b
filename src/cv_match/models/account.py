"""Pydantic models for accounts and saved analyses."""

from __future__ import annotations

from pydantic import ConfigDict, Field, StrictStr

from cv_match.models.analysis import AnalysisResult, CamelModel


class User(CamelModel):
    model_config = ConfigDict(frozen=True)

    email: StrictStr  # unique key, case-sensitive
    name: StrictStr


class HistoryItem(CamelModel):
    """One saved analysis, owned by the user whose history list holds it."""

    model_config = ConfigDict(frozen=True)

    id: StrictStr
    timestamp: int = Field(ge=0)  # epoch milliseconds
    cv_text: StrictStr
    jd_text: StrictStr
    result: AnalysisResult
