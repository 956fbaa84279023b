"""Usage logging data models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class UsageLog(BaseModel):
    """Single usage log entry for one analysis attempt."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_email: str | None = None  # None when nobody is logged in
    timestamp: datetime = Field(default_factory=datetime.now)
    model: str
    overall_score: int | None = None
    elapsed_seconds: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost_usd: float = 0.0
    success: bool = True
    error_message: str | None = None
