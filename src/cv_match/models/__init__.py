"""Data models for the CV match analyzer."""

from cv_match.models.account import HistoryItem, User
from cv_match.models.analysis import (
    ANALYSIS_SCHEMA,
    AnalysisResult,
    RequirementAnalysis,
)

__all__ = [
    "ANALYSIS_SCHEMA",
    "AnalysisResult",
    "HistoryItem",
    "RequirementAnalysis",
    "User",
]
