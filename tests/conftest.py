"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from cv_match.clients.llm_client import LLMClient
from cv_match.models.account import HistoryItem
from cv_match.models.analysis import AnalysisResult
from cv_match.storage.account_store import AccountStore
from cv_match.storage.history_store import HistoryStore
from cv_match.storage.kv_store import KeyValueStore
from cv_match.storage.preferences import PreferenceStore


@pytest.fixture
def sample_cv_text() -> str:
    return """Ana Silva
ana@example.com | Lisbon

Experience:
- Acme Payments (2020 - present) - Backend Engineer
  - Built Python/FastAPI services handling 2M requests per day
  - Cut PostgreSQL query latency by 40% with index tuning
  - Mentored 3 junior engineers

- DataCo (2018 - 2020) - Junior Developer
  - Django REST APIs, Celery workers, AWS EC2

Education:
- BSc Computer Science, University of Lisbon (2018)

Skills: Python, FastAPI, Django, PostgreSQL, Redis, Docker, AWS
"""


@pytest.fixture
def sample_jd_text() -> str:
    return """Senior Python Engineer

We are seeking a Python engineer with 3+ years of experience.

Requirements:
- Strong Python and async web frameworks (FastAPI, aiohttp)
- PostgreSQL and Redis in production
- Kubernetes and Terraform
- Experience mentoring engineers
- Excellent written communication

Nice to have:
- Kafka or other message queues
- Payments domain experience
"""


@pytest.fixture
def sample_analysis_payload() -> dict:
    """A schema-conforming payload as the model returns it (camelCase keys)."""
    return {
        "overallScore": 78,
        "summary": "Strong Python backend match; infrastructure tooling is the main gap.",
        "strengths": [
            "5 years of Python backend work",
            "Production PostgreSQL tuning",
            "Mentoring experience",
        ],
        "requirements": [
            {
                "requirement": "Python async frameworks",
                "evidence": "Built Python/FastAPI services",
                "rating": 5,
                "gapNotes": "None",
                "actionToImprove": "Quantify async throughput",
            },
            {
                "requirement": "Kubernetes",
                "evidence": "None",
                "rating": 1,
                "gapNotes": "No container orchestration mentioned",
                "actionToImprove": "Add any Kubernetes exposure or a side project",
            },
            {
                "requirement": "Mentoring",
                "evidence": "Mentored 3 junior engineers",
                "rating": 4,
                "gapNotes": "Scope of mentoring unclear",
                "actionToImprove": "Describe outcomes of mentoring",
            },
        ],
        "missingKeywords": ["Kubernetes", "Terraform", "Kafka"],
        "nextSteps": [
            "Add Kubernetes and Terraform experience",
            "Mention message queues",
            "Highlight payments domain",
        ],
    }


@pytest.fixture
def sample_result(sample_analysis_payload) -> AnalysisResult:
    return AnalysisResult.model_validate(sample_analysis_payload)


@pytest.fixture
def make_history_item(sample_result):
    """Factory for HistoryItem with sensible defaults."""

    def _make(item_id: str = "item-1", timestamp: int = 1_700_000_000_000, **overrides) -> HistoryItem:
        fields = {
            "id": item_id,
            "timestamp": timestamp,
            "cv_text": "5 years Python backend...",
            "jd_text": "Seeking Python engineer, 3+ years",
            "result": sample_result,
        }
        fields.update(overrides)
        return HistoryItem(**fields)

    return _make


@pytest.fixture
def kv(tmp_path) -> KeyValueStore:
    return KeyValueStore(db_path=tmp_path / "store.db")


@pytest.fixture
def accounts(kv) -> AccountStore:
    return AccountStore(kv)


@pytest.fixture
def history_store(kv) -> HistoryStore:
    return HistoryStore(kv)


@pytest.fixture
def preferences(kv) -> PreferenceStore:
    return PreferenceStore(kv)


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate_structured = AsyncMock(return_value={})
    return client
