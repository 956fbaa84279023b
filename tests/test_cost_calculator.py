"""Tests for the cost calculator."""

from __future__ import annotations

import pytest

from cv_match.logging.cost_calculator import MODEL_PRICING, calculate_cost


class TestCostCalculator:
    def test_haiku_cost(self):
        # 1M input + 1M output for Haiku: $1.00 + $5.00
        cost = calculate_cost([("claude-haiku-4-5-20251001", 1_000_000, 1_000_000)])
        assert cost == pytest.approx(6.00)

    def test_sonnet_cost(self):
        # 1M input + 1M output for Sonnet: $3.00 + $15.00
        cost = calculate_cost([("claude-sonnet-4-5-20250929", 1_000_000, 1_000_000)])
        assert cost == pytest.approx(18.00)

    def test_small_token_count(self):
        cost = calculate_cost([("claude-sonnet-4-5-20250929", 500, 200)])
        expected = (500 / 1_000_000) * 3.00 + (200 / 1_000_000) * 15.00
        assert cost == pytest.approx(expected)

    def test_multiple_calls(self):
        calls = [
            ("claude-haiku-4-5-20251001", 1000, 500),
            ("claude-sonnet-4-5-20250929", 2000, 1000),
        ]
        expected = (
            (1000 / 1e6) * 1.00 + (500 / 1e6) * 5.00
            + (2000 / 1e6) * 3.00 + (1000 / 1e6) * 15.00
        )
        assert calculate_cost(calls) == pytest.approx(expected)

    def test_unknown_model_is_free(self):
        assert calculate_cost([("some-local-model", 10_000, 10_000)]) == 0.0

    def test_empty_calls(self):
        assert calculate_cost([]) == 0.0

    def test_default_model_is_priced(self):
        from cv_match.config import LLMConfig

        assert LLMConfig().model in MODEL_PRICING
