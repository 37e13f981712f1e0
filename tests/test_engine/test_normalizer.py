"""Tests for analyzer output normalization."""

import logging

import pytest

from consensus_mcp.engine.models import Method, Signal
from consensus_mcp.engine.normalizer import (
    UNAVAILABLE_REASONING,
    collect_method_scores,
    normalize_method,
    normalize_signal,
    scale_score,
)


class TestSignalVocabulary:
    """Every analyzer vocabulary maps onto BUY/HOLD/SELL."""

    @pytest.mark.parametrize("raw", ["bullish", "BUY", "WEAK_BUY"])
    def test_buy_vocabulary(self, raw: str) -> None:
        assert normalize_signal(raw) == Signal.BUY

    @pytest.mark.parametrize("raw", ["bearish", "SELL", "WEAK_SELL"])
    def test_sell_vocabulary(self, raw: str) -> None:
        assert normalize_signal(raw) == Signal.SELL

    @pytest.mark.parametrize("raw", ["neutral", "HOLD", "SELL/AVOID", "", None, 42])
    def test_everything_else_is_hold(self, raw: object) -> None:
        assert normalize_signal(raw) == Signal.HOLD

    def test_case_insensitive(self) -> None:
        """Case and surrounding whitespace do not matter."""
        assert normalize_signal(" Bullish ") == Signal.BUY
        assert normalize_signal("weak_sell") == Signal.SELL

    def test_mapping_is_deterministic_across_methods(self) -> None:
        """The same raw signal normalizes the same way for every method that reports one."""
        for raw, expected in (("bullish", Signal.BUY), ("bearish", Signal.SELL), ("neutral", Signal.HOLD)):
            munger = normalize_method(
                Method.CHARLIE_MUNGER, {"signal": raw, "overall_score": 5, "confidence": 50}
            )
            lynch = normalize_method(Method.PETER_LYNCH, {"signal": raw, "confidence": 50})
            ackman = normalize_method(Method.BILL_ACKMAN, {"signal": raw, "confidence": 50})
            assert munger.signal == lynch.signal == ackman.signal == expected


class TestScaleScore:
    """Tests for score scaling."""

    def test_ten_point_scale(self) -> None:
        assert scale_score(7.5, scale=10) == 75.0

    def test_clamped(self) -> None:
        assert scale_score(120) == 100.0
        assert scale_score(-5) == 0.0

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, value: float) -> None:
        with pytest.raises(ValueError):
            scale_score(value)


class TestAdapters:
    """Per-method adapters."""

    def test_buffett_compounding_machine(self) -> None:
        score = normalize_method(
            Method.WARREN_BUFFETT,
            {"compounding_score": 92, "is_compounding_machine": True, "investment_thesis": "Compounds"},
        )
        assert (score.signal, score.score, score.confidence) == (Signal.BUY, 92, 90)
        assert score.reasoning == "Compounds"

    def test_buffett_partial(self) -> None:
        score = normalize_method(
            Method.WARREN_BUFFETT, {"compounding_score": 65, "is_compounding_machine": False}
        )
        assert (score.signal, score.confidence) == (Signal.HOLD, 70)

    def test_buffett_failing(self) -> None:
        score = normalize_method(
            Method.WARREN_BUFFETT, {"compounding_score": 30, "is_compounding_machine": False}
        )
        assert (score.signal, score.confidence) == (Signal.SELL, 85)

    def test_munger_scales_ten_point_score(self) -> None:
        score = normalize_method(
            Method.CHARLIE_MUNGER,
            {"signal": "bullish", "overall_score": 8.2, "confidence": 70, "reasoning": "Moat"},
        )
        assert score.score == pytest.approx(82.0)
        assert score.confidence == 70

    def test_lynch_uses_confidence_as_score(self) -> None:
        score = normalize_method(Method.PETER_LYNCH, {"signal": "neutral", "confidence": 63})
        assert score.score == score.confidence == 63

    def test_quantitative_averages_sub_scores(self) -> None:
        score = normalize_method(
            Method.QUANTITATIVE,
            {
                "technical_score": 60,
                "fundamental_score": 70,
                "risk_adjusted_score": 80,
                "recommendation": "WEAK_BUY",
                "technical_verdict": "BULLISH",
                "fundamental_verdict": "BUY",
            },
        )
        assert score.score == pytest.approx(70.0)
        assert score.confidence == pytest.approx(80.0)
        assert score.signal == Signal.BUY
        assert score.reasoning == "Technical: BULLISH, Fundamental: BUY"

    def test_quantitative_confidence_capped(self) -> None:
        score = normalize_method(
            Method.QUANTITATIVE,
            {"technical_score": 100, "fundamental_score": 100, "risk_adjusted_score": 95},
        )
        assert score.confidence == 90


class TestThreeStateCollection:
    """Absent vs requested-unavailable vs requested-available."""

    def test_absent_methods_have_no_entry(self) -> None:
        scores = collect_method_scores({Method.PETER_LYNCH: {"signal": "bullish", "confidence": 80}})

        assert [s.method for s in scores] == [Method.PETER_LYNCH]

    def test_none_outcome_is_unavailable(self) -> None:
        scores = collect_method_scores({Method.BILL_ACKMAN: None})

        assert len(scores) == 1
        entry = scores[0]
        assert entry.available is False
        assert (entry.signal, entry.score, entry.confidence) == (Signal.HOLD, 0, 0)
        assert entry.reasoning == UNAVAILABLE_REASONING

    def test_canonical_order(self) -> None:
        """Entries come out in canonical order whatever order they went in."""
        outcomes = {
            Method.QUANTITATIVE: None,
            Method.WARREN_BUFFETT: None,
            Method.PETER_LYNCH: None,
        }
        scores = collect_method_scores(outcomes)

        assert [s.method for s in scores] == [
            Method.WARREN_BUFFETT,
            Method.PETER_LYNCH,
            Method.QUANTITATIVE,
        ]

    def test_malformed_outcome_is_unavailable(self, caplog: pytest.LogCaptureFixture) -> None:
        """A raw dict missing required fields degrades to unavailable with a warning."""
        with caplog.at_level(logging.WARNING):
            scores = collect_method_scores({Method.CHARLIE_MUNGER: {"signal": "bullish"}})

        assert scores[0].available is False
        assert "charlie_munger" in caplog.text

    @pytest.mark.parametrize(
        "method,raw",
        [
            (Method.CHARLIE_MUNGER, {"signal": "bullish", "overall_score": float("nan"), "confidence": 80}),
            (Method.PETER_LYNCH, {"signal": "bullish", "confidence": float("nan")}),
            (
                Method.QUANTITATIVE,
                {
                    "technical_score": 60,
                    "fundamental_score": float("nan"),
                    "risk_adjusted_score": 55,
                    "recommendation": "BUY",
                },
            ),
        ],
    )
    def test_nan_outcome_is_unavailable(self, method: Method, raw: dict) -> None:
        """NaN never turns into a full-strength score."""
        score = normalize_method(method, raw)

        assert score.available is False
        assert score.score == 0
