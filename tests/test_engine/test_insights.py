"""Tests for strengths, concerns, key insights and reasoning text."""

from consensus_mcp.engine.insights import (
    generate_concerns,
    generate_key_insights,
    generate_reasoning,
    generate_strengths,
    is_strong,
    is_weak,
)
from consensus_mcp.engine.models import CANONICAL_ORDER, Method, Signal


class TestThresholds:
    """Strong/weak classification."""

    def test_strong_needs_score_and_confidence(self, make_score) -> None:
        assert is_strong(make_score(Method.WARREN_BUFFETT, score=70, confidence=70))
        assert not is_strong(make_score(Method.WARREN_BUFFETT, score=90, confidence=69))
        assert not is_strong(make_score(Method.WARREN_BUFFETT, score=69, confidence=90))

    def test_weak_needs_score_and_confidence(self, make_score) -> None:
        assert is_weak(make_score(Method.PETER_LYNCH, score=40, confidence=70))
        assert not is_weak(make_score(Method.PETER_LYNCH, score=41, confidence=90))
        assert not is_weak(make_score(Method.PETER_LYNCH, score=10, confidence=60))


class TestStrengthsAndConcerns:
    """Per-method templated lines."""

    def test_one_line_per_qualifying_method(self, make_score) -> None:
        active = [make_score(m, score=85, confidence=80) for m in CANONICAL_ORDER]

        strengths = generate_strengths(active)

        assert len(strengths) == 5
        assert generate_concerns(active) == []

    def test_method_specific_wording(self, make_score) -> None:
        strengths = generate_strengths([make_score(Method.WARREN_BUFFETT, score=88.4, confidence=90)])

        assert strengths == [
            "Strong value fundamentals with 88/100 compounding score and 90% confidence "
            "- indicates solid business moat and consistent earnings growth"
        ]

    def test_ties_round_up_in_wording(self, make_score) -> None:
        strengths = generate_strengths([make_score(Method.CHARLIE_MUNGER, score=72.5, confidence=70.5)])

        assert strengths[0].startswith("Excellent business quality metrics scoring 73/100 with 71% confidence")

    def test_concern_wording(self, make_score) -> None:
        concerns = generate_concerns([make_score(Method.QUANTITATIVE, score=25, confidence=75)])

        assert concerns[0].startswith("Weak quantitative signals with 25/100 combined score")

    def test_middle_scores_produce_nothing(self, make_score) -> None:
        active = [make_score(Method.BILL_ACKMAN, score=55, confidence=95)]

        assert generate_strengths(active) == []
        assert generate_concerns(active) == []


class TestKeyInsights:
    """Fixed-order summary lines."""

    def test_first_three_lines(self) -> None:
        insights = generate_key_insights(3, 61.234, 2, 1)

        assert insights == [
            "Based on 3 available analysis methods",
            "Weighted score: 61.2/100",
            "2 positive signals, 1 negative signals",
        ]

    def test_excluded_methods_appended(self, make_score) -> None:
        excluded = [make_score(Method.CHARLIE_MUNGER, available=False)]

        insights = generate_key_insights(2, 50.0, 0, 0, excluded=excluded)

        assert len(insights) == 4
        assert insights[3] == "Excluded for missing data: Charlie Munger"


class TestReasoning:
    """Single-sentence explanation per outcome."""

    def test_buy(self) -> None:
        text = generate_reasoning(Signal.BUY, 78.26, 4, 3, 0)
        assert text.startswith("Strong BUY signal with 78.3/100 weighted score. 3 positive signals from 4")

    def test_sell(self) -> None:
        text = generate_reasoning(Signal.SELL, 30.0, 3, 0, 2)
        assert "2 negative signals from 3 analysis methods" in text

    def test_hold(self) -> None:
        text = generate_reasoning(Signal.HOLD, 55.0, 5, 1, 1)
        assert text.startswith("HOLD recommendation with 55.0/100 weighted score.")
