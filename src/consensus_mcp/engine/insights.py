"""Rule-based strengths, concerns and key insights for a recommendation."""

from collections.abc import Sequence

from consensus_mcp.engine.models import Method, MethodScore, Signal, round_half_up

# Selection thresholds are the same for every method; only wording differs
STRONG_SCORE_MIN = 70
WEAK_SCORE_MAX = 40
INSIGHT_CONFIDENCE_MIN = 70

STRENGTH_TEMPLATES: dict[Method, str] = {
    Method.WARREN_BUFFETT: (
        "Strong value fundamentals with {score}/100 compounding score and {confidence}% "
        "confidence - indicates solid business moat and consistent earnings growth"
    ),
    Method.CHARLIE_MUNGER: (
        "Excellent business quality metrics scoring {score}/100 with {confidence}% "
        "confidence - demonstrates competitive advantages and rational management"
    ),
    Method.PETER_LYNCH: (
        "Attractive growth opportunity with {score}/100 Lynch score and {confidence}% "
        "confidence - shows strong earnings growth potential at reasonable valuation"
    ),
    Method.BILL_ACKMAN: (
        "High-quality business characteristics scoring {score}/100 with {confidence}% "
        "confidence - exhibits pricing power and sustainable competitive position"
    ),
    Method.QUANTITATIVE: (
        "Strong quantitative metrics with {score}/100 combined score and {confidence}% "
        "confidence - technical and fundamental indicators align positively"
    ),
}

CONCERN_TEMPLATES: dict[Method, str] = {
    Method.WARREN_BUFFETT: (
        "Value concerns with low {score}/100 compounding score and {confidence}% "
        "confidence - suggests limited business moat or declining fundamentals"
    ),
    Method.CHARLIE_MUNGER: (
        "Business quality issues with {score}/100 score and {confidence}% "
        "confidence - indicates potential competitive disadvantages or management concerns"
    ),
    Method.PETER_LYNCH: (
        "Growth challenges with {score}/100 Lynch score and {confidence}% "
        "confidence - shows limited growth prospects or overvaluation relative to growth"
    ),
    Method.BILL_ACKMAN: (
        "Business model weaknesses scoring {score}/100 with {confidence}% "
        "confidence - suggests limited pricing power or unsustainable competitive position"
    ),
    Method.QUANTITATIVE: (
        "Weak quantitative signals with {score}/100 combined score and {confidence}% "
        "confidence - technical and fundamental indicators show negative trends"
    ),
}

DEFAULT_STRENGTH = "{name} shows strong positive indicators with {score}/100 score and {confidence}% confidence"
DEFAULT_CONCERN = "{name} shows concerning indicators with {score}/100 score and {confidence}% confidence"


def _render(template: str, method_score: MethodScore) -> str:
    return template.format(
        name=method_score.method.display_name,
        score=round_half_up(method_score.score),
        confidence=round_half_up(method_score.confidence),
    )


def is_strong(method_score: MethodScore) -> bool:
    return method_score.score >= STRONG_SCORE_MIN and method_score.confidence >= INSIGHT_CONFIDENCE_MIN


def is_weak(method_score: MethodScore) -> bool:
    return method_score.score <= WEAK_SCORE_MAX and method_score.confidence >= INSIGHT_CONFIDENCE_MIN


def generate_strengths(active: Sequence[MethodScore]) -> list[str]:
    """One strength per active method with score >= 70 and confidence >= 70."""
    return [
        _render(STRENGTH_TEMPLATES.get(s.method, DEFAULT_STRENGTH), s)
        for s in active
        if is_strong(s)
    ]


def generate_concerns(active: Sequence[MethodScore]) -> list[str]:
    """One concern per active method with score <= 40 and confidence >= 70."""
    return [
        _render(CONCERN_TEMPLATES.get(s.method, DEFAULT_CONCERN), s)
        for s in active
        if is_weak(s)
    ]


def generate_key_insights(
    active_count: int,
    weighted_score: float,
    buy_signals: int,
    sell_signals: int,
    excluded: Sequence[MethodScore] = (),
) -> list[str]:
    """
    Key insights in fixed order.

    The first three entries are always: methods used, weighted score,
    signal tally. A note on selected-but-unavailable methods is appended
    when there are any.
    """
    insights = [
        f"Based on {active_count} available analysis methods",
        f"Weighted score: {weighted_score:.1f}/100",
        f"{buy_signals} positive signals, {sell_signals} negative signals",
    ]
    if excluded:
        names = ", ".join(s.method.display_name for s in excluded)
        insights.append(f"Excluded for missing data: {names}")
    return insights


def generate_reasoning(
    recommendation: Signal,
    weighted_score: float,
    method_count: int,
    buy_signals: int,
    sell_signals: int,
) -> str:
    """Single-sentence summary of why the recommendation came out as it did."""
    if recommendation == Signal.BUY:
        return (
            f"Strong BUY signal with {weighted_score:.1f}/100 weighted score. "
            f"{buy_signals} positive signals from {method_count} analysis methods "
            "indicate strong investment potential."
        )
    if recommendation == Signal.SELL:
        return (
            f"SELL signal with {weighted_score:.1f}/100 weighted score. "
            f"{sell_signals} negative signals from {method_count} analysis methods "
            "suggest avoiding this investment."
        )
    return (
        f"HOLD recommendation with {weighted_score:.1f}/100 weighted score. "
        f"Mixed or neutral signals from {method_count} analysis methods suggest "
        "maintaining current position or waiting for clearer direction."
    )
