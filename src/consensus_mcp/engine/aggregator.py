"""Blend per-method scores into one weighted recommendation.

aggregate() is a pure function of (scores, weights, selection): no I/O,
no shared state, recomputed from scratch on every call.

Only methods that are both selected and available take part. For each
of them:

    contribution = score * weight * confidence / 100
    weighted_score = sum(contribution) / sum(weight)

The direction is then decided top-down, first match wins:

    weighted_score >= 70 and >= 2 BUY signals  -> BUY,  confidence min(95, score)
    weighted_score <= 39 and >= 2 SELL signals -> SELL, confidence min(95, 100 - score)
    otherwise                                  -> HOLD, confidence |score - 50| + 40

A method with confidence 0 contributes nothing to the weighted score but
still counts toward the BUY/SELL tally.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from consensus_mcp.engine.insights import (
    generate_concerns,
    generate_key_insights,
    generate_reasoning,
    generate_strengths,
)
from consensus_mcp.engine.models import Method, MethodScore, Signal, SummaryRecommendation, round_half_up

logger = logging.getLogger(__name__)

BUY_SCORE_MIN = 70
SELL_SCORE_MAX = 39
MIN_CORROBORATING_SIGNALS = 2
MAX_DIRECTIONAL_CONFIDENCE = 95
HOLD_CONFIDENCE_BASE = 40
NEUTRAL_SCORE = 50

NO_DATA_REASONING = "No analysis data available"
NO_DATA_CONCERN = "Insufficient data for analysis"


@dataclass(frozen=True)
class AggregateTotals:
    """Full-precision intermediate values of one aggregation."""

    active: list[MethodScore] = field(default_factory=list)
    excluded: list[MethodScore] = field(default_factory=list)
    weighted_sum: float = 0.0
    total_weight: float = 0.0
    buy_signals: int = 0
    sell_signals: int = 0

    @property
    def weighted_score(self) -> float:
        if self.total_weight <= 0:
            return 0.0
        return self.weighted_sum / self.total_weight


def select_active(
    scores: Sequence[MethodScore],
    selection: Mapping[Method, bool],
) -> tuple[list[MethodScore], list[MethodScore]]:
    """
    Split scores into (active, excluded).

    active: selected and available. excluded: selected but unavailable.
    Unselected methods appear in neither list.
    """
    active: list[MethodScore] = []
    excluded: list[MethodScore] = []
    for s in scores:
        if not selection.get(s.method, False):
            continue
        (active if s.available else excluded).append(s)
    return active, excluded


def compute_totals(
    scores: Sequence[MethodScore],
    weights: Mapping[Method, float],
    selection: Mapping[Method, bool],
) -> AggregateTotals:
    """Weighted sum, total weight and signal tally over the active set."""
    active, excluded = select_active(scores, selection)

    weighted_sum = 0.0
    total_weight = 0.0
    buy_signals = 0
    sell_signals = 0
    for s in active:
        weight = max(0.0, float(weights.get(s.method, 0)))
        total_weight += weight
        weighted_sum += s.score * weight * s.confidence / 100
        if s.signal == Signal.BUY:
            buy_signals += 1
        elif s.signal == Signal.SELL:
            sell_signals += 1

    return AggregateTotals(
        active=active,
        excluded=excluded,
        weighted_sum=weighted_sum,
        total_weight=total_weight,
        buy_signals=buy_signals,
        sell_signals=sell_signals,
    )


def decide(weighted_score: float, buy_signals: int, sell_signals: int) -> tuple[Signal, float]:
    """
    Apply the threshold + corroboration rule.

    Returns:
        (recommendation, unrounded confidence)
    """
    if weighted_score >= BUY_SCORE_MIN and buy_signals >= MIN_CORROBORATING_SIGNALS:
        return Signal.BUY, min(MAX_DIRECTIONAL_CONFIDENCE, weighted_score)
    if weighted_score <= SELL_SCORE_MAX and sell_signals >= MIN_CORROBORATING_SIGNALS:
        return Signal.SELL, min(MAX_DIRECTIONAL_CONFIDENCE, 100 - weighted_score)
    return Signal.HOLD, abs(weighted_score - NEUTRAL_SCORE) + HOLD_CONFIDENCE_BASE


def no_data_recommendation() -> SummaryRecommendation:
    """Terminal result when nothing selected has data. Not an error."""
    return SummaryRecommendation(
        recommendation=Signal.HOLD,
        confidence=0,
        weighted_score=0,
        reasoning=NO_DATA_REASONING,
        key_insights=[],
        strengths=[],
        concerns=[NO_DATA_CONCERN],
    )


def aggregate(
    scores: Sequence[MethodScore],
    weights: Mapping[Method, float],
    selection: Mapping[Method, bool],
) -> SummaryRecommendation:
    """
    Produce the blended recommendation.

    Args:
        scores: Breakdown entries, available or not
        weights: Method -> non-negative relative weight (need not sum to 100)
        selection: Method -> whether the method participates

    Returns:
        SummaryRecommendation with integer confidence and weighted_score
    """
    totals = compute_totals(scores, weights, selection)
    if not totals.active:
        logger.debug("No selected method has data; returning no-data recommendation")
        return no_data_recommendation()

    weighted_score = totals.weighted_score
    recommendation, confidence = decide(weighted_score, totals.buy_signals, totals.sell_signals)

    logger.debug(
        f"Aggregated {len(totals.active)} methods: weighted_score={weighted_score:.2f}, "
        f"buy={totals.buy_signals}, sell={totals.sell_signals} -> {recommendation.value}"
    )

    return SummaryRecommendation(
        recommendation=recommendation,
        confidence=round_half_up(confidence),
        weighted_score=round_half_up(weighted_score),
        reasoning=generate_reasoning(
            recommendation,
            weighted_score,
            len(totals.active),
            totals.buy_signals,
            totals.sell_signals,
        ),
        key_insights=generate_key_insights(
            len(totals.active),
            weighted_score,
            totals.buy_signals,
            totals.sell_signals,
            excluded=totals.excluded,
        ),
        strengths=generate_strengths(totals.active),
        concerns=generate_concerns(totals.active),
    )
