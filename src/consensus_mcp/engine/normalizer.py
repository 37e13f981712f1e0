"""Normalize heterogeneous analyzer outputs into MethodScore.

Each analyzer reports in its own shape and vocabulary. This module owns
the adapters that turn those shapes into one MethodScore, and the
three-state contract for each method:

1. not requested   -> key absent from the outcomes mapping, no entry at all
2. requested, failed -> value is None, entry with available=False
3. requested, ran  -> value is the analyzer's raw dict, entry with available=True
"""

import logging
import math
from collections.abc import Callable, Mapping
from typing import Any

from consensus_mcp.engine.models import CANONICAL_ORDER, Method, MethodScore, Signal

logger = logging.getLogger(__name__)

UNAVAILABLE_REASONING = "Analysis not available"

# Compared case-insensitively
BUY_VOCABULARY = frozenset({"bullish", "buy", "weak_buy"})
SELL_VOCABULARY = frozenset({"bearish", "sell", "weak_sell"})


def normalize_signal(raw: Any) -> Signal:
    """
    Map any analyzer signal onto BUY/HOLD/SELL.

    bullish/BUY/WEAK_BUY -> BUY, bearish/SELL/WEAK_SELL -> SELL,
    anything else (neutral, HOLD, None, unknown strings) -> HOLD.
    """
    if isinstance(raw, Signal):
        return raw
    if not isinstance(raw, str):
        return Signal.HOLD
    folded = raw.strip().lower()
    if folded in BUY_VOCABULARY:
        return Signal.BUY
    if folded in SELL_VOCABULARY:
        return Signal.SELL
    return Signal.HOLD


def finite(value: Any) -> float:
    """float(value), raising ValueError for NaN or infinity."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value: {value!r}")
    return number


def scale_score(value: float, scale: float = 100) -> float:
    """
    Bring a score onto 0-100.

    Args:
        value: Raw score
        scale: Upper bound of the raw scale (10 or 100)

    Returns:
        Score clamped to [0, 100]

    Raises:
        ValueError: If the value is NaN or infinite
    """
    scaled = finite(value) * 10 if scale == 10 else finite(value)
    return max(0.0, min(100.0, scaled))


def _clamp_pct(value: Any) -> float:
    return max(0.0, min(100.0, finite(value)))


def unavailable_score(method: Method) -> MethodScore:
    """Entry for a method that was requested but produced no data."""
    return MethodScore(
        method=method,
        signal=Signal.HOLD,
        score=0.0,
        confidence=0.0,
        reasoning=UNAVAILABLE_REASONING,
        available=False,
    )


# ---------------- Per-method adapters ----------------


def normalize_buffett(raw: dict[str, Any]) -> MethodScore:
    """Compounding-machine verdict -> MethodScore. Score is already 0-100."""
    score = scale_score(raw["compounding_score"])
    if raw.get("is_compounding_machine"):
        signal, confidence = "BUY", 90
    elif score >= 60:
        signal, confidence = "HOLD", 70
    else:
        signal, confidence = "SELL", 85
    return MethodScore(
        method=Method.WARREN_BUFFETT,
        signal=normalize_signal(signal),
        score=score,
        confidence=confidence,
        reasoning=raw.get("investment_thesis", ""),
    )


def normalize_munger(raw: dict[str, Any]) -> MethodScore:
    """Munger reports overall_score on 0-10."""
    return MethodScore(
        method=Method.CHARLIE_MUNGER,
        signal=normalize_signal(raw.get("signal")),
        score=scale_score(raw["overall_score"], scale=10),
        confidence=_clamp_pct(raw["confidence"]),
        reasoning=raw.get("reasoning", ""),
    )


def normalize_lynch(raw: dict[str, Any]) -> MethodScore:
    """Lynch conviction is carried by its confidence figure, used as the score."""
    return MethodScore(
        method=Method.PETER_LYNCH,
        signal=normalize_signal(raw.get("signal")),
        score=scale_score(raw["confidence"]),
        confidence=_clamp_pct(raw["confidence"]),
        reasoning=raw.get("reasoning", ""),
    )


def normalize_ackman(raw: dict[str, Any]) -> MethodScore:
    """Ackman conviction is carried by its confidence figure, used as the score."""
    return MethodScore(
        method=Method.BILL_ACKMAN,
        signal=normalize_signal(raw.get("signal")),
        score=scale_score(raw["confidence"]),
        confidence=_clamp_pct(raw["confidence"]),
        reasoning=raw.get("reasoning", ""),
    )


def normalize_quantitative(raw: dict[str, Any]) -> MethodScore:
    """Score is the mean of the technical, fundamental and risk-adjusted sub-scores."""
    score = scale_score(
        (
            float(raw["technical_score"])
            + float(raw["fundamental_score"])
            + float(raw["risk_adjusted_score"])
        )
        / 3
    )
    return MethodScore(
        method=Method.QUANTITATIVE,
        signal=normalize_signal(raw.get("recommendation")),
        score=score,
        confidence=min(90.0, score + 10),
        reasoning=(
            f"Technical: {raw.get('technical_verdict', 'N/A')}, "
            f"Fundamental: {raw.get('fundamental_verdict', 'N/A')}"
        ),
    )


ADAPTERS: dict[Method, Callable[[dict[str, Any]], MethodScore]] = {
    Method.WARREN_BUFFETT: normalize_buffett,
    Method.CHARLIE_MUNGER: normalize_munger,
    Method.PETER_LYNCH: normalize_lynch,
    Method.BILL_ACKMAN: normalize_ackman,
    Method.QUANTITATIVE: normalize_quantitative,
}


def normalize_method(method: Method, raw: dict[str, Any] | None) -> MethodScore:
    """
    Normalize one requested method's outcome.

    A None outcome, or one the adapter cannot read, yields an
    unavailable entry rather than an exception.
    """
    if raw is None:
        return unavailable_score(method)
    adapter = ADAPTERS.get(method)
    if adapter is None:
        logger.warning(f"No adapter registered for method {method.value}")
        return unavailable_score(method)
    try:
        return adapter(raw)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Could not normalize {method.value} result: {type(e).__name__}: {e}")
        return unavailable_score(method)


def collect_method_scores(outcomes: Mapping[Method, dict[str, Any] | None]) -> list[MethodScore]:
    """
    Build the breakdown list from per-method outcomes.

    Only methods present as keys were requested; they are emitted in
    canonical order. Absent methods get no entry at all.

    Args:
        outcomes: Method -> raw analyzer dict, or None if the analyzer failed

    Returns:
        One MethodScore per requested method
    """
    return [
        normalize_method(method, outcomes[method])
        for method in CANONICAL_ORDER
        if method in outcomes
    ]
