"""Shared helpers for the rule-based analyzers."""

from collections.abc import Iterable, Sequence
from typing import Any


def tier(
    value: float | None,
    bands: Sequence[tuple[float, float]],
    default: float = 0,
    strict: bool = False,
) -> float:
    """
    Points for the first band whose floor the value reaches.

    Bands are (minimum, points) pairs, highest minimum first. With
    strict=True the value must exceed the floor. A missing value scores
    the default.
    """
    if value is None:
        return default
    for minimum, points in bands:
        if value > minimum or (not strict and value == minimum):
            return points
    return default


def tier_below(value: float | None, bands: Sequence[tuple[float, float]], default: float = 0) -> float:
    """Like tier() for lower-is-better metrics: bands are (maximum, points), lowest maximum first."""
    if value is None:
        return default
    for maximum, points in bands:
        if value < maximum:
            return points
    return default


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def directional_signal(score: float, bullish_min: float, bearish_max: float) -> str:
    """bullish / bearish / neutral from a 0-10 score."""
    if score >= bullish_min:
        return "bullish"
    if score <= bearish_max:
        return "bearish"
    return "neutral"


def require_any(snapshot: dict[str, Any], fields: Iterable[str], method: str) -> None:
    """Raise ValueError if none of the fields the method depends on is populated."""
    fields = list(fields)
    if not any(snapshot.get(f) is not None for f in fields):
        raise ValueError(f"{method}: none of {fields} available")


def pct(value: float | None) -> str:
    """Format a decimal ratio as a percentage for reasoning text."""
    return "n/a" if value is None else f"{value * 100:.1f}%"
