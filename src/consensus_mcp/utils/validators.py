"""Validation utilities and parameter classes."""

import operator
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# Allowlists keep cache keys stable
VALID_PERIODS = {"3mo", "6mo", "1y", "2y", "5y"}
VALID_INTERVALS = {"1d", "1wk"}


@dataclass(frozen=True)
class FetchParams:
    """Immutable price-history request. Used for cache key + fetch."""

    symbol: str
    period: str = "1y"
    interval: str = "1d"
    adjusted: bool = True

    def __post_init__(self) -> None:
        symbol = self.symbol.upper().strip()
        if not symbol:
            raise ValueError("Symbol must not be empty")
        object.__setattr__(self, "symbol", symbol)

        period = self.period.lower().strip()
        interval = self.interval.lower().strip()
        if period not in VALID_PERIODS:
            raise ValueError(f"Invalid period '{self.period}'. Must be one of: {sorted(VALID_PERIODS)}")
        if interval not in VALID_INTERVALS:
            raise ValueError(
                f"Invalid interval '{self.interval}'. Must be one of: {sorted(VALID_INTERVALS)}"
            )
        object.__setattr__(self, "period", period)
        object.__setattr__(self, "interval", interval)

    def to_uri(self) -> str:
        """Canonical URI for caching."""
        adj = "adjusted" if self.adjusted else "unadjusted"
        return f"price://{self.symbol}/{self.period}/{self.interval}/{adj}"

    def to_yf_kwargs(self) -> dict[str, Any]:
        """Kwargs for yf.download()."""
        return {
            "tickers": self.symbol,
            "period": self.period,
            "interval": self.interval,
            "auto_adjust": self.adjusted,
            "progress": False,
        }


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Compare a nullable value against a threshold.

    Returns None (not False) when the value is missing, so callers can
    tell "rule failed" apart from "rule could not be evaluated".
    """
    if value is None:
        return None
    return comparator(value, threshold)


def check_rule_expr(
    value1: float | None,
    value2: float | None,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """Compare two nullable values. None if either is missing."""
    if value1 is None or value2 is None:
        return None
    return comparator(value1, value2)
