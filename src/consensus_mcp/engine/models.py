"""Core data types shared by the normalizer, weight manager and aggregator."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


def round_half_up(value: float) -> int:
    """Nearest integer with ties rounded up (64.5 -> 65), unlike round()."""
    return math.floor(value + 0.5)


class Method(str, Enum):
    """Analysis methods, declared in canonical order.

    Declaration order is the tie-break order used by weight
    auto-distribution and the order of every breakdown listing.
    """

    WARREN_BUFFETT = "warren_buffett"
    CHARLIE_MUNGER = "charlie_munger"
    PETER_LYNCH = "peter_lynch"
    BILL_ACKMAN = "bill_ackman"
    QUANTITATIVE = "quantitative"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, key: Any) -> "Method | None":
        """
        Resolve a method from an enum member, snake_case key, camelCase key
        or display name.

        Returns:
            Matching Method, or None if the key is not recognized
        """
        if isinstance(key, cls):
            return key
        if not isinstance(key, str):
            return None
        folded = key.strip().replace("-", "").replace("_", "").replace(" ", "").lower()
        for method in cls:
            if folded == method.value.replace("_", ""):
                return method
        return None


_DISPLAY_NAMES = {
    Method.WARREN_BUFFETT: "Warren Buffett",
    Method.CHARLIE_MUNGER: "Charlie Munger",
    Method.PETER_LYNCH: "Peter Lynch",
    Method.BILL_ACKMAN: "Bill Ackman",
    Method.QUANTITATIVE: "Quantitative",
}

CANONICAL_ORDER: tuple[Method, ...] = tuple(Method)


class Signal(str, Enum):
    """Directional call of a method or of the blended recommendation."""

    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"


@dataclass(frozen=True)
class MethodScore:
    """One method's normalized output.

    score and confidence are both on a 0-100 scale. Entries with
    available=False carry score=0 and confidence=0 and never enter a
    weighted sum, but stay in the breakdown shown to the user.
    """

    method: Method
    signal: Signal
    score: float
    confidence: float
    reasoning: str
    available: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "name": self.method.display_name,
            "signal": self.signal.value,
            "score": round(self.score, 1),
            "confidence": round(self.confidence, 1),
            "reasoning": self.reasoning,
            "available": self.available,
        }


@dataclass(frozen=True)
class SummaryRecommendation:
    """Blended recommendation. confidence and weighted_score are rounded integers."""

    recommendation: Signal
    confidence: int
    weighted_score: int
    reasoning: str
    key_insights: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "recommendation": self.recommendation.value,
            "confidence": self.confidence,
            "weighted_score": self.weighted_score,
            "reasoning": self.reasoning,
            "key_insights": list(self.key_insights),
            "strengths": list(self.strengths),
            "concerns": list(self.concerns),
        }


@dataclass(frozen=True)
class SummaryAnalysis:
    """Full result for one ticker: breakdown, configuration used and recommendation."""

    ticker: str
    method_scores: list[MethodScore]
    weights: dict[Method, float]
    selected_methods: dict[Method, bool]
    final_recommendation: SummaryRecommendation
    analysis_date: datetime

    @property
    def available_analyses(self) -> int:
        return sum(1 for s in self.method_scores if s.available)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.ticker,
            "analysis_date": self.analysis_date.isoformat(),
            "method_scores": [s.to_dict() for s in self.method_scores],
            "weights": {m.value: w for m, w in self.weights.items()},
            "selected_methods": {m.value: on for m, on in self.selected_methods.items()},
            "available_analyses": self.available_analyses,
            "recommendation": self.final_recommendation.to_dict(),
        }
