"""Signal normalization, weighting and aggregation engine."""

from consensus_mcp.engine.aggregator import AggregateTotals, aggregate, compute_totals, decide
from consensus_mcp.engine.models import (
    CANONICAL_ORDER,
    Method,
    MethodScore,
    Signal,
    SummaryAnalysis,
    SummaryRecommendation,
)
from consensus_mcp.engine.normalizer import collect_method_scores, normalize_signal
from consensus_mcp.engine.weights import DEFAULT_WEIGHTS, PRESETS, Preset, WeightManager

__all__ = [
    # Models
    "CANONICAL_ORDER",
    "Method",
    "MethodScore",
    "Signal",
    "SummaryAnalysis",
    "SummaryRecommendation",
    # Normalizer
    "collect_method_scores",
    "normalize_signal",
    # Weights
    "DEFAULT_WEIGHTS",
    "PRESETS",
    "Preset",
    "WeightManager",
    # Aggregator
    "AggregateTotals",
    "aggregate",
    "compute_totals",
    "decide",
]
