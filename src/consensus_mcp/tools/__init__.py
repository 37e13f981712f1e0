"""Consensus analysis tools."""

from consensus_mcp.tools.summary import method_scores, summary_analysis
from consensus_mcp.tools.weights import distribute_weights, weight_presets

__all__ = [
    "distribute_weights",
    "method_scores",
    "summary_analysis",
    "weight_presets",
]
