"""Per-method investment analyzers.

Each analyzer takes a financial snapshot (and, for the quantitative
method, a price history) and returns its own raw result dict. The
engine's normalizer turns those into comparable method scores.
"""

from consensus_mcp.analyzers.ackman import analyze_ackman
from consensus_mcp.analyzers.buffett import analyze_buffett
from consensus_mcp.analyzers.lynch import analyze_lynch
from consensus_mcp.analyzers.munger import analyze_munger
from consensus_mcp.analyzers.quantitative import analyze_quantitative

__all__ = [
    "analyze_ackman",
    "analyze_buffett",
    "analyze_lynch",
    "analyze_munger",
    "analyze_quantitative",
]
