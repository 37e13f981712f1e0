"""Data layer for fetching and caching market data."""

from consensus_mcp.data.cache import AnalysisCache, analysis_cache
from consensus_mcp.data.snapshot import build_financial_snapshot, snapshot_coverage
from consensus_mcp.data.yfinance_client import (
    ServerShuttingDownError,
    YFinanceIncompleteInfoError,
    YFinanceRetryError,
    fetch_history,
    fetch_info,
    is_info_complete,
    shutdown_executor,
)

__all__ = [
    # Cache
    "AnalysisCache",
    "analysis_cache",
    # Snapshot
    "build_financial_snapshot",
    "snapshot_coverage",
    # yfinance
    "ServerShuttingDownError",
    "YFinanceIncompleteInfoError",
    "YFinanceRetryError",
    "fetch_history",
    "fetch_info",
    "is_info_complete",
    "shutdown_executor",
]
