"""Upstream inputs shared by every analyzer: snapshot and price history."""

import logging
from typing import Any

import pandas as pd

from consensus_mcp.data.cache import analysis_cache
from consensus_mcp.data.snapshot import build_financial_snapshot
from consensus_mcp.data.yfinance_client import fetch_history, fetch_info
from consensus_mcp.utils.validators import FetchParams

logger = logging.getLogger(__name__)

PRICE_PERIOD = "1y"
PRICE_INTERVAL = "1d"


async def load_snapshot(symbol: str) -> dict[str, Any]:
    """
    Financial snapshot for a symbol, served from cache within the TTL.

    Raises:
        ValueError: If the symbol is invalid
        YFinanceRetryError: If yfinance keeps failing
    """
    cached = analysis_cache.get_snapshot(symbol)
    if cached is not None:
        logger.debug(f"load_snapshot({symbol}): cache hit")
        return cached

    info = await fetch_info(symbol)
    snapshot = build_financial_snapshot(symbol, info)
    analysis_cache.store_snapshot(symbol, snapshot)
    return snapshot


async def load_prices(symbol: str) -> pd.DataFrame:
    """
    One year of daily bars, served from cache within the TTL.

    Raises:
        ValueError: If no bars come back
        YFinanceRetryError: If yfinance keeps failing
    """
    params = FetchParams(symbol=symbol, period=PRICE_PERIOD, interval=PRICE_INTERVAL)
    cached = analysis_cache.get_prices(params)
    if cached is not None:
        logger.debug(f"load_prices({params.symbol}): cache hit")
        return cached

    df = await fetch_history(params)
    analysis_cache.store_prices(params, df)
    return df
