"""Utility modules."""

from consensus_mcp.utils.indicators import (
    calculate_bollinger_bands,
    calculate_ema,
    calculate_macd,
    calculate_max_drawdown,
    calculate_rsi,
    calculate_sharpe_ratio,
    calculate_sma,
    calculate_volatility,
    last_value,
)
from consensus_mcp.utils.ohlcv import csv_to_df, df_to_csv, standardize_ohlcv
from consensus_mcp.utils.provenance import ErrorType, build_error_response, build_meta, build_provenance
from consensus_mcp.utils.validators import FetchParams, check_rule, check_rule_expr

__all__ = [
    "calculate_bollinger_bands",
    "calculate_ema",
    "calculate_macd",
    "calculate_max_drawdown",
    "calculate_rsi",
    "calculate_sharpe_ratio",
    "calculate_sma",
    "calculate_volatility",
    "last_value",
    "csv_to_df",
    "df_to_csv",
    "standardize_ohlcv",
    "ErrorType",
    "build_error_response",
    "build_meta",
    "build_provenance",
    "FetchParams",
    "check_rule",
    "check_rule_expr",
]
