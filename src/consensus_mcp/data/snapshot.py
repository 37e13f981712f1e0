"""Build a FinancialSnapshot from a yfinance info payload.

The snapshot is a flat dict of ratios and growth rates as decimals
(0.15 = 15%). Every field is present; unknown values are None.
"""

import math
from typing import Any

# snapshot field -> yfinance info key
DIRECT_FIELDS: dict[str, str] = {
    "market_cap": "marketCap",
    "enterprise_value": "enterpriseValue",
    "current_price": "currentPrice",
    "price_to_earnings_ratio": "trailingPE",
    "forward_price_to_earnings_ratio": "forwardPE",
    "price_to_book_ratio": "priceToBook",
    "price_to_sales_ratio": "priceToSalesTrailing12Months",
    "enterprise_value_to_ebitda_ratio": "enterpriseToEbitda",
    "enterprise_value_to_revenue_ratio": "enterpriseToRevenue",
    "gross_margin": "grossMargins",
    "operating_margin": "operatingMargins",
    "net_margin": "profitMargins",
    "return_on_equity": "returnOnEquity",
    "return_on_assets": "returnOnAssets",
    "current_ratio": "currentRatio",
    "quick_ratio": "quickRatio",
    "revenue_growth": "revenueGrowth",
    "earnings_growth": "earningsGrowth",
    "payout_ratio": "payoutRatio",
    "earnings_per_share": "trailingEps",
    "book_value_per_share": "bookValue",
    "total_revenue": "totalRevenue",
    "free_cash_flow": "freeCashflow",
    "operating_cash_flow": "operatingCashflow",
    "total_cash": "totalCash",
    "total_debt": "totalDebt",
    "insider_ownership": "heldPercentInsiders",
    "fifty_two_week_high": "fiftyTwoWeekHigh",
    "fifty_two_week_low": "fiftyTwoWeekLow",
    "beta": "beta",
}


def _safe_float(value: Any) -> float | None:
    """Convert to float or return None (NaN/inf count as missing)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _ratio(numerator: float | None, denominator: float | None) -> float | None:
    if numerator is None or denominator is None or denominator == 0:
        return None
    return numerator / denominator


def build_financial_snapshot(symbol: str, info: dict[str, Any]) -> dict[str, Any]:
    """
    Map a yfinance info dict onto snapshot field names.

    Args:
        symbol: Ticker symbol
        info: Raw yfinance info payload

    Returns:
        Snapshot dict with every field present (None when unknown)
    """
    snapshot: dict[str, Any] = {"ticker": symbol.upper().strip()}
    for field_name, info_key in DIRECT_FIELDS.items():
        snapshot[field_name] = _safe_float(info.get(info_key))

    if snapshot["current_price"] is None:
        snapshot["current_price"] = _safe_float(info.get("regularMarketPrice"))

    peg = _safe_float(info.get("pegRatio"))
    if peg is None:
        peg = _safe_float(info.get("trailingPegRatio"))
    snapshot["peg_ratio"] = peg

    # yfinance reports debt/equity in percent (150.0 = 1.5x)
    de_pct = _safe_float(info.get("debtToEquity"))
    debt_to_equity = de_pct / 100 if de_pct is not None else None
    snapshot["debt_to_equity"] = debt_to_equity

    snapshot["free_cash_flow_yield"] = _ratio(snapshot["free_cash_flow"], snapshot["market_cap"])

    # Revenue / assets, recovered from ROA and net margin
    snapshot["asset_turnover"] = _ratio(snapshot["return_on_assets"], snapshot["net_margin"])

    # ROIC approximated as ROE scaled by the equity share of invested capital
    roe = snapshot["return_on_equity"]
    if roe is not None and debt_to_equity is not None and debt_to_equity >= 0:
        snapshot["return_on_invested_capital"] = roe / (1 + debt_to_equity)
    else:
        snapshot["return_on_invested_capital"] = roe

    cash = snapshot["total_cash"]
    debt = snapshot["total_debt"]
    snapshot["net_cash"] = cash - debt if cash is not None and debt is not None else None

    snapshot["cash_conversion"] = _ratio(
        snapshot["free_cash_flow"],
        _safe_float(info.get("netIncomeToCommon")),
    )
    return snapshot


def snapshot_coverage(snapshot: dict[str, Any]) -> float:
    """Share of snapshot fields that are populated, 0-1."""
    fields = [k for k in snapshot if k != "ticker"]
    if not fields:
        return 0.0
    return sum(1 for k in fields if snapshot[k] is not None) / len(fields)
