"""Quantitative blend of technical signals, fundamental screens and risk."""

import operator
from typing import Any

import pandas as pd

from consensus_mcp.analyzers.scoring import clamp
from consensus_mcp.utils.indicators import (
    calculate_bollinger_bands,
    calculate_ema,
    calculate_macd,
    calculate_max_drawdown,
    calculate_rsi,
    calculate_sharpe_ratio,
    calculate_sma,
    last_value,
)
from consensus_mcp.utils.validators import check_rule, check_rule_expr

MIN_BARS = 50
RSI_PERIOD = 21
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70
BAND_PROXIMITY = 0.02

# riskAdjusted = 40% technical + 50% fundamental + risk adjustment
TECHNICAL_WEIGHT = 0.4
FUNDAMENTAL_WEIGHT = 0.5
RISK_ADJUSTMENT = 5
DRAWDOWN_LIMIT = -0.30

RECOMMENDATION_BANDS: list[tuple[float, str]] = [
    (75, "BUY"),
    (60, "WEAK_BUY"),
    (40, "HOLD"),
    (25, "WEAK_SELL"),
]

PORTFOLIO_ALLOCATION = {
    "BUY": "5-10% allocation recommended",
    "WEAK_BUY": "2-5% allocation, small position",
    "HOLD": "Maintain current position",
    "WEAK_SELL": "Reduce position size by 25-50%",
    "SELL": "0% new money, consider reducing existing positions",
}


def _above(price: float, level: float | None) -> bool:
    return bool(check_rule_expr(price, level, operator.gt))


def technical_signals(df: pd.DataFrame) -> dict[str, bool]:
    """Boolean trend, momentum, band and volume flags at the latest bar."""
    close = df["close"].astype(float)
    volume = df["volume"].astype(float)
    price = float(close.iloc[-1])

    rsi = last_value(calculate_rsi(close, RSI_PERIOD))
    histogram = last_value(calculate_macd(close)["histogram"])
    bands = calculate_bollinger_bands(close)
    upper = last_value(bands["upper"])
    lower = last_value(bands["lower"])
    avg_volume = last_value(calculate_sma(volume, 20))

    return {
        "above_sma20": _above(price, last_value(calculate_sma(close, 20))),
        "above_sma50": _above(price, last_value(calculate_sma(close, 50))),
        "above_sma200": _above(price, last_value(calculate_sma(close, 200))),
        "above_ema20": _above(price, last_value(calculate_ema(close, 20))),
        "above_ema50": _above(price, last_value(calculate_ema(close, 50))),
        "rsi_oversold": rsi is not None and rsi < RSI_OVERSOLD,
        "rsi_overbought": rsi is not None and rsi > RSI_OVERBOUGHT,
        "macd_bullish": histogram is not None and histogram > 0,
        "macd_bearish": histogram is not None and histogram < 0,
        "near_upper_band": upper is not None and price > upper * (1 - BAND_PROXIMITY),
        "near_lower_band": lower is not None and price < lower * (1 + BAND_PROXIMITY),
        "volume_above_average": avg_volume is not None and float(volume.iloc[-1]) > avg_volume,
    }


def technical_score(signals: dict[str, bool]) -> float:
    score = 50.0
    score += 10 if signals["above_sma200"] else 0
    score += 8 if signals["above_sma50"] else 0
    score += 7 if signals["above_sma20"] else 0
    score += 3 if signals["above_ema50"] else 0
    score += 2 if signals["above_ema20"] else 0

    if signals["rsi_oversold"]:
        score += 15
    if signals["rsi_overbought"]:
        score -= 15
    if signals["macd_bullish"]:
        score += 10
    if signals["macd_bearish"]:
        score -= 10

    if signals["volume_above_average"]:
        score += 10

    # Band touches only count when momentum agrees
    if signals["near_lower_band"] and signals["rsi_oversold"]:
        score += 15
    if signals["near_upper_band"] and signals["rsi_overbought"]:
        score -= 15
    return clamp(score, 0, 100)


def fundamental_signals(snapshot: dict[str, Any]) -> dict[str, bool]:
    def gt(field: str, threshold: float) -> bool:
        return bool(check_rule(snapshot.get(field), threshold, operator.gt))

    def lt(field: str, threshold: float) -> bool:
        return bool(check_rule(snapshot.get(field), threshold, operator.lt))

    return {
        "peg_overvalued": gt("peg_ratio", 2.0),
        "pe_overvalued": gt("price_to_earnings_ratio", 25),
        "pb_overvalued": gt("price_to_book_ratio", 5),
        "has_growth": gt("revenue_growth", 0.02),
        "strong_growth": gt("revenue_growth", 0.10),
        "liquidity_risk": lt("current_ratio", 1.0),
        "debt_concern": gt("debt_to_equity", 0.5),
        "strong_margins": gt("gross_margin", 0.4) and gt("operating_margin", 0.2),
        "good_roe": gt("return_on_equity", 0.15),
    }


def fundamental_score(signals: dict[str, bool]) -> float:
    score = 50.0
    score -= 20 if signals["peg_overvalued"] else 0
    score -= 10 if signals["pe_overvalued"] else 0
    score -= 5 if signals["pb_overvalued"] else 0

    if signals["strong_growth"]:
        score += 25
    elif signals["has_growth"]:
        score += 10
    else:
        score -= 15

    score -= 15 if signals["liquidity_risk"] else 0
    score -= 10 if signals["debt_concern"] else 0
    score += 15 if signals["strong_margins"] else 0
    score += 10 if signals["good_roe"] else 0
    return clamp(score, 0, 100)


def risk_adjustment(sharpe: float | None, max_drawdown: float | None) -> int:
    if sharpe is not None and sharpe > 1:
        return RISK_ADJUSTMENT
    if max_drawdown is not None and max_drawdown < DRAWDOWN_LIMIT:
        return -RISK_ADJUSTMENT
    return 0


def classify(risk_adjusted: float) -> str:
    for minimum, label in RECOMMENDATION_BANDS:
        if risk_adjusted >= minimum:
            return label
    return "SELL"


def analyze_quantitative(df: pd.DataFrame, snapshot: dict[str, Any]) -> dict[str, Any]:
    """
    Blend technical and fundamental scores with a risk adjustment.

    Args:
        df: Standardized OHLCV frame, oldest bar first
        snapshot: Financial snapshot

    Returns:
        Dict with technical_score, fundamental_score, risk_adjusted_score,
        recommendation (BUY/WEAK_BUY/HOLD/WEAK_SELL/SELL), both verdicts,
        rationale and portfolio_allocation

    Raises:
        ValueError: With fewer than 50 price bars
    """
    if df is None or len(df) < MIN_BARS:
        raise ValueError(f"quantitative: need {MIN_BARS} bars, got {0 if df is None else len(df)}")

    close = df["close"].astype(float)
    returns = close.pct_change().dropna()
    sharpe = calculate_sharpe_ratio(returns)
    max_drawdown = calculate_max_drawdown(close)

    tech_signals = technical_signals(df)
    fund_signals = fundamental_signals(snapshot)
    tech = technical_score(tech_signals)
    fund = fundamental_score(fund_signals)
    risk_adjusted = (
        tech * TECHNICAL_WEIGHT + fund * FUNDAMENTAL_WEIGHT + risk_adjustment(sharpe, max_drawdown)
    )
    recommendation = classify(risk_adjusted)

    rationale: list[str] = []
    if not tech_signals["above_sma20"]:
        rationale.append("Price below key moving averages")
    if tech_signals["macd_bearish"]:
        rationale.append("MACD showing bearish momentum")
    if fund_signals["peg_overvalued"]:
        rationale.append("PEG ratio overvalued (>2.0)")
    if not fund_signals["has_growth"]:
        rationale.append("Zero or minimal revenue growth")
    if fund_signals["liquidity_risk"]:
        rationale.append("Current ratio below 1.0, liquidity risk")
    if fund_signals["strong_margins"]:
        rationale.append("Strong profit margins")
    if sharpe is not None and sharpe > 1:
        rationale.append("Excellent Sharpe ratio")

    return {
        "ticker": snapshot.get("ticker"),
        "technical_score": tech,
        "fundamental_score": fund,
        "risk_adjusted_score": round(risk_adjusted, 2),
        "recommendation": recommendation,
        "technical_verdict": "BULLISH" if tech >= 60 else "NEUTRAL" if tech >= 40 else "BEARISH",
        "fundamental_verdict": "BUY" if fund >= 60 else "HOLD" if fund >= 40 else "SELL/AVOID",
        "sharpe_ratio": sharpe,
        "max_drawdown": max_drawdown,
        "rationale": rationale,
        "portfolio_allocation": PORTFOLIO_ALLOCATION[recommendation],
    }
