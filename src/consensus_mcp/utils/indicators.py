"""Price indicators used by the quantitative analyzer."""

import math

import numpy as np
import pandas as pd

TRADING_DAYS = 252


def last_value(series: pd.Series) -> float | None:
    """Last element as float, or None if the series is empty or ends in NaN."""
    if len(series) == 0 or pd.isna(series.iloc[-1]):
        return None
    return float(series.iloc[-1])


def calculate_sma(prices: pd.Series, period: int) -> pd.Series:
    """Simple moving average; NaN until a full window is available."""
    return prices.rolling(window=period, min_periods=period).mean()


def calculate_ema(prices: pd.Series, period: int) -> pd.Series:
    """Exponential moving average (span-based, not adjusted)."""
    return prices.ewm(span=period, adjust=False, min_periods=period).mean()


def calculate_rsi(prices: pd.Series, period: int = 14) -> pd.Series:
    """
    Relative Strength Index on a 0-100 scale.

    Uses Wilder's smoothing (alpha = 1/period). A window with no losses
    reads as 100.
    """
    delta = prices.diff()
    gain = delta.clip(lower=0.0)
    loss = (-delta).clip(lower=0.0)

    avg_gain = gain.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
    avg_loss = loss.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()

    rsi = 100 - (100 / (1 + avg_gain / avg_loss))
    return rsi.replace([np.inf, -np.inf], 100)


def calculate_macd(
    prices: pd.Series,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> dict[str, pd.Series]:
    """
    MACD line, signal line and histogram.

    Args:
        prices: Close prices
        fast: Fast EMA period
        slow: Slow EMA period
        signal: Signal EMA period

    Returns:
        Dict with 'macd_line', 'signal_line', 'histogram'
    """
    macd_line = calculate_ema(prices, fast) - calculate_ema(prices, slow)
    signal_line = calculate_ema(macd_line, signal)
    return {
        "macd_line": macd_line,
        "signal_line": signal_line,
        "histogram": macd_line - signal_line,
    }


def calculate_bollinger_bands(
    prices: pd.Series,
    period: int = 20,
    num_std: float = 2.0,
) -> dict[str, pd.Series]:
    """
    Bollinger bands around an SMA.

    Returns:
        Dict with 'middle', 'upper', 'lower'
    """
    middle = calculate_sma(prices, period)
    std = prices.rolling(window=period, min_periods=period).std()
    return {
        "middle": middle,
        "upper": middle + num_std * std,
        "lower": middle - num_std * std,
    }


def calculate_volatility(returns: pd.Series, annualize: bool = True) -> float | None:
    """Standard deviation of daily returns, annualized by default. Needs 20 returns."""
    if len(returns) < 20:
        return None
    std = returns.std()
    if pd.isna(std):
        return None
    return float(std * math.sqrt(TRADING_DAYS)) if annualize else float(std)


def calculate_max_drawdown(prices: pd.Series) -> float | None:
    """
    Worst peak-to-trough decline.

    Returns:
        Negative decimal (-0.20 = 20% drawdown), or None
    """
    if len(prices) < 2:
        return None
    running_peak = prices.cummax()
    worst = ((prices - running_peak) / running_peak).min()
    if pd.isna(worst):
        return None
    return float(worst)


def calculate_sharpe_ratio(returns: pd.Series, risk_free_rate: float = 0.0) -> float | None:
    """
    Annualized Sharpe ratio of daily returns.

    Args:
        returns: Daily returns
        risk_free_rate: Annual risk-free rate as decimal

    Returns:
        Sharpe ratio, or None with fewer than 20 returns or zero volatility
    """
    vol = calculate_volatility(returns, annualize=True)
    if vol is None or vol == 0:
        return None
    annual_return = float(returns.mean()) * TRADING_DAYS
    return (annual_return - risk_free_rate) / vol
