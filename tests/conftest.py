"""Pytest configuration and fixtures."""

from collections.abc import Callable

import numpy as np
import pandas as pd
import pytest

from consensus_mcp.data.cache import AnalysisCache
from consensus_mcp.engine.models import Method, MethodScore, Signal


@pytest.fixture
def sample_ohlcv_df() -> pd.DataFrame:
    """Sample OHLCV DataFrame for testing."""
    return pd.DataFrame(
        {
            "Date": pd.date_range("2024-01-01", periods=10, freq="D"),
            "Open": [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5],
            "High": [101.0, 102.5, 103.0, 102.5, 104.5, 105.5, 105.0, 106.5, 107.0, 106.5],
            "Low": [99.5, 100.5, 101.0, 100.5, 102.0, 103.0, 102.5, 104.0, 105.0, 104.5],
            "Close": [100.5, 102.0, 101.5, 102.0, 104.0, 103.5, 104.5, 106.0, 105.5, 106.0],
            "Volume": [1000000] * 10,
        }
    ).set_index("Date")


@pytest.fixture
def sample_ohlcv_df_with_adj_close(sample_ohlcv_df: pd.DataFrame) -> pd.DataFrame:
    """Sample OHLCV DataFrame with Adj Close column."""
    df = sample_ohlcv_df.copy()
    df["Adj Close"] = df["Close"] - 0.5
    return df


@pytest.fixture
def sample_price_series() -> pd.Series:
    """Sample price series for indicator testing."""
    return pd.Series(
        [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5,
         107.0, 108.0, 107.5, 109.0, 110.0, 109.5, 111.0, 112.0, 111.5, 113.0,
         114.0, 113.5, 115.0, 116.0, 115.5, 117.0, 118.0, 117.5, 119.0, 120.0]
    )


@pytest.fixture
def sample_returns_series(sample_price_series: pd.Series) -> pd.Series:
    """Sample returns series for indicator testing."""
    return sample_price_series.pct_change().dropna()


def _price_frame(closes: np.ndarray) -> pd.DataFrame:
    n = len(closes)
    return pd.DataFrame(
        {
            "date": pd.date_range("2024-01-01", periods=n, freq="B").strftime("%Y-%m-%d"),
            "open": closes * 0.995,
            "high": closes * 1.01,
            "low": closes * 0.99,
            "close": closes,
            "volume": np.full(n, 1_000_000.0),
        }
    )


@pytest.fixture
def uptrend_prices() -> pd.DataFrame:
    """250 standardized daily bars drifting steadily upward."""
    rng = np.random.default_rng(7)
    steps = 0.002 + rng.normal(0, 0.004, 250)
    return _price_frame(100 * np.cumprod(1 + steps))


@pytest.fixture
def downtrend_prices() -> pd.DataFrame:
    """250 standardized daily bars falling more than 30% overall."""
    rng = np.random.default_rng(11)
    steps = -0.003 + rng.normal(0, 0.004, 250)
    return _price_frame(100 * np.cumprod(1 + steps))


@pytest.fixture
def quality_snapshot() -> dict:
    """Snapshot of a profitable, growing, lightly levered company."""
    return {
        "ticker": "QUAL",
        "market_cap": 50e9,
        "current_price": 150.0,
        "price_to_earnings_ratio": 18.0,
        "price_to_book_ratio": 6.0,
        "peg_ratio": 1.2,
        "gross_margin": 0.55,
        "operating_margin": 0.30,
        "net_margin": 0.22,
        "return_on_equity": 0.35,
        "return_on_assets": 0.15,
        "return_on_invested_capital": 0.30,
        "asset_turnover": 0.68,
        "current_ratio": 2.0,
        "debt_to_equity": 0.2,
        "revenue_growth": 0.25,
        "earnings_growth": 0.30,
        "payout_ratio": 0.2,
        "free_cash_flow": 5e9,
        "free_cash_flow_yield": 0.10,
    }


@pytest.fixture
def weak_snapshot() -> dict:
    """Snapshot of a shrinking, over-levered, barely profitable company."""
    return {
        "ticker": "WEAK",
        "market_cap": 30e9,
        "current_price": 20.0,
        "price_to_earnings_ratio": 45.0,
        "price_to_book_ratio": 7.0,
        "peg_ratio": 3.5,
        "gross_margin": 0.12,
        "operating_margin": -0.02,
        "net_margin": -0.05,
        "return_on_equity": 0.02,
        "return_on_assets": 0.01,
        "return_on_invested_capital": 0.01,
        "asset_turnover": 0.3,
        "current_ratio": 0.7,
        "debt_to_equity": 2.5,
        "revenue_growth": -0.08,
        "earnings_growth": -0.20,
        "payout_ratio": 0.0,
        "free_cash_flow": -1e9,
        "free_cash_flow_yield": -0.03,
    }


@pytest.fixture
def make_score() -> Callable[..., MethodScore]:
    """Factory for MethodScore entries with sensible defaults."""

    def _make(
        method: Method,
        score: float = 50,
        confidence: float = 80,
        signal: Signal = Signal.HOLD,
        available: bool = True,
    ) -> MethodScore:
        return MethodScore(
            method=method,
            signal=signal,
            score=score,
            confidence=confidence,
            reasoning=f"{method.display_name} test reasoning",
            available=available,
        )

    return _make


@pytest.fixture
def tmp_cache(tmp_path) -> AnalysisCache:
    """AnalysisCache backed by a per-test directory."""
    cache = AnalysisCache(cache_dir=str(tmp_path / "cache"), default_ttl=300)
    yield cache
    cache.cache.close()
