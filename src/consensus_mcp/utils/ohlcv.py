"""OHLCV data standardization utilities."""

import io

import pandas as pd

CANONICAL_COLUMNS = ["date", "open", "high", "low", "close", "volume"]


def standardize_ohlcv(df: pd.DataFrame) -> pd.DataFrame:
    """
    Standardize a yfinance download to a fixed schema.

    Output columns, in order: date, open, high, low, close, volume.
    Lowercase, no 'Adj Close', dates as YYYY-MM-DD strings, missing
    columns filled with NA.
    """
    df = df.copy()

    # yf.download returns a MultiIndex even for one ticker in recent versions
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)
    if "Adj Close" in df.columns:
        df = df.drop(columns=["Adj Close"])

    df.columns = df.columns.str.lower()
    df = df.reset_index()

    date_cols = [c for c in df.columns if str(c).lower() in ("date", "datetime", "index")]
    if date_cols:
        df = df.rename(columns={date_cols[0]: "date"})
    if "date" in df.columns and pd.api.types.is_datetime64_any_dtype(df["date"]):
        df["date"] = df["date"].dt.strftime("%Y-%m-%d")

    for col in CANONICAL_COLUMNS:
        if col not in df.columns:
            df[col] = pd.NA
    return df[CANONICAL_COLUMNS]


def df_to_csv(df: pd.DataFrame) -> str:
    """Serialize for the cache."""
    return df.to_csv(index=False)


def csv_to_df(csv_text: str) -> pd.DataFrame:
    """Inverse of df_to_csv; dates stay as strings."""
    return pd.read_csv(io.StringIO(csv_text), dtype={"date": str})
