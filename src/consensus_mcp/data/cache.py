"""Short-lived cache of upstream data for repeated aggregations.

Changing weights or toggling a method re-runs the aggregation from
scratch; caching the snapshot and price history keeps that from
refetching the same ticker within the TTL.
"""

import gzip
import hashlib
import os
from datetime import datetime
from typing import Any

import diskcache
import pandas as pd

from consensus_mcp.utils.ohlcv import csv_to_df, df_to_csv
from consensus_mcp.utils.validators import FetchParams


class AnalysisCache:
    """diskcache store for FinancialSnapshots and gzipped price CSVs."""

    def __init__(self, cache_dir: str | None = None, default_ttl: int | None = None):
        if cache_dir is None:
            cache_dir = os.environ.get("CACHE_DIR", ".cache/consensus")
        self.cache: diskcache.Cache = diskcache.Cache(cache_dir)
        if default_ttl is None:
            default_ttl = int(os.environ.get("CACHE_TTL", "300"))
        self._default_ttl = default_ttl

    @staticmethod
    def snapshot_key(symbol: str) -> str:
        return f"snapshot://{symbol.upper().strip()}"

    def store_snapshot(self, symbol: str, snapshot: dict[str, Any], ttl: int | None = None) -> str:
        """Store a snapshot dict, return its key."""
        key = self.snapshot_key(symbol)
        entry = {"snapshot": snapshot, "stored_at": datetime.utcnow().isoformat()}
        self.cache.set(key, entry, expire=ttl if ttl is not None else self._default_ttl)
        return key

    def get_snapshot(self, symbol: str) -> dict[str, Any] | None:
        entry = self.cache.get(self.snapshot_key(symbol))
        if not entry:
            return None
        return entry["snapshot"]

    def store_prices(self, params: FetchParams, df: pd.DataFrame, ttl: int | None = None) -> str:
        """
        Store standardized price history as gzipped CSV.

        Returns:
            Canonical price URI used as the key
        """
        uri = params.to_uri()
        csv_bytes = df_to_csv(df).encode("utf-8")
        entry: dict[str, Any] = {
            "csv_gz": gzip.compress(csv_bytes),
            "rows": len(df),
            "hash": hashlib.sha256(csv_bytes).hexdigest()[:16],
            "stored_at": datetime.utcnow().isoformat(),
        }
        self.cache.set(uri, entry, expire=ttl if ttl is not None else self._default_ttl)
        return uri

    def get_prices(self, params: FetchParams) -> pd.DataFrame | None:
        entry = self.cache.get(params.to_uri())
        if not entry:
            return None
        return csv_to_df(gzip.decompress(entry["csv_gz"]).decode("utf-8"))

    def clear(self) -> None:
        """Clear all cached data."""
        self.cache.clear()


# Global instance
analysis_cache = AnalysisCache()
