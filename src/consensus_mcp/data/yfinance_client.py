"""yfinance access for the consensus analyzers.

yfinance is blocking, so every call runs on a small thread pool behind a
semaphore. Transient upstream failures (rate limits, 5xx, broken crumbs)
are retried with jittered exponential backoff, and concurrent info
requests for one symbol share a single upstream call.
"""

import asyncio
import logging
import math
import os
import random
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import pandas as pd
import yfinance as yf
from requests.exceptions import HTTPError

from consensus_mcp.utils.ohlcv import standardize_ohlcv
from consensus_mcp.utils.validators import FetchParams

logger = logging.getLogger(__name__)

T = TypeVar("T")

_max_workers = int(os.environ.get("YF_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers, thread_name_prefix="yfinance")
_fetch_semaphore = asyncio.Semaphore(_max_workers)

shutdown_event = asyncio.Event()

# An equity payload without any of these is a crumb failure, not a real answer
CORE_INFO_KEYS: tuple[str, ...] = (
    "totalRevenue",
    "revenueGrowth",
    "profitMargins",
    "grossMargins",
    "operatingCashflow",
    "freeCashflow",
    "returnOnEquity",
)

TRANSIENT_MESSAGES: tuple[str, ...] = ("rate limit", "too many requests", "connection", "timeout", "temporary")


class ServerShuttingDownError(Exception):
    """Raised when a fetch is attempted after shutdown started."""


class YFinanceRetryError(Exception):
    """Raised when a retryable yfinance failure outlasts the retry budget."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


class YFinanceIncompleteInfoError(RuntimeError):
    """Raised when an equity info payload has no fundamentals at all."""

    def __init__(self, symbol: str, key_count: int):
        super().__init__(f"Incomplete yfinance info for {symbol}: keys={key_count}")
        self.symbol = symbol
        self.key_count = key_count


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff settings for upstream calls."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0

    @classmethod
    def from_env(cls) -> "RetryPolicy":
        return cls(
            max_retries=int(os.environ.get("YF_MAX_RETRIES", "3")),
            base_delay=float(os.environ.get("YF_BASE_DELAY", "1.0")),
            max_delay=float(os.environ.get("YF_MAX_DELAY", "30.0")),
        )

    def delay(self, attempt: int) -> float:
        """Seconds to wait after a failed attempt (0-based), +/-25% jitter."""
        delay = self.base_delay * (2**attempt)
        delay += delay * 0.25 * (2 * random.random() - 1)
        return max(0.0, min(delay, self.max_delay))

    def retries_for(self, error: Exception) -> int:
        """
        How many retries an error deserves.

        Returns:
            0 for errors that will not go away on their own
        """
        if isinstance(error, YFinanceIncompleteInfoError):
            return min(2, self.max_retries)

        response = getattr(error, "response", None)
        if isinstance(error, HTTPError) and response is not None:
            if response.status_code == 401:
                return min(1, self.max_retries)
            if response.status_code == 429 or 500 <= response.status_code < 600:
                return self.max_retries

        message = str(error).lower()
        if "401" in message or "invalid crumb" in message:
            return min(2, self.max_retries)
        if any(pattern in message for pattern in TRANSIENT_MESSAGES):
            return self.max_retries
        return 0


retry_policy = RetryPolicy.from_env()


def has_value(v: Any) -> bool:
    """True unless v is None, NaN or a blank string."""
    if v is None:
        return False
    if isinstance(v, float):
        return not math.isnan(v)
    if isinstance(v, str):
        return bool(v.strip())
    return True


def is_info_complete(info: dict[str, Any]) -> bool:
    """
    Whether an info payload can feed a FinancialSnapshot.

    Only equities (or payloads with no quoteType) are required to carry
    fundamentals; funds and indices pass on quote data alone.
    """
    if not info:
        return False
    quote_type = str(info.get("quoteType") or "").upper()
    if quote_type and quote_type != "EQUITY":
        return True
    return any(has_value(info.get(key)) for key in CORE_INFO_KEYS)


async def _call_with_retry(operation: str, sync_func: Callable[[], T]) -> T:
    """
    Run a blocking call on the executor, retrying what the policy allows.

    Raises:
        YFinanceRetryError: If retryable failures outlast the budget
        ServerShuttingDownError: If shutdown starts between attempts
    """
    policy = retry_policy
    attempt = 0
    while True:
        if shutdown_event.is_set():
            raise ServerShuttingDownError("Server is shutting down")
        try:
            return await asyncio.get_running_loop().run_in_executor(_executor, sync_func)
        except Exception as e:
            allowed = policy.retries_for(e)
            if allowed == 0:
                raise
            if attempt >= allowed:
                logger.warning(f"{operation}: giving up after {attempt + 1} attempts: {e}")
                raise YFinanceRetryError(f"Failed after {attempt + 1} attempts: {e}", last_error=e) from e

            delay = policy.delay(attempt)
            logger.info(f"{operation}: attempt {attempt + 1} failed ({e}), retrying in {delay:.1f}s")
            await asyncio.sleep(delay)
            attempt += 1


class SingleFlight(Generic[T]):
    """
    Coalesce concurrent calls that share a key into one in-flight task.

    Callers that join an existing task await it through asyncio.shield,
    so a cancelled joiner leaves the shared call running.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[T]] = {}
        self._lock = asyncio.Lock()

    def in_flight(self, key: str) -> bool:
        return key in self._tasks

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            task = self._tasks.get(key)
            joined = task is not None
            if task is None:
                task = asyncio.ensure_future(factory())
                self._tasks[key] = task
            else:
                logger.debug(f"singleflight({key}): joining in-flight call")

        try:
            return await (asyncio.shield(task) if joined else task)
        finally:
            async with self._lock:
                if self._tasks.get(key) is task:
                    del self._tasks[key]


_info_requests: SingleFlight[dict[str, Any]] = SingleFlight()


async def fetch_history(params: FetchParams) -> pd.DataFrame:
    """
    Standardized OHLCV bars for one request.

    Raises:
        ServerShuttingDownError: If server is shutting down
        YFinanceRetryError: If retryable failures outlast the budget
        ValueError: If no bars come back for the symbol
    """
    if shutdown_event.is_set():
        raise ServerShuttingDownError("Server is shutting down")

    def download() -> pd.DataFrame:
        df = yf.download(**params.to_yf_kwargs())
        if df is None or df.empty:
            raise ValueError(f"No data returned for {params.symbol}")
        return standardize_ohlcv(df)

    async with _fetch_semaphore:
        return await _call_with_retry(f"fetch_history({params.symbol})", download)


async def _fetch_info_uncoalesced(symbol: str) -> dict[str, Any]:
    def load() -> dict[str, Any]:
        info = yf.Ticker(symbol).info
        if not info:
            raise ValueError(f"Invalid symbol: {symbol}")
        if not is_info_complete(info):
            raise YFinanceIncompleteInfoError(symbol, key_count=len(info))
        return info

    async with _fetch_semaphore:
        return await _call_with_retry(f"fetch_info({symbol})", load)


async def fetch_info(symbol: str) -> dict[str, Any]:
    """
    yfinance info payload for a symbol.

    Raises:
        ServerShuttingDownError: If server is shutting down
        YFinanceRetryError: If retryable failures outlast the budget
        ValueError: If the symbol is unknown upstream
    """
    if shutdown_event.is_set():
        raise ServerShuttingDownError("Server is shutting down")
    normalized = symbol.upper().strip()
    return await _info_requests.run(normalized, lambda: _fetch_info_uncoalesced(normalized))


async def shutdown_executor() -> None:
    """Refuse new fetches and drop queued ones."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)
