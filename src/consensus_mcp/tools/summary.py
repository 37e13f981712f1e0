"""Multi-method summary analysis tool."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from time import perf_counter
from typing import Any

from consensus_mcp.analyzers import (
    analyze_ackman,
    analyze_buffett,
    analyze_lynch,
    analyze_munger,
    analyze_quantitative,
)
from consensus_mcp.data.snapshot import snapshot_coverage
from consensus_mcp.engine import (
    CANONICAL_ORDER,
    Method,
    SummaryAnalysis,
    WeightManager,
    aggregate,
    collect_method_scores,
)
from consensus_mcp.engine.weights import PRESETS
from consensus_mcp.tools.inputs import load_prices, load_snapshot
from consensus_mcp.utils.provenance import ErrorType, build_error_response, build_meta, build_provenance

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 10.0

SNAPSHOT_ANALYZERS: dict[Method, Callable[[dict[str, Any]], dict[str, Any]]] = {
    Method.WARREN_BUFFETT: analyze_buffett,
    Method.CHARLIE_MUNGER: analyze_munger,
    Method.PETER_LYNCH: analyze_lynch,
    Method.BILL_ACKMAN: analyze_ackman,
}


class ConfigError(ValueError):
    """Raised when a weight/selection/preset argument cannot be used at all."""


def resolve_config(
    weights: Mapping[str, Any] | None = None,
    selected_methods: Mapping[str, Any] | Iterable[str] | None = None,
    preset: str | None = None,
) -> WeightManager:
    """
    Build the weight configuration for one call.

    Applied in order: preset, then explicit selection, then explicit
    weights. Unknown method keys are ignored and out-of-range weights
    clamped (both logged).

    Raises:
        ConfigError: For an unknown preset or arguments of the wrong shape
    """
    manager = WeightManager()
    if preset is not None and not manager.apply_preset(preset):
        raise ConfigError(f"Unknown preset '{preset}'. Available: {', '.join(PRESETS)}")
    if selected_methods is not None:
        if not isinstance(selected_methods, Iterable):
            raise ConfigError("selected_methods must be a list of method names or a mapping")
        manager.set_selection(selected_methods)
    if weights is not None:
        if not isinstance(weights, Mapping):
            raise ConfigError("weights must be a mapping of method name to number")
        manager.set_weights(weights)
    return manager


async def _run_method(method: Method, symbol: str, snapshot: dict[str, Any]) -> dict[str, Any]:
    if method == Method.QUANTITATIVE:
        prices = await load_prices(symbol)
        return analyze_quantitative(prices, snapshot)
    return SNAPSHOT_ANALYZERS[method](snapshot)


def _failure_record(method: Method, error: Exception, duration_ms: float) -> dict[str, Any]:
    return {
        "method": method.value,
        "error": type(error).__name__,
        "message": str(error),
        "duration_ms": round(duration_ms, 1),
    }


async def run_methods(
    symbol: str,
    snapshot: dict[str, Any],
    methods: Iterable[Method],
) -> tuple[dict[Method, dict[str, Any] | None], list[dict[str, Any]]]:
    """
    Run the requested analyzers in parallel, each under its own timeout.

    Returns:
        (outcomes, failures). outcomes has a key for every requested
        method: the raw result, or None if the analyzer failed or timed out.
    """

    async def run_with_timing(method: Method) -> tuple[Method, Any | Exception, float]:
        method_start = perf_counter()
        try:
            result = await asyncio.wait_for(
                _run_method(method, symbol, snapshot), timeout=TIMEOUT_SECONDS
            )
            return (method, result, (perf_counter() - method_start) * 1000)
        except asyncio.TimeoutError:
            duration = (perf_counter() - method_start) * 1000
            return (method, TimeoutError(f"exceeded {TIMEOUT_SECONDS}s"), duration)
        except Exception as e:
            return (method, e, (perf_counter() - method_start) * 1000)

    results = await asyncio.gather(*[run_with_timing(m) for m in methods])

    outcomes: dict[Method, dict[str, Any] | None] = {}
    failures: list[dict[str, Any]] = []
    for method, result, duration_ms in results:
        if isinstance(result, Exception):
            logger.warning(f"{method.value} analysis failed for {symbol}: {type(result).__name__}: {result}")
            failures.append(_failure_record(method, result, duration_ms))
            outcomes[method] = None
        else:
            outcomes[method] = result
    return outcomes, failures


async def gather_outcomes(
    symbol: str,
    methods: Iterable[Method],
) -> tuple[dict[Method, dict[str, Any] | None], list[dict[str, Any]], float | None]:
    """
    Load the snapshot once and run the requested methods.

    A failed snapshot fetch does not abort the call: the snapshot-based
    methods come back unavailable and Quantitative still runs on its
    price history with an empty snapshot.

    Returns:
        (outcomes, failures, snapshot coverage). Nothing is fetched when
        no method is requested.

    Raises:
        ValueError: If the symbol is unknown upstream
    """
    methods = list(methods)
    if not methods:
        return {}, [], None

    fetch_start = perf_counter()
    try:
        snapshot = await load_snapshot(symbol)
    except ValueError:
        raise
    except Exception as e:
        duration_ms = (perf_counter() - fetch_start) * 1000
        logger.warning(f"Snapshot fetch failed for {symbol}: {type(e).__name__}: {e}")
        outcomes, failures = await run_methods(
            symbol, {"ticker": symbol}, [m for m in methods if m not in SNAPSHOT_ANALYZERS]
        )
        for method in methods:
            if method in SNAPSHOT_ANALYZERS:
                outcomes[method] = None
                failures.append(_failure_record(method, e, duration_ms))
        failures.sort(key=lambda f: CANONICAL_ORDER.index(Method(f["method"])))
        return outcomes, failures, 0.0

    outcomes, failures = await run_methods(symbol, snapshot, methods)
    return outcomes, failures, round(snapshot_coverage(snapshot), 2)


async def summary_analysis(
    symbol: str,
    weights: Mapping[str, Any] | None = None,
    selected_methods: Mapping[str, Any] | Iterable[str] | None = None,
    preset: str | None = None,
) -> dict[str, Any]:
    """
    Blend the selected investment methods into one recommendation.

    Args:
        symbol: Stock ticker symbol
        weights: Method name -> relative weight (0-100); unmentioned methods keep defaults
        selected_methods: Method names to run, or a method name -> bool mapping
        preset: Preset name applied before selection and weights

    Returns:
        Dict with per-method scores, the weights and selection used, and
        the blended recommendation
    """
    start_time = perf_counter()
    normalized_symbol = symbol.upper().strip()
    if not normalized_symbol:
        return build_error_response(error_type=ErrorType.INVALID_SYMBOL, message="Symbol is required")

    try:
        manager = resolve_config(weights, selected_methods, preset)
    except ConfigError as e:
        return build_error_response(error_type=ErrorType.INVALID_CONFIG, message=str(e), symbol=normalized_symbol)

    try:
        outcomes, failures, coverage = await gather_outcomes(normalized_symbol, manager.selected)
    except ValueError as e:
        return build_error_response(error_type=ErrorType.INVALID_SYMBOL, message=str(e), symbol=normalized_symbol)

    scores = collect_method_scores(outcomes)
    analysis = SummaryAnalysis(
        ticker=normalized_symbol,
        method_scores=scores,
        weights=manager.weights,
        selected_methods=manager.selection,
        final_recommendation=aggregate(scores, manager.weights, manager.selection),
        analysis_date=datetime.now(),
    )

    return {
        "meta": build_meta("summary_analysis", (perf_counter() - start_time) * 1000),
        **analysis.to_dict(),
        "data_quality": {
            "method_failures": failures,
            "snapshot_coverage": coverage,
            "zero_weight_methods": [m.value for m in manager.zero_weight_methods()],
        },
        "data_provenance": {
            "fundamentals": build_provenance("yfinance", datetime.now()),
        },
    }


async def method_scores(symbol: str, methods: Iterable[str] | None = None) -> dict[str, Any]:
    """
    Normalized per-method breakdown without aggregation.

    Args:
        symbol: Stock ticker symbol
        methods: Method names to run (default: all)

    Returns:
        Dict with one score entry per requested method, in canonical order
    """
    start_time = perf_counter()
    normalized_symbol = symbol.upper().strip()
    if not normalized_symbol:
        return build_error_response(error_type=ErrorType.INVALID_SYMBOL, message="Symbol is required")

    if methods is None:
        requested = list(CANONICAL_ORDER)
    else:
        try:
            requested = resolve_config(selected_methods=methods).selected
        except ConfigError as e:
            return build_error_response(error_type=ErrorType.INVALID_CONFIG, message=str(e), symbol=normalized_symbol)

    try:
        outcomes, failures, _ = await gather_outcomes(normalized_symbol, requested)
    except ValueError as e:
        return build_error_response(error_type=ErrorType.INVALID_SYMBOL, message=str(e), symbol=normalized_symbol)

    scores = collect_method_scores(outcomes)
    return {
        "meta": build_meta("method_scores", (perf_counter() - start_time) * 1000),
        "symbol": normalized_symbol,
        "analysis_date": datetime.now().isoformat(),
        "method_scores": [s.to_dict() for s in scores],
        "available_analyses": sum(1 for s in scores if s.available),
        "data_quality": {"method_failures": failures},
    }
