"""Weight preset and distribution tools."""

from collections.abc import Iterable, Mapping
from typing import Any

from consensus_mcp.engine import CANONICAL_ORDER, PRESETS, WeightManager
from consensus_mcp.engine.weights import DEFAULT_WEIGHTS
from consensus_mcp.utils.provenance import ErrorType, build_error_response, build_meta


async def weight_presets() -> dict[str, Any]:
    """Named presets plus the default weights."""
    return {
        "meta": build_meta("weight_presets"),
        "presets": [p.to_dict() for p in PRESETS.values()],
        "default_weights": {m.value: DEFAULT_WEIGHTS[m] for m in CANONICAL_ORDER},
    }


async def distribute_weights(selected_methods: Mapping[str, Any] | Iterable[str]) -> dict[str, Any]:
    """
    Equal integer weights summing to 100 across the selected methods.

    Args:
        selected_methods: Method names, or a method name -> bool mapping

    Returns:
        Dict with selected_methods, weights and total
    """
    manager = WeightManager(selection=selected_methods if isinstance(selected_methods, Iterable) else [])
    if not manager.selected:
        return build_error_response(
            error_type=ErrorType.INVALID_CONFIG,
            message="Select at least one method to distribute weights across",
        )
    weights = manager.auto_distribute()
    return {
        "meta": build_meta("distribute_weights"),
        "selected_methods": {m.value: on for m, on in manager.selection.items()},
        "weights": {m.value: weights[m] for m in CANONICAL_ORDER},
        "total": sum(weights.values()),
    }
