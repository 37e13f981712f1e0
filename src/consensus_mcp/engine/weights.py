"""Weight vector and method selection management.

Weights are relative: they need not sum to 100, the aggregator
re-normalizes at read time. Selection is independent of weight, so a
deselected method keeps its stored weight for when it is re-enabled.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from consensus_mcp.engine.models import CANONICAL_ORDER, Method

logger = logging.getLogger(__name__)

MIN_WEIGHT = 0.0
MAX_WEIGHT = 100.0
DISTRIBUTION_TOTAL = 100

DEFAULT_WEIGHTS: dict[Method, float] = {
    Method.WARREN_BUFFETT: 25,
    Method.CHARLIE_MUNGER: 20,
    Method.PETER_LYNCH: 20,
    Method.BILL_ACKMAN: 15,
    Method.QUANTITATIVE: 20,
}


@dataclass(frozen=True)
class Preset:
    """Named configuration fixing both the selection and the weights."""

    name: str
    description: str
    selection: dict[Method, bool]
    weights: dict[Method, float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "selected_methods": {m.value: self.selection[m] for m in CANONICAL_ORDER},
            "weights": {m.value: self.weights[m] for m in CANONICAL_ORDER},
        }


def _preset(name: str, description: str, weights: list[float]) -> Preset:
    weight_map = dict(zip(CANONICAL_ORDER, weights, strict=True))
    return Preset(
        name=name,
        description=description,
        selection={m: w > 0 for m, w in weight_map.items()},
        weights=weight_map,
    )


# Weights listed in canonical order: Buffett, Munger, Lynch, Ackman, Quantitative
PRESETS: dict[str, Preset] = {
    p.name: p
    for p in (
        _preset(
            "Value Investor",
            "Focus on Buffett & Munger approaches",
            [40, 35, 0, 0, 25],
        ),
        _preset(
            "Growth Focused",
            "Emphasize growth and momentum",
            [0, 0, 40, 30, 30],
        ),
        _preset(
            "Comprehensive",
            "Use all available analysis methods",
            [25, 20, 20, 15, 20],
        ),
    )
}


def clamp_weight(value: Any) -> float:
    """Clamp a weight to [0, 100]. Non-numeric or non-finite values raise ValueError/TypeError."""
    weight = float(value)
    if not math.isfinite(weight):
        raise ValueError(f"non-finite weight: {value!r}")
    return max(MIN_WEIGHT, min(MAX_WEIGHT, weight))


def coerce_weights(raw: Mapping[Any, Any]) -> dict[Method, float]:
    """
    Parse a user-supplied weight mapping.

    Unknown method keys and non-numeric or non-finite values are dropped, values are
    clamped. Methods not mentioned are not included in the result.
    """
    weights: dict[Method, float] = {}
    for key, value in raw.items():
        method = Method.parse(key)
        if method is None:
            logger.warning(f"Ignoring weight for unknown method '{key}'")
            continue
        try:
            clamped = clamp_weight(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid weight for {method.value}: {value!r}")
            continue
        if clamped != float(value):
            logger.warning(f"Clamped weight for {method.value} from {value} to {clamped}")
        weights[method] = clamped
    return weights


def coerce_selection(raw: Mapping[Any, Any] | Iterable[Any]) -> dict[Method, bool]:
    """
    Parse a user-supplied selection.

    Accepts either a mapping of method -> bool or an iterable of method
    keys to select. The result always covers every method; unknown keys
    are ignored.
    """
    selection = {m: False for m in CANONICAL_ORDER}
    if isinstance(raw, str):
        raw = [raw]
    items = raw.items() if isinstance(raw, Mapping) else ((k, True) for k in raw)
    for key, on in items:
        method = Method.parse(key)
        if method is None:
            logger.warning(f"Ignoring selection for unknown method '{key}'")
            continue
        selection[method] = bool(on)
    return selection


def distribute_equally(selection: Mapping[Method, bool]) -> dict[Method, float] | None:
    """
    Equal integer weights summing to exactly 100 over the selected methods.

    The remainder (100 mod count) goes one point each to the earliest
    selected methods in canonical order. Unselected methods get 0.

    Returns:
        New weight mapping, or None if nothing is selected
    """
    chosen = [m for m in CANONICAL_ORDER if selection.get(m, False)]
    if not chosen:
        return None
    base, remainder = divmod(DISTRIBUTION_TOTAL, len(chosen))
    weights: dict[Method, float] = {m: 0 for m in CANONICAL_ORDER}
    for i, method in enumerate(chosen):
        weights[method] = base + (1 if i < remainder else 0)
    return weights


class WeightManager:
    """
    Holds the active weight vector and method selection.

    All mutations leave the manager in a valid state: every method has a
    weight in [0, 100] and an explicit selection flag. Bad input is
    clamped or ignored and logged, never raised.
    """

    def __init__(
        self,
        weights: Mapping[Any, Any] | None = None,
        selection: Mapping[Any, Any] | Iterable[Any] | None = None,
    ):
        self._weights: dict[Method, float] = dict(DEFAULT_WEIGHTS)
        self._selection: dict[Method, bool] = {m: True for m in CANONICAL_ORDER}
        if selection is not None:
            self.set_selection(selection)
        if weights is not None:
            self.set_weights(weights)

    @property
    def weights(self) -> dict[Method, float]:
        return dict(self._weights)

    @property
    def selection(self) -> dict[Method, bool]:
        return dict(self._selection)

    @property
    def selected(self) -> list[Method]:
        """Selected methods in canonical order."""
        return [m for m in CANONICAL_ORDER if self._selection[m]]

    def apply_preset(self, name: str) -> bool:
        """
        Replace both selection and weights with a preset's values.

        Returns:
            True if applied, False if the preset name is unknown (state unchanged)
        """
        preset = PRESETS.get(name)
        if preset is None:
            logger.warning(f"Unknown preset '{name}'. Available: {sorted(PRESETS)}")
            return False
        self._selection = dict(preset.selection)
        self._weights = dict(preset.weights)
        return True

    def auto_distribute(self, selection: Mapping[Method, bool] | None = None) -> dict[Method, float]:
        """
        Assign equal integer weights summing to 100 across the selection.

        Uses the current selection unless one is given. An empty
        selection leaves the weights unchanged.
        """
        weights = distribute_equally(self._selection if selection is None else selection)
        if weights is not None:
            self._weights = weights
        return self.weights

    def set_selection(self, selection: Mapping[Any, Any] | Iterable[Any]) -> None:
        """Replace the whole selection. Methods not mentioned become unselected."""
        self._selection = coerce_selection(selection)

    def set_weights(self, weights: Mapping[Any, Any]) -> None:
        """Overwrite the weights that are mentioned; the rest keep their values."""
        self._weights.update(coerce_weights(weights))

    def set_weight(self, method: Any, value: Any) -> float | None:
        """
        Set one method's weight, clamped to [0, 100]. Siblings are untouched.

        Returns:
            The stored weight, or None if the method or value was rejected
        """
        coerced = coerce_weights({method: value})
        if not coerced:
            return None
        parsed, weight = next(iter(coerced.items()))
        self._weights[parsed] = weight
        return weight

    def toggle_method(self, method: Any) -> bool | None:
        """
        Flip a method's selection. Its stored weight is kept.

        Returns:
            The new selection flag, or None for an unknown method
        """
        parsed = Method.parse(method)
        if parsed is None:
            logger.warning(f"Ignoring toggle for unknown method '{method}'")
            return None
        self._selection[parsed] = not self._selection[parsed]
        return self._selection[parsed]

    def zero_weight_methods(self) -> list[Method]:
        """Selected methods whose weight is 0 (allowed, but they contribute nothing)."""
        return [m for m in self.selected if self._weights[m] == 0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "weights": {m.value: self._weights[m] for m in CANONICAL_ORDER},
            "selected_methods": {m.value: self._selection[m] for m in CANONICAL_ORDER},
            "total_weight": sum(self._weights[m] for m in self.selected),
        }
