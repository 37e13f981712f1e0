"""Tests for the weight manager and presets."""

import logging

import pytest

from consensus_mcp.engine.models import CANONICAL_ORDER, Method
from consensus_mcp.engine.weights import (
    DEFAULT_WEIGHTS,
    PRESETS,
    WeightManager,
    coerce_selection,
    coerce_weights,
    distribute_equally,
)


class TestDefaults:
    """Tests for the initial state."""

    def test_default_weights_and_selection(self) -> None:
        manager = WeightManager()

        assert manager.weights == DEFAULT_WEIGHTS
        assert manager.selected == list(CANONICAL_ORDER)
        assert sum(manager.weights.values()) == 100


class TestPresets:
    """Tests for preset application."""

    def test_comprehensive_round_trip(self) -> None:
        """Applying Comprehensive yields exactly its values regardless of prior state."""
        manager = WeightManager(weights={"warren_buffett": 3, "quantitative": 99}, selection=["peter_lynch"])
        manager.toggle_method(Method.BILL_ACKMAN)

        assert manager.apply_preset("Comprehensive") is True

        assert manager.selection == {m: True for m in CANONICAL_ORDER}
        assert [manager.weights[m] for m in CANONICAL_ORDER] == [25, 20, 20, 15, 20]

    def test_value_investor(self) -> None:
        manager = WeightManager()
        manager.apply_preset("Value Investor")

        assert manager.selected == [Method.WARREN_BUFFETT, Method.CHARLIE_MUNGER, Method.QUANTITATIVE]
        assert [manager.weights[m] for m in CANONICAL_ORDER] == [40, 35, 0, 0, 25]

    def test_growth_focused(self) -> None:
        manager = WeightManager()
        manager.apply_preset("Growth Focused")

        assert manager.selected == [Method.PETER_LYNCH, Method.BILL_ACKMAN, Method.QUANTITATIVE]
        assert [manager.weights[m] for m in CANONICAL_ORDER] == [0, 0, 40, 30, 30]

    def test_preset_selection_follows_weights(self) -> None:
        """A preset selects exactly the methods it gives weight to."""
        for preset in PRESETS.values():
            assert preset.selection == {m: preset.weights[m] > 0 for m in CANONICAL_ORDER}

    def test_unknown_preset_leaves_state(self, caplog: pytest.LogCaptureFixture) -> None:
        manager = WeightManager()
        manager.set_weight(Method.PETER_LYNCH, 60)

        with caplog.at_level(logging.WARNING):
            assert manager.apply_preset("Momentum Chaser") is False

        assert manager.weights[Method.PETER_LYNCH] == 60
        assert "Unknown preset" in caplog.text


class TestAutoDistribute:
    """Tests for equal weight distribution."""

    def test_three_methods_remainder_to_first(self) -> None:
        """Three methods split 34/33/33 with the extra point on the earliest."""
        manager = WeightManager(selection=["quantitative", "charlie_munger", "peter_lynch"])
        weights = manager.auto_distribute()

        assert sum(weights.values()) == 100
        assert weights[Method.CHARLIE_MUNGER] == 34
        assert weights[Method.PETER_LYNCH] == 33
        assert weights[Method.QUANTITATIVE] == 33
        assert weights[Method.WARREN_BUFFETT] == 0
        assert weights[Method.BILL_ACKMAN] == 0

    def test_deterministic(self) -> None:
        """Repeated runs give identical results."""
        selection = coerce_selection(["bill_ackman", "warren_buffett", "quantitative"])
        assert distribute_equally(selection) == distribute_equally(selection)

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5])
    def test_sums_to_100(self, count: int) -> None:
        selection = coerce_selection(CANONICAL_ORDER[:count])
        weights = distribute_equally(selection)

        assert sum(weights.values()) == 100
        assert all(isinstance(w, int) for w in weights.values())

    def test_empty_selection_is_noop(self) -> None:
        manager = WeightManager(selection=[])
        before = manager.weights

        assert manager.auto_distribute() == before
        assert distribute_equally(manager.selection) is None


class TestMutations:
    """Tests for set_weight and toggle_method."""

    def test_set_weight_clamps(self, caplog: pytest.LogCaptureFixture) -> None:
        manager = WeightManager()

        with caplog.at_level(logging.WARNING):
            assert manager.set_weight("peter_lynch", 150) == 100
            assert manager.set_weight("peter_lynch", -10) == 0

        assert "Clamped" in caplog.text

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "nan", "-inf"])
    def test_set_weight_rejects_non_finite(self, value, caplog: pytest.LogCaptureFixture) -> None:
        manager = WeightManager()

        with caplog.at_level(logging.WARNING):
            assert manager.set_weight("warren_buffett", value) is None

        assert manager.weights == DEFAULT_WEIGHTS
        assert "Ignoring invalid weight" in caplog.text
        assert "Clamped" not in caplog.text

    def test_set_weight_leaves_siblings(self) -> None:
        manager = WeightManager()
        manager.set_weight(Method.WARREN_BUFFETT, 70)

        expected = dict(DEFAULT_WEIGHTS)
        expected[Method.WARREN_BUFFETT] = 70
        assert manager.weights == expected

    def test_set_weight_unknown_method(self) -> None:
        manager = WeightManager()

        assert manager.set_weight("george_soros", 50) is None
        assert manager.weights == DEFAULT_WEIGHTS

    def test_toggle_keeps_weight(self) -> None:
        """A deselected method keeps its weight for when it comes back."""
        manager = WeightManager()

        assert manager.toggle_method("billAckman") is False
        assert manager.weights[Method.BILL_ACKMAN] == 15
        assert Method.BILL_ACKMAN not in manager.selected
        assert manager.toggle_method("Bill Ackman") is True

    def test_zero_weight_methods(self) -> None:
        manager = WeightManager(weights={"peter_lynch": 0})

        assert manager.zero_weight_methods() == [Method.PETER_LYNCH]


class TestCoercion:
    """Tests for user input parsing."""

    def test_unknown_keys_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            weights = coerce_weights({"warren_buffett": 30, "ray_dalio": 40})

        assert weights == {Method.WARREN_BUFFETT: 30}
        assert "ray_dalio" in caplog.text

    def test_non_numeric_dropped(self) -> None:
        assert coerce_weights({"warren_buffett": "lots"}) == {}

    def test_nan_dropped(self) -> None:
        assert coerce_weights({"warren_buffett": "nan", "peter_lynch": 40}) == {Method.PETER_LYNCH: 40}

    def test_numeric_strings_accepted(self) -> None:
        assert coerce_weights({"quantitative": "35"}) == {Method.QUANTITATIVE: 35.0}

    def test_selection_from_mapping(self) -> None:
        selection = coerce_selection({"warrenBuffett": True, "quantitative": False})

        assert selection[Method.WARREN_BUFFETT] is True
        assert sum(selection.values()) == 1

    def test_selection_from_single_string(self) -> None:
        selection = coerce_selection("peter_lynch")

        assert [m for m, on in selection.items() if on] == [Method.PETER_LYNCH]
