"""Tests pour l'ensemble fermé des actions et leur force associée."""

from __future__ import annotations

import pytest

from hallway.engine.actions import (
    ACTIONS,
    Action,
    action_from_index,
    action_index,
    force_vector,
)
from hallway.engine.rules import FORCE_MAGNITUDE


class TestForceVector:
    def test_directions(self):
        assert force_vector(Action.UP) == (0.0, FORCE_MAGNITUDE)
        assert force_vector(Action.DOWN) == (0.0, -FORCE_MAGNITUDE)
        assert force_vector(Action.LEFT) == (-FORCE_MAGNITUDE, 0.0)
        assert force_vector(Action.RIGHT) == (FORCE_MAGNITUDE, 0.0)

    def test_none_is_zero_force(self):
        assert force_vector(Action.NONE, 123.0) == (0.0, 0.0)

    def test_custom_magnitude(self):
        assert force_vector(Action.RIGHT, 2.5) == (2.5, 0.0)


class TestActionIndex:
    def test_canonical_order(self):
        assert ACTIONS == (Action.UP, Action.DOWN, Action.LEFT, Action.RIGHT, Action.NONE)

    def test_index_round_trip(self):
        for index, action in enumerate(ACTIONS):
            assert action_index(action) == index
            assert action_from_index(index) is action

    @pytest.mark.parametrize("index", [-1, 5, 42])
    def test_invalid_index(self, index):
        with pytest.raises(ValueError):
            action_from_index(index)
