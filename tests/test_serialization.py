"""Tests de sérialisation JSON des WorldState."""

from __future__ import annotations

import json

import pytest

from hallway.engine.actions import Action
from hallway.engine.serialize import SCHEMA_VERSION, snapshot_to_state, state_to_snapshot


class TestSnapshots:
    def test_snapshot_is_json_friendly(self, crowded_state):
        snapshot = state_to_snapshot(crowded_state.transition(Action.RIGHT))
        text = json.dumps(snapshot)
        assert json.loads(text)["schema_version"] == SCHEMA_VERSION
        assert snapshot["status"] == "ONGOING"
        assert len(snapshot["obstacles"]) == len(crowded_state.obstacles)

    def test_restore_preserves_identity_and_bookkeeping(self, crowded_state):
        state = crowded_state.transition(Action.RIGHT).transition(Action.UP)
        restored = snapshot_to_state(json.loads(json.dumps(state_to_snapshot(state))))

        assert restored == state
        assert restored.config == state.config
        assert restored.score == state.score
        assert restored.milestones == state.milestones
        assert restored.touched == state.touched

    def test_restored_state_transitions_identically(self, crowded_state):
        restored = snapshot_to_state(state_to_snapshot(crowded_state))
        assert restored.transition(Action.LEFT) == crowded_state.transition(Action.LEFT)

    def test_terminal_flags_survive(self, lost_state):
        restored = snapshot_to_state(state_to_snapshot(lost_state))
        assert restored.is_lose()

    def test_unknown_version_rejected(self, crowded_state):
        snapshot = state_to_snapshot(crowded_state)
        snapshot["schema_version"] = "9.9.9"
        with pytest.raises(ValueError):
            snapshot_to_state(snapshot)
