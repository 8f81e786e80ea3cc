"""Tests pour l'encodage radar des états (schémas dense et creux)."""

from __future__ import annotations

import numpy as np
import pytest

from hallway.engine.actions import ACTIONS, Action
from hallway.engine.state import BodyInfo, WorldState
from hallway.rl.features import (
    BASE_FEATURE_NAMES,
    DENSE_SCHEMA,
    SPARSE_SCHEMA,
    RadarFeatureExtractor,
    SparseFeatureExtractor,
    radar_distances,
)
from hallway.rl.weights import DenseWeights, SparseWeights


class TestRadarFeatureExtractor:
    def test_dimension_is_four_plus_rays(self, crowded_state):
        extractor = RadarFeatureExtractor(num_rays=12)
        assert extractor.dimension == 16
        assert len(extractor.feature_names) == 16
        assert extractor.feature_names[:4] == BASE_FEATURE_NAMES

        assert extractor.extract(crowded_state).shape == (16,)
        for action in ACTIONS:
            vector = extractor.extract(crowded_state, action)
            assert vector.shape == (16,)
            assert vector.dtype == np.float64

    def test_initial_state_layout(self, empty_state):
        extractor = RadarFeatureExtractor(num_rays=8, ray_length=5.0)
        vector = extractor.extract(empty_state)
        player = empty_state.player

        np.testing.assert_allclose(vector[:4], [player.x, player.y, player.vx, player.vy])
        np.testing.assert_allclose(vector[4:], radar_distances(empty_state, num_rays=8, ray_length=5.0))
        assert np.all(vector[4:] <= 5.0)

    def test_action_describes_successor(self, empty_state):
        extractor = RadarFeatureExtractor(num_rays=4)
        successor = empty_state.transition(Action.RIGHT)
        np.testing.assert_allclose(
            extractor.extract(empty_state, Action.RIGHT), extractor.extract(successor)
        )

    def test_schema_is_versioned(self):
        extractor = RadarFeatureExtractor(num_rays=30, ray_length=10.0)
        assert extractor.schema.startswith(DENSE_SCHEMA)
        assert "rays=30" in extractor.schema
        assert isinstance(extractor.new_weights(), DenseWeights)
        assert len(extractor.new_weights()) == extractor.dimension

    def test_rejects_zero_rays(self):
        with pytest.raises(ValueError):
            RadarFeatureExtractor(num_rays=0)


class TestSparseFeatureExtractor:
    def test_action_indicator(self, empty_state):
        extractor = SparseFeatureExtractor(num_rays=4)
        assert extractor.extract(empty_state, Action.UP)["force.up"] == 1.0
        assert extractor.extract(empty_state, Action.RIGHT)["force.right"] == 1.0
        features = extractor.extract(empty_state, Action.NONE)
        assert not any(name.startswith("force.") for name in features)

    def test_discretised_player_keys(self, empty_config):
        state = WorldState(config=empty_config, player=BodyInfo(-9.7, 2.4, 3.9, -1.2))
        features = SparseFeatureExtractor(num_rays=4).extract(state)
        assert features["player.x.-9"] == 1.0
        assert features["player.y.2"] == 1.0
        assert features["player.vx.3"] == 1.0
        assert features["player.vy.-1"] == 1.0

    def test_ray_readings_are_normalised(self, empty_config):
        start_x, start_y = empty_config.player_start
        state = WorldState(
            config=empty_config,
            player=BodyInfo(start_x, start_y),
            obstacles=(BodyInfo(start_x + 5.0, start_y),),
        )
        features = SparseFeatureExtractor(num_rays=4, ray_length=10.0).extract(state)
        assert features["ray.s.0"] == pytest.approx(0.4, abs=1e-3)
        for index in range(4):
            assert 0.0 <= features[f"ray.s.{index}"] <= 1.0

    def test_delta_omitted_when_both_clear(self, empty_state):
        features = SparseFeatureExtractor(num_rays=4, ray_length=3.0).extract(
            empty_state, Action.NONE
        )
        assert not any(name.startswith("ray.t.") for name in features)

    def test_delta_present_when_obstacle_seen(self, empty_config):
        start_x, start_y = empty_config.player_start
        state = WorldState(
            config=empty_config,
            player=BodyInfo(start_x, start_y),
            obstacles=(BodyInfo(start_x + 5.0, start_y),),
        )
        features = SparseFeatureExtractor(num_rays=4, ray_length=10.0).extract(
            state, Action.RIGHT
        )
        assert "ray.t.0" in features
        assert -1.0 <= features["ray.t.0"] < 0.0

    def test_new_weights_are_sparse(self):
        extractor = SparseFeatureExtractor()
        assert extractor.schema.startswith(SPARSE_SCHEMA)
        weights = extractor.new_weights()
        assert isinstance(weights, SparseWeights)
        assert len(weights) == 0
