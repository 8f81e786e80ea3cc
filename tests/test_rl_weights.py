"""Tests du stockage des poids et de la persistance `name;value`."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from hallway.rl.weights import DenseWeights, SparseWeights, load_weights, save_weights

SCHEMA = "radar-sparse.v1:rays=4:length=10"


class TestSparseWeights:
    def test_unknown_features_count_as_zero(self):
        weights = SparseWeights()
        assert weights["force.up"] == 0.0
        assert weights.dot({"force.up": 1.0, "ray.s.0": 0.5}) == 0.0
        assert len(weights) == 0

    def test_update_adds_scaled_features(self):
        weights = SparseWeights({"force.up": 1.0})
        weights.update({"force.up": 1.0, "ray.s.0": 0.5}, 2.0)
        assert weights["force.up"] == pytest.approx(3.0)
        assert weights["ray.s.0"] == pytest.approx(1.0)
        assert weights.dot({"force.up": 1.0, "ray.s.0": 2.0}) == pytest.approx(5.0)
        assert "ray.s.0" in weights


class TestDenseWeights:
    def test_zero_initialised(self):
        weights = DenseWeights(("a", "b", "c"))
        assert len(weights) == 3
        np.testing.assert_array_equal(weights.values, np.zeros(3))

    def test_dot_and_update(self):
        weights = DenseWeights(("a", "b"), np.array([1.0, -1.0]))
        assert weights.dot(np.array([2.0, 3.0])) == pytest.approx(-1.0)
        weights.update(np.array([1.0, 0.0]), 0.5)
        assert dict(weights.items()) == {"a": 1.5, "b": -1.0}

    def test_rejects_mismatched_values(self):
        with pytest.raises(ValueError):
            DenseWeights(("a", "b"), np.zeros(3))


class TestPersistence:
    def test_sparse_round_trip(self, tmp_path):
        path = tmp_path / "weights.txt"
        weights = SparseWeights({"force.up": 0.25, "player.x.-9": -3.5, "ray.t.2": 1e-12})
        save_weights(weights, path, schema=SCHEMA)

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == f"# schema: {SCHEMA}"
        assert "force.up;0.25" in lines

        loaded = load_weights(path, schema=SCHEMA)
        assert isinstance(loaded, SparseWeights)
        assert loaded.as_dict() == weights.as_dict()

    def test_dense_round_trip(self, tmp_path):
        path = tmp_path / "dense.txt"
        names = ("player.x", "player.y", "ray.0")
        weights = DenseWeights(names, np.array([0.5, -2.0, 3.25]))
        save_weights(weights, path, schema="dense")

        loaded = load_weights(path, schema="dense", names=names)
        assert isinstance(loaded, DenseWeights)
        np.testing.assert_array_equal(loaded.values, weights.values)

    def test_missing_file_gives_empty_weights(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="hallway.rl.weights"):
            loaded = load_weights(tmp_path / "absent.txt", schema=SCHEMA)
        assert len(loaded) == 0
        assert "absent" in caplog.text

    def test_malformed_line_gives_empty_weights(self, tmp_path, caplog):
        path = tmp_path / "bad.txt"
        path.write_text(f"# schema: {SCHEMA}\nforce.up;0.5\nthis line is broken\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="hallway.rl.weights"):
            loaded = load_weights(path, schema=SCHEMA)
        assert len(loaded) == 0
        assert "invalide" in caplog.text

    def test_undecodable_file_gives_empty_weights(self, tmp_path, caplog):
        path = tmp_path / "binary.txt"
        path.write_bytes(b"force.up;1.0\n\xff\xfe;2.0\n")
        with caplog.at_level(logging.WARNING, logger="hallway.rl.weights"):
            loaded = load_weights(path, schema=SCHEMA)
        assert len(loaded) == 0
        assert "impossible" in caplog.text

    def test_undecodable_file_gives_zero_dense_weights(self, tmp_path):
        path = tmp_path / "binary.txt"
        path.write_bytes(b"\xff\xfe;2.0\n")
        loaded = load_weights(path, schema="dense", names=("player.x",))
        np.testing.assert_array_equal(loaded.values, np.zeros(1))

    def test_non_numeric_value_gives_empty_weights(self, tmp_path):
        path = tmp_path / "nan.txt"
        path.write_text("force.up;abc\n", encoding="utf-8")
        assert len(load_weights(path, schema=SCHEMA)) == 0

    def test_schema_mismatch_gives_empty_weights(self, tmp_path):
        path = tmp_path / "other.txt"
        path.write_text("# schema: radar-dense.v1\nforce.up;0.5\n", encoding="utf-8")
        assert len(load_weights(path, schema=SCHEMA)) == 0

    def test_headerless_file_is_accepted(self, tmp_path):
        path = tmp_path / "legacy.txt"
        path.write_text("force.up;0.5\n\nray.s.0;-1.0\n", encoding="utf-8")
        loaded = load_weights(path, schema=SCHEMA)
        assert loaded.as_dict() == {"force.up": 0.5, "ray.s.0": -1.0}

    def test_unknown_dense_name_gives_zero_weights(self, tmp_path):
        path = tmp_path / "dense.txt"
        path.write_text("# schema: dense\nplayer.x;1.0\nmystery;2.0\n", encoding="utf-8")
        loaded = load_weights(path, schema="dense", names=("player.x", "player.y"))
        assert isinstance(loaded, DenseWeights)
        np.testing.assert_array_equal(loaded.values, np.zeros(2))
