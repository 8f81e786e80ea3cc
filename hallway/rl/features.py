"""Encodage des états en features pour le Q-learning linéaire.

Deux schémas versionnés (le schéma fait partie du contrat des poids persistés):

`radar-dense.v1` (RadarFeatureExtractor), vecteur de dimension 4 + R:
    0: position x du joueur
    1: position y du joueur
    2: vitesse x du joueur
    3: vitesse y du joueur
    4..4+R-1: distance du rayon i (angle 2*pi*i/R), longueur max si dégagé
Avec une action, le vecteur décrit l'état successeur (après-action).

`radar-sparse.v1` (SparseFeatureExtractor), indicateurs et lectures nommés:
    force.<dir>        1.0 pour l'action (absent pour NONE)
    player.x.<int>     1.0 (position/vitesse discrétisées par troncature)
    player.y.<int>, player.vx.<int>, player.vy.<int>
    ray.s.<i>          distance / longueur (1.0 si dégagé)
    ray.t.<i>          variation normalisée de la distance vers le successeur,
                       absente si le rayon est dégagé dans les deux états
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from hallway.engine.actions import Action
from hallway.engine.rules import NUM_RAYS, RAY_LENGTH
from hallway.engine.state import WorldState
from hallway.rl.weights import DenseWeights, SparseWeights

DENSE_SCHEMA = "radar-dense.v1"
SPARSE_SCHEMA = "radar-sparse.v1"
BASE_FEATURE_NAMES: Tuple[str, ...] = ("player.x", "player.y", "player.vx", "player.vy")

_ACTION_FEATURES: Dict[Action, str] = {
    Action.UP: "force.up",
    Action.DOWN: "force.down",
    Action.LEFT: "force.left",
    Action.RIGHT: "force.right",
}


def radar_distances(
    state: WorldState,
    *,
    num_rays: int = NUM_RAYS,
    ray_length: float = RAY_LENGTH,
) -> np.ndarray:
    """Distances radar (longueur max pour un rayon dégagé)."""

    readings = state.radar(num_rays, ray_length)
    return np.array([reading.distance for reading in readings], dtype=np.float64)


class RadarFeatureExtractor:
    """Extracteur dense `radar-dense.v1` (magnitudes brutes)."""

    def __init__(self, *, num_rays: int = NUM_RAYS, ray_length: float = RAY_LENGTH) -> None:
        if num_rays <= 0:
            raise ValueError(f"num_rays doit être strictement positif (reçu: {num_rays})")
        self._num_rays = num_rays
        self._ray_length = ray_length

    @property
    def num_rays(self) -> int:
        return self._num_rays

    @property
    def ray_length(self) -> float:
        return self._ray_length

    @property
    def dimension(self) -> int:
        return len(BASE_FEATURE_NAMES) + self._num_rays

    @property
    def schema(self) -> str:
        return f"{DENSE_SCHEMA}:rays={self._num_rays}:length={self._ray_length:g}"

    @property
    def feature_names(self) -> Tuple[str, ...]:
        return BASE_FEATURE_NAMES + tuple(f"ray.{index}" for index in range(self._num_rays))

    def new_weights(self) -> DenseWeights:
        return DenseWeights(self.feature_names)

    def extract(self, state: WorldState, action: Action | None = None) -> np.ndarray:
        """Vecteur de dimension 4 + R pour `state` (ou son successeur par `action`)."""

        target = state if action is None else state.transition(action)
        player = target.player
        vector = np.empty(self.dimension, dtype=np.float64)
        vector[:4] = (player.x, player.y, player.vx, player.vy)
        vector[4:] = radar_distances(
            target, num_rays=self._num_rays, ray_length=self._ray_length
        )
        return vector


class SparseFeatureExtractor:
    """Extracteur creux `radar-sparse.v1` (indicateurs discrétisés + radar)."""

    def __init__(self, *, num_rays: int = NUM_RAYS, ray_length: float = RAY_LENGTH) -> None:
        if num_rays <= 0:
            raise ValueError(f"num_rays doit être strictement positif (reçu: {num_rays})")
        self._num_rays = num_rays
        self._ray_length = ray_length

    @property
    def num_rays(self) -> int:
        return self._num_rays

    @property
    def ray_length(self) -> float:
        return self._ray_length

    @property
    def schema(self) -> str:
        return f"{SPARSE_SCHEMA}:rays={self._num_rays}:length={self._ray_length:g}"

    def new_weights(self) -> SparseWeights:
        return SparseWeights()

    def extract(self, state: WorldState, action: Action | None = None) -> Dict[str, float]:
        features: Dict[str, float] = {}

        if action is not None and action in _ACTION_FEATURES:
            features[_ACTION_FEATURES[action]] = 1.0

        player = state.player
        features[f"player.x.{int(player.x)}"] = 1.0
        features[f"player.y.{int(player.y)}"] = 1.0
        features[f"player.vx.{int(player.vx)}"] = 1.0
        features[f"player.vy.{int(player.vy)}"] = 1.0

        current = state.radar(self._num_rays, self._ray_length)
        following = None
        if action is not None:
            following = state.transition(action).radar(self._num_rays, self._ray_length)

        for index, reading in enumerate(current):
            now = reading.distance / self._ray_length if reading.hit else 1.0
            features[f"ray.s.{index}"] = now
            if following is None:
                continue
            after = following[index]
            if not reading.hit and not after.hit:
                continue
            later = after.distance / self._ray_length if after.hit else 1.0
            features[f"ray.t.{index}"] = later - now

        return features


__all__ = [
    "DENSE_SCHEMA",
    "SPARSE_SCHEMA",
    "BASE_FEATURE_NAMES",
    "RadarFeatureExtractor",
    "SparseFeatureExtractor",
    "radar_distances",
]
