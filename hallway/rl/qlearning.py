"""Agent Q-learning à approximation linéaire.

Q(s, a) = poids . features(s, a). L'entraînement enchaîne des épisodes depuis
un état initial neuf; chaque transition échantillonnée déclenche une mise à
jour TD(0):

    sample = r + gamma * max_a' Q(s', a')
    delta  = sample - Q(s, a)
    w[k]  += alpha * delta * f_k(s, a)   pour chaque feature présente

Convention héritée: `epsilon` est la probabilité d'EXPLOITER (action gloutonne);
l'exploration uniforme a lieu avec probabilité 1 - epsilon.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from hallway.engine.actions import Action
from hallway.engine.rules import (
    DEFAULT_ALPHA,
    DEFAULT_EPISODES,
    DEFAULT_EPSILON,
    DEFAULT_GAMMA,
)
from hallway.engine.state import WorldConfig, WorldState
from hallway.rl.features import RadarFeatureExtractor, SparseFeatureExtractor
from hallway.rl.policies import PlanningAgent
from hallway.rl.rewards import transition_reward
from hallway.rl.weights import Weights, load_weights, save_weights

logger = logging.getLogger(__name__)

FeatureExtractor = Union[RadarFeatureExtractor, SparseFeatureExtractor]


@dataclass(frozen=True)
class EpisodeStats:
    """Résumé d'un épisode d'entraînement."""

    episode: int
    steps: int
    won: bool
    lost: bool
    truncated: bool
    total_reward: float
    final_x: float


class QLearningAgent(PlanningAgent):
    """Q-learning linéaire sur les features radar."""

    def __init__(
        self,
        *,
        alpha: float = DEFAULT_ALPHA,
        gamma: float = DEFAULT_GAMMA,
        epsilon: float = DEFAULT_EPSILON,
        episodes: int = DEFAULT_EPISODES,
        extractor: FeatureExtractor | None = None,
        weights: Weights | None = None,
        config: WorldConfig | None = None,
        max_steps_per_episode: int | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(name="QLearning")
        for label, value in (("alpha", alpha), ("gamma", gamma), ("epsilon", epsilon)):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{label} doit être dans [0, 1] (reçu: {value})")
        if episodes < 0:
            raise ValueError(f"episodes doit être positif (reçu: {episodes})")
        if max_steps_per_episode is not None and max_steps_per_episode <= 0:
            raise ValueError("max_steps_per_episode doit être strictement positif ou None")

        self.alpha = alpha
        self.gamma = gamma
        self.epsilon = epsilon
        self.episodes = episodes
        self._extractor: FeatureExtractor = extractor or SparseFeatureExtractor()
        self._weights: Weights = weights if weights is not None else self._extractor.new_weights()
        self._config = config or WorldConfig()
        self._max_steps = max_steps_per_episode
        self._random = rng or random.Random(seed)
        self._feature_cache: Dict[Tuple[WorldState, Action], Any] = {}
        self._episodes_done = 0
        self._history: List[EpisodeStats] = []

    # -- Construction depuis un fichier -------------------------------------------

    @classmethod
    def from_weights_file(
        cls,
        path: str | Path,
        *,
        extractor: FeatureExtractor | None = None,
        config: WorldConfig | None = None,
    ) -> "QLearningAgent":
        """Agent d'évaluation (aucun apprentissage) initialisé depuis un fichier.

        Un fichier absent ou invalide donne un agent aux poids vides.
        """

        extractor = extractor or SparseFeatureExtractor()
        names = extractor.feature_names if isinstance(extractor, RadarFeatureExtractor) else None
        weights = load_weights(path, schema=extractor.schema, names=names)
        return cls(
            alpha=0.0,
            gamma=0.0,
            epsilon=0.0,
            episodes=0,
            extractor=extractor,
            weights=weights,
            config=config,
        )

    def save_weights(self, path: str | Path) -> None:
        save_weights(self._weights, path, schema=self._extractor.schema)

    # -- Accès -------------------------------------------------------------------

    @property
    def weights(self) -> Weights:
        return self._weights

    @property
    def extractor(self) -> FeatureExtractor:
        return self._extractor

    @property
    def config(self) -> WorldConfig:
        return self._config

    @property
    def history(self) -> Tuple[EpisodeStats, ...]:
        return tuple(self._history)

    # -- Évaluation --------------------------------------------------------------

    def features(self, state: WorldState, action: Action) -> Any:
        key = (state, action)
        cached = self._feature_cache.get(key)
        if cached is None:
            cached = self._extractor.extract(state, action)
            self._feature_cache[key] = cached
        return cached

    def q_value(self, state: WorldState, action: Action) -> float:
        return self._weights.dot(self.features(state, action))

    def best_action(self, state: WorldState) -> Action:
        """Action de Q maximal (premier rencontré en cas d'égalité)."""

        legal = state.legal_actions()
        if not legal:
            raise ValueError("Aucune action légale disponible pour QLearningAgent")
        best = legal[0]
        best_value = self.q_value(state, best)
        for action in legal[1:]:
            value = self.q_value(state, action)
            if value > best_value:
                best, best_value = action, value
        return best

    def max_q_value(self, state: WorldState) -> float:
        return max(self.q_value(state, action) for action in state.legal_actions())

    def choose_action(self, state: WorldState) -> Action:
        action = self.best_action(state)
        self._feature_cache.clear()
        return action

    # -- Apprentissage -----------------------------------------------------------

    def init(self) -> None:
        """Enchaîne `episodes` épisodes d'entraînement."""

        for _ in range(self.episodes):
            self.train_episode()

    def train_episode(self, *, state: WorldState | None = None) -> EpisodeStats:
        """Joue un épisode complet en mettant les poids à jour à chaque pas."""

        self._feature_cache.clear()
        state = state or WorldState.initial(self._config, rng=self._random)
        steps = 0
        total_reward = 0.0
        truncated = False

        while not state.is_terminal():
            if self._max_steps is not None and steps >= self._max_steps:
                truncated = True
                break
            action = self._explore_or_exploit(state)
            successor = state.transition(action)
            reward = transition_reward(action, successor)
            self.update(state, action, reward, successor)
            total_reward += reward
            state = successor
            steps += 1

        self._feature_cache.clear()
        self._episodes_done += 1
        stats = EpisodeStats(
            episode=self._episodes_done,
            steps=steps,
            won=state.is_win() and not state.is_lose(),
            lost=state.is_lose(),
            truncated=truncated,
            total_reward=total_reward,
            final_x=state.player.x,
        )
        self._history.append(stats)
        logger.info(
            "Épisode %d: %d pas, %s, x final %d",
            stats.episode,
            stats.steps,
            "gagné" if stats.won else ("perdu" if stats.lost else "tronqué"),
            int(stats.final_x),
        )
        return stats

    def update(
        self,
        state: WorldState,
        action: Action,
        reward: float,
        successor: WorldState,
    ) -> float:
        """Mise à jour TD(0); retourne l'écart delta."""

        features = self.features(state, action)
        sample = reward + self.gamma * self.max_q_value(successor)
        delta = sample - self.q_value(state, action)
        self._weights.update(features, self.alpha * delta)
        return delta

    def _explore_or_exploit(self, state: WorldState) -> Action:
        if self._random.random() < self.epsilon:
            return self.best_action(state)
        return self._random.choice(state.legal_actions())


__all__ = ["EpisodeStats", "FeatureExtractor", "QLearningAgent"]
