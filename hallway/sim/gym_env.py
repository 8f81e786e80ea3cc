"""Gymnasium environment for Hallway Weaver.

Wrapper autour de `WorldState` pour l'entraînement RL externe.

Observations:
- vecteur dense `radar-dense.v1` (x, y, vx, vy puis R distances radar)

Actions:
- Discrete(5), dans l'ordre canonique UP, DOWN, LEFT, RIGHT, NONE

Rewards:
- coût -1 par pas (+1 pour RIGHT), +1000 au but, -1000 sur un obstacle
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from hallway.engine.actions import ACTIONS, action_from_index
from hallway.engine.state import WorldConfig, WorldState
from hallway.rl.features import RadarFeatureExtractor
from hallway.rl.rewards import transition_reward


class HallwayEnv(gym.Env):
    """Environnement couloir compatible Gymnasium."""

    metadata = {"render_modes": ["ansi"], "render_fps": 20}

    def __init__(
        self,
        *,
        config: WorldConfig | None = None,
        extractor: RadarFeatureExtractor | None = None,
        max_episode_steps: int | None = None,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()
        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"render_mode non supporté: {render_mode}")
        if max_episode_steps is not None and max_episode_steps <= 0:
            raise ValueError("max_episode_steps doit être strictement positif ou None")

        self.config = config or WorldConfig()
        self.extractor = extractor or RadarFeatureExtractor()
        self.max_episode_steps = max_episode_steps
        self.render_mode = render_mode

        self.state: Optional[WorldState] = None
        self._steps = 0

        self.action_space = spaces.Discrete(len(ACTIONS))
        self.observation_space = spaces.Box(
            low=-np.inf,
            high=np.inf,
            shape=(self.extractor.dimension,),
            dtype=np.float64,
        )

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """Réinitialise l'environnement (obstacles tirés via `self.np_random`)."""
        super().reset(seed=seed)

        world_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.state = WorldState.initial(self.config, seed=world_seed)
        self._steps = 0
        return self._get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, float, bool, bool, Dict[str, Any]]:
        """
        Exécute une action.

        Returns:
            observation: nouvelle observation
            reward: récompense
            terminated: True si le joueur a atteint le but ou touché un obstacle
            truncated: True si la limite de pas est atteinte
            info: informations supplémentaires
        """
        if self.state is None:
            raise RuntimeError("Call reset() first")
        if self.state.is_terminal():
            raise RuntimeError("L'épisode est terminé: appeler reset()")

        action_obj = action_from_index(int(action))
        self.state = self.state.transition(action_obj)
        self._steps += 1

        reward = transition_reward(action_obj, self.state)
        terminated = self.state.is_terminal()
        truncated = (
            not terminated
            and self.max_episode_steps is not None
            and self._steps >= self.max_episode_steps
        )
        return self._get_observation(), reward, terminated, truncated, self._get_info()

    def _get_observation(self) -> np.ndarray:
        assert self.state is not None
        return self.extractor.extract(self.state)

    def _get_info(self) -> Dict[str, Any]:
        assert self.state is not None
        return {
            "steps": self._steps,
            "status": self.state.status.value,
            "score": self.state.score,
        }

    def render(self) -> Optional[str]:
        if self.render_mode == "ansi" and self.state is not None:
            player = self.state.player
            return (
                f"step={self._steps} x={player.x:.2f} y={player.y:.2f} "
                f"status={self.state.status.value}"
            )
        return None


__all__ = ["HallwayEnv"]
