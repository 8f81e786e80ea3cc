"""Boucle headless pour le couloir.

Ce module expose un environnement minimaliste pour piloter le moteur via une
API `reset()` / `step()` et une boucle `run_episode` qui interroge un
`PlanningAgent` à chaque pas: action choisie, transition, état suivant.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from hallway.engine.actions import Action
from hallway.engine.state import WorldConfig, WorldState
from hallway.rl.policies import PlanningAgent
from hallway.rl.rewards import transition_reward


@dataclass(frozen=True)
class StepResult:
    """Résultat d'un appel à HeadlessEnv.step()."""

    state: WorldState
    reward: float
    done: bool
    truncated: bool
    info: Dict[str, Any]


@dataclass(frozen=True)
class EpisodeSummary:
    """Résumé d'un épisode piloté par un agent."""

    seed: int | None
    agent_name: str
    steps: int
    won: bool
    lost: bool
    truncated: bool
    score: int
    total_reward: float
    actions: Tuple[Action, ...]
    final_state: WorldState


class HeadlessEnv:
    """Environnement headless léger pour le moteur du couloir."""

    def __init__(
        self,
        *,
        config: WorldConfig | None = None,
        seed: int | None = None,
        max_steps: int | None = None,
    ) -> None:
        if max_steps is not None and max_steps <= 0:
            raise ValueError("max_steps doit être strictement positif ou None")
        self._config = config or WorldConfig()
        self._base_seed = seed
        self._max_steps = max_steps
        self._state: WorldState | None = None
        self._steps = 0

    @property
    def config(self) -> WorldConfig:
        return self._config

    @property
    def state(self) -> WorldState:
        """Retourne l'état courant (reset doit avoir été appelé)."""

        if self._state is None:
            raise RuntimeError("reset() doit être appelé avant d'accéder à l'état")
        return self._state

    @property
    def steps(self) -> int:
        return self._steps

    def reset(
        self,
        *,
        seed: int | None = None,
        state: WorldState | None = None,
    ) -> WorldState:
        """Réinitialise l'environnement et renvoie l'état initial."""

        if state is not None:
            self._state = state
        else:
            effective_seed = seed if seed is not None else self._base_seed
            self._state = WorldState.initial(self._config, seed=effective_seed)
        self._steps = 0
        return self._state

    def legal_actions(self) -> List[Action]:
        return self.state.legal_actions()

    def step(self, action: Action) -> StepResult:
        """Applique une action et renvoie le résultat."""

        current_state = self.state
        if current_state.is_terminal():
            raise RuntimeError("L'épisode est terminé: appeler reset()")

        new_state = current_state.transition(action)
        self._state = new_state
        self._steps += 1

        done = new_state.is_terminal()
        truncated = not done and self._max_steps is not None and self._steps >= self._max_steps
        info = {"last_action": action, "steps": self._steps, "status": new_state.status.value}
        return StepResult(
            state=new_state,
            reward=transition_reward(action, new_state),
            done=done,
            truncated=truncated,
            info=info,
        )


def run_episode(
    agent: PlanningAgent,
    *,
    env: HeadlessEnv | None = None,
    seed: int | None = None,
    state: WorldState | None = None,
    max_steps: int | None = None,
    on_step: Optional[Callable[[StepResult], None]] = None,
) -> EpisodeSummary:
    """Pilote un épisode complet avec `agent` (sans appeler `agent.init()`)."""

    if max_steps is not None and max_steps <= 0:
        raise ValueError("max_steps doit être strictement positif ou None")

    env = env or HeadlessEnv()
    current = env.reset(seed=seed, state=state)
    actions: List[Action] = []
    total_reward = 0.0
    truncated = False

    while not current.is_terminal():
        if max_steps is not None and len(actions) >= max_steps:
            truncated = True
            break
        action = agent.choose_action(current)
        result = env.step(action)
        actions.append(action)
        total_reward += result.reward
        current = result.state
        if on_step is not None:
            on_step(result)
        if result.truncated:
            truncated = True
            break

    return EpisodeSummary(
        seed=seed,
        agent_name=agent.name,
        steps=len(actions),
        won=current.is_win() and not current.is_lose(),
        lost=current.is_lose(),
        truncated=truncated,
        score=current.score,
        total_reward=total_reward,
        actions=tuple(actions),
        final_state=current,
    )


__all__ = ["EpisodeSummary", "HeadlessEnv", "StepResult", "run_episode"]
