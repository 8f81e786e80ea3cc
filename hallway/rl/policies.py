"""Contrat d'agent commun et stratégies triviales.

Toutes les stratégies (aléatoire, direction fixe, clavier, Q-learning, MCTS)
exposent `choose_action(state) -> Action`; la boucle de pilotage ne dépend que
de ce contrat. `init()` est un hook optionnel de préparation (no-op par défaut).
"""

from __future__ import annotations

import random
from typing import Iterable, Optional, Set

from hallway.engine.actions import Action
from hallway.engine.state import WorldState


class PlanningAgent:
    """Interface minimale utilisée par la boucle de pilotage."""

    def __init__(self, *, name: str | None = None) -> None:
        self._name = name or self.__class__.__name__

    @property
    def name(self) -> str:
        return self._name

    def init(self) -> None:
        """Prépare l'agent avant usage (pré-entraînement éventuel)."""

    def choose_action(self, state: WorldState) -> Action:
        raise NotImplementedError


class RandomAgent(PlanningAgent):
    """Politique uniformément aléatoire sur les actions légales."""

    def __init__(
        self,
        *,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(name="Random")
        self._random = rng or random.Random(seed)

    def choose_action(self, state: WorldState) -> Action:
        legal = state.legal_actions()
        if not legal:
            raise ValueError("Aucune action légale disponible pour RandomAgent")
        return self._random.choice(legal)


class FixedDirectionAgent(PlanningAgent):
    """Pousse toujours dans la même direction (vers le but par défaut)."""

    def __init__(self, direction: Action = Action.RIGHT) -> None:
        super().__init__(name=f"Fixed{direction.value.capitalize()}")
        self._direction = direction

    @property
    def direction(self) -> Action:
        return self._direction

    def choose_action(self, state: WorldState) -> Action:
        return self._direction


class KeyboardAgent(PlanningAgent):
    """Agent piloté par les touches maintenues.

    Priorité: haut > bas > gauche > droite; aucune touche -> NONE.
    """

    PRIORITY = (Action.UP, Action.DOWN, Action.LEFT, Action.RIGHT)

    def __init__(self) -> None:
        super().__init__(name="Keyboard")
        self._held: Set[Action] = set()

    @property
    def held(self) -> Set[Action]:
        return set(self._held)

    def press(self, action: Action) -> None:
        if action is Action.NONE:
            return
        self._held.add(action)

    def release(self, action: Action) -> None:
        self._held.discard(action)

    def release_all(self) -> None:
        self._held.clear()

    def set_held(self, actions: Iterable[Action]) -> None:
        self._held = {action for action in actions if action is not Action.NONE}

    def choose_action(self, state: WorldState) -> Action:
        for action in self.PRIORITY:
            if action in self._held:
                return action
        return Action.NONE


__all__ = [
    "PlanningAgent",
    "RandomAgent",
    "FixedDirectionAgent",
    "KeyboardAgent",
]
