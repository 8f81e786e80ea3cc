"""Actions du joueur.

Ensemble fermé de poussées discrètes appliquées au joueur pendant une transition.
L'action NONE est toujours légale, ce qui garantit un ensemble d'actions non vide.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from hallway.engine.rules import FORCE_MAGNITUDE


class Action(Enum):
    """Poussée appliquée au joueur."""

    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    NONE = "NONE"


# Ordre canonique (également l'ordre des enfants MCTS et des index gymnasium)
ACTIONS: Tuple[Action, ...] = (
    Action.UP,
    Action.DOWN,
    Action.LEFT,
    Action.RIGHT,
    Action.NONE,
)

_DIRECTIONS: Dict[Action, Tuple[float, float]] = {
    Action.UP: (0.0, 1.0),
    Action.DOWN: (0.0, -1.0),
    Action.LEFT: (-1.0, 0.0),
    Action.RIGHT: (1.0, 0.0),
    Action.NONE: (0.0, 0.0),
}


def force_vector(action: Action, magnitude: float = FORCE_MAGNITUDE) -> Tuple[float, float]:
    """Retourne la force (fx, fy) associée à une action."""

    dx, dy = _DIRECTIONS[action]
    return (dx * magnitude, dy * magnitude)


def action_index(action: Action) -> int:
    return ACTIONS.index(action)


def action_from_index(index: int) -> Action:
    if not 0 <= index < len(ACTIONS):
        raise ValueError(f"Index d'action invalide: {index}")
    return ACTIONS[index]


__all__ = [
    "Action",
    "ACTIONS",
    "force_vector",
    "action_index",
    "action_from_index",
]
