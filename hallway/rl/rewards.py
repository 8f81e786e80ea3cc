"""Récompenses de transition pour le Q-learning et l'environnement gymnasium."""

from __future__ import annotations

from hallway.engine.actions import Action
from hallway.engine.rules import REWARD_LOSE, REWARD_STEP, REWARD_WIN
from hallway.engine.state import WorldState


def transition_reward(action: Action, successor: WorldState) -> float:
    """Récompense de la transition menant à `successor`.

    Coût fixe par pas, signe inversé pour la poussée vers le but (RIGHT),
    récompenses terminales fixes. La défaite l'emporte si le même pas gagne
    et touche un obstacle.
    """

    if successor.is_lose():
        return REWARD_LOSE
    if successor.is_win():
        return REWARD_WIN
    if action == Action.RIGHT:
        return -REWARD_STEP
    return REWARD_STEP


__all__ = ["transition_reward"]
