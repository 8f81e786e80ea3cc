"""Évènements publiés par la couche application (`hallway.app`)."""

from __future__ import annotations

from dataclasses import dataclass

from hallway.engine.actions import Action
from hallway.engine.state import StateStatus, WorldState


@dataclass(frozen=True)
class EpisodeStartedEvent:
    """Émis lorsqu'un nouvel épisode est initialisé."""

    state: WorldState
    agent_name: str


@dataclass(frozen=True)
class StepAppliedEvent:
    """Émis après chaque transition."""

    action: Action
    previous_state: WorldState
    new_state: WorldState
    step: int


@dataclass(frozen=True)
class EpisodeEndedEvent:
    """Émis quand l'état courant devient terminal (ou que l'épisode est tronqué)."""

    state: WorldState
    status: StateStatus
    steps: int
    truncated: bool = False
