"""Services d'application pour orchestrer un épisode du couloir."""

from .event_bus import EventBus
from .events import EpisodeEndedEvent, EpisodeStartedEvent, StepAppliedEvent
from .recorder import TrajectoryRecorder
from .simulation_service import SimulationService

__all__ = [
    "EventBus",
    "TrajectoryRecorder",
    "SimulationService",
    "EpisodeStartedEvent",
    "StepAppliedEvent",
    "EpisodeEndedEvent",
]
