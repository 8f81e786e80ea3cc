"""Engine package exposing rules, actions and the world state."""

from . import rules  # re-export for convenience
from .actions import ACTIONS, Action
from .state import WorldConfig, WorldState

__all__ = ["rules", "ACTIONS", "Action", "WorldConfig", "WorldState"]
