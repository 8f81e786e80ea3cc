"""Simulation headless et environnement gymnasium."""

from .gym_env import HallwayEnv
from .runner import EpisodeSummary, HeadlessEnv, StepResult, run_episode

__all__ = [
    "HeadlessEnv",
    "StepResult",
    "EpisodeSummary",
    "run_episode",
    "HallwayEnv",
]
