"""Fixtures partagées: petits couloirs rapides à simuler."""

from __future__ import annotations

import pytest

from hallway.engine.actions import Action
from hallway.engine.state import BodyInfo, WorldConfig, WorldState

SMALL_WIDTH = 40.0
SMALL_HEIGHT = 20.0


def make_config(**overrides) -> WorldConfig:
    """Couloir de 40 x 20, départ à 10 unités du mur gauche, sans obstacle par défaut."""

    values = {
        "width": SMALL_WIDTH,
        "height": SMALL_HEIGHT,
        "player_start_x": -SMALL_WIDTH / 2.0 + 10.0,
        "obstacle_count": 0,
        "obstacle_safe_radius": 5.0,
    }
    values.update(overrides)
    return WorldConfig(**values)


@pytest.fixture
def empty_config() -> WorldConfig:
    return make_config()


@pytest.fixture
def crowded_config() -> WorldConfig:
    return make_config(obstacle_count=4)


@pytest.fixture
def empty_state(empty_config) -> WorldState:
    return WorldState.initial(empty_config, seed=7)


@pytest.fixture
def crowded_state(crowded_config) -> WorldState:
    return WorldState.initial(crowded_config, seed=11)


@pytest.fixture
def lost_state(empty_config) -> WorldState:
    """État perdu: un obstacle immobile posé sur le joueur, puis une transition."""

    start_x, start_y = empty_config.player_start
    state = WorldState(
        config=empty_config,
        player=BodyInfo(start_x, start_y),
        obstacles=(BodyInfo(start_x, start_y),),
    )
    return state.transition(Action.NONE)
