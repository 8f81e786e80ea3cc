"""Outils de sérialisation pour WorldState.

- Snapshot JSON-friendly (listes/dicts primitifs)
- Restauration complète de WorldState, configuration du run incluse
"""

from __future__ import annotations

from dataclasses import asdict, fields
from typing import Any, Dict, List, Mapping

from hallway.engine.state import BodyInfo, WorldConfig, WorldState

SCHEMA_VERSION = "0.1.0"


def state_to_snapshot(state: WorldState) -> Dict[str, Any]:
    """Convertit un WorldState en snapshot JSON-friendly."""

    return {
        "schema_version": SCHEMA_VERSION,
        "config": asdict(state.config),
        "player": _serialize_body(state.player),
        "obstacles": [
            {**_serialize_body(obstacle), "touched": touched}
            for obstacle, touched in zip(state.obstacles, state.touched)
        ],
        "won": state.won,
        "score": state.score,
        "milestones": sorted(state.milestones),
        "status": state.status.value,
    }


def snapshot_to_state(snapshot: Mapping[str, Any]) -> WorldState:
    """Reconstruit un WorldState à partir d'un snapshot."""

    version = snapshot.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ValueError(f"Unsupported schema_version: {version!r}")

    known = {config_field.name for config_field in fields(WorldConfig)}
    config_data = {
        key: value for key, value in snapshot.get("config", {}).items() if key in known
    }
    obstacles_data: List[Mapping[str, Any]] = snapshot.get("obstacles", [])

    return WorldState(
        config=WorldConfig(**config_data),
        player=_deserialize_body(snapshot["player"]),
        obstacles=tuple(_deserialize_body(data) for data in obstacles_data),
        touched=tuple(bool(data.get("touched", False)) for data in obstacles_data),
        won=bool(snapshot.get("won", False)),
        score=int(snapshot.get("score", 0)),
        milestones=frozenset(int(value) for value in snapshot.get("milestones", [])),
    )


def _serialize_body(body: BodyInfo) -> Dict[str, float]:
    return {"x": body.x, "y": body.y, "vx": body.vx, "vy": body.vy}


def _deserialize_body(data: Mapping[str, Any]) -> BodyInfo:
    return BodyInfo(
        x=float(data["x"]),
        y=float(data["y"]),
        vx=float(data.get("vx", 0.0)),
        vy=float(data.get("vy", 0.0)),
    )


__all__ = ["SCHEMA_VERSION", "state_to_snapshot", "snapshot_to_state"]
