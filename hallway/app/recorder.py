"""Enregistrement de trajectoires au format JSON lines."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Optional

from hallway.app.event_bus import EventBus
from hallway.app.events import EpisodeEndedEvent, EpisodeStartedEvent, StepAppliedEvent
from hallway.engine.serialize import state_to_snapshot


class TrajectoryRecorder:
    """Abonné du bus qui écrit une ligne JSON par évènement.

    Lignes produites:
        {"event": "start", "agent": ..., "state": snapshot}
        {"event": "step", "step": n, "action": "RIGHT", "state": snapshot}
        {"event": "end", "status": "WON", "steps": n, "truncated": false}
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._handle: Optional[IO[str]] = None
        self._unsubscribe = None
        self.lines_written = 0

    @property
    def path(self) -> Path:
        return self._path

    def attach(self, event_bus: EventBus) -> None:
        if self._unsubscribe is not None:
            raise RuntimeError("TrajectoryRecorder déjà attaché")
        self._handle = self._path.open("w", encoding="utf-8")
        self._unsubscribe = event_bus.subscribe(self.on_event)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "TrajectoryRecorder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def on_event(self, event: object) -> None:
        if isinstance(event, EpisodeStartedEvent):
            record = {
                "event": "start",
                "agent": event.agent_name,
                "state": state_to_snapshot(event.state),
            }
        elif isinstance(event, StepAppliedEvent):
            record = {
                "event": "step",
                "step": event.step,
                "action": event.action.value,
                "state": state_to_snapshot(event.new_state),
            }
        elif isinstance(event, EpisodeEndedEvent):
            record = {
                "event": "end",
                "status": event.status.value,
                "steps": event.steps,
                "truncated": event.truncated,
            }
        else:
            return
        self._write(record)

    def _write(self, record: dict) -> None:
        if self._handle is None:
            raise RuntimeError("TrajectoryRecorder non attaché")
        self._handle.write(json.dumps(record) + "\n")
        self._handle.flush()
        self.lines_written += 1


__all__ = ["TrajectoryRecorder"]
