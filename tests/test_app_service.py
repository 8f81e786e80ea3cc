"""Tests du service de simulation, du bus d'évènements et de l'enregistreur."""

from __future__ import annotations

import json

import pytest

from hallway.app.event_bus import EventBus
from hallway.app.events import EpisodeEndedEvent, EpisodeStartedEvent, StepAppliedEvent
from hallway.app.recorder import TrajectoryRecorder
from hallway.app.simulation_service import SimulationService
from hallway.engine.actions import Action
from hallway.engine.state import StateStatus
from hallway.rl.policies import FixedDirectionAgent, KeyboardAgent


class TestEventBus:
    def test_publish_in_subscription_order(self):
        bus = EventBus()
        received = []
        bus.subscribe(lambda event: received.append(("a", event)))
        bus.subscribe(lambda event: received.append(("b", event)))
        bus.publish("ping")
        assert received == [("a", "ping"), ("b", "ping")]

    def test_unsubscribe_is_idempotent(self):
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        bus.publish("ping")
        assert received == []
        assert len(bus) == 0

    def test_subscriber_errors_propagate(self):
        bus = EventBus()

        def broken(event):
            raise KeyError(event)

        bus.subscribe(broken)
        with pytest.raises(KeyError):
            bus.publish("ping")

    def test_type_filter(self):
        bus = EventBus()
        ended = []
        everything = []
        bus.subscribe(ended.append, EpisodeEndedEvent)
        bus.subscribe(everything.append)
        bus.publish("ping")
        assert ended == []
        assert everything == ["ping"]

    def test_same_callback_subscribed_twice(self):
        bus = EventBus()
        received = []
        first = bus.subscribe(received.append)
        bus.subscribe(received.append)
        first()
        bus.publish("ping")
        assert received == ["ping"]
        assert len(bus) == 1


class TestSimulationService:
    def test_state_requires_episode(self):
        service = SimulationService(KeyboardAgent())
        with pytest.raises(RuntimeError):
            _ = service.state

    def test_full_episode_event_sequence(self, empty_config):
        service = SimulationService(FixedDirectionAgent(), config=empty_config)
        events = []
        service.event_bus.subscribe(events.append)

        service.start_episode(seed=2)
        while not service.finished:
            service.tick()

        assert isinstance(events[0], EpisodeStartedEvent)
        assert events[0].agent_name == "FixedRight"
        steps = [event for event in events if isinstance(event, StepAppliedEvent)]
        assert len(steps) == service.steps
        assert all(event.action is Action.RIGHT for event in steps)
        assert [event.step for event in steps] == list(range(1, service.steps + 1))
        assert isinstance(events[-1], EpisodeEndedEvent)
        assert events[-1].status == StateStatus.WON
        assert not events[-1].truncated

        with pytest.raises(RuntimeError):
            service.tick()

    def test_truncation_ends_episode(self, empty_config):
        service = SimulationService(KeyboardAgent(), config=empty_config, max_steps=2)
        ended = []
        service.event_bus.subscribe(ended.append, EpisodeEndedEvent)
        service.start_episode(seed=0)
        service.tick()
        assert not service.finished
        service.dispatch(Action.UP)
        assert service.finished
        assert ended[0].truncated
        assert ended[0].steps == 2

    def test_terminal_start_publishes_end(self, lost_state):
        service = SimulationService(KeyboardAgent())
        events = []
        service.event_bus.subscribe(events.append)
        service.start_episode(state=lost_state)
        assert service.finished
        assert isinstance(events[-1], EpisodeEndedEvent)
        assert events[-1].status == StateStatus.LOST


class TestTrajectoryRecorder:
    def test_records_json_lines(self, tmp_path, empty_config):
        path = tmp_path / "run.jsonl"
        service = SimulationService(KeyboardAgent(), config=empty_config, max_steps=2)
        with TrajectoryRecorder(path) as recorder:
            recorder.attach(service.event_bus)
            service.start_episode(seed=1)
            service.tick()
            service.tick()

        records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
        assert [record["event"] for record in records] == ["start", "step", "step", "end"]
        assert records[1]["action"] == "NONE"
        assert records[1]["state"]["schema_version"]
        assert records[-1]["truncated"] is True
        assert recorder.lines_written == 4

    def test_detached_after_close(self, tmp_path, empty_config):
        bus = EventBus()
        recorder = TrajectoryRecorder(tmp_path / "run.jsonl")
        recorder.attach(bus)
        recorder.close()
        assert len(bus) == 0
