"""Service d'orchestration d'un épisode piloté par un agent."""

from __future__ import annotations

from hallway.app.event_bus import EventBus
from hallway.app.events import EpisodeEndedEvent, EpisodeStartedEvent, StepAppliedEvent
from hallway.engine.actions import Action
from hallway.engine.state import WorldConfig, WorldState
from hallway.rl.policies import PlanningAgent


class SimulationService:
    """Wrappe `WorldState` et publie les évènements nécessaires à la GUI/sim."""

    def __init__(
        self,
        agent: PlanningAgent,
        *,
        config: WorldConfig | None = None,
        event_bus: EventBus | None = None,
        max_steps: int | None = None,
    ) -> None:
        if max_steps is not None and max_steps <= 0:
            raise ValueError("max_steps doit être strictement positif ou None")
        self._agent = agent
        self._config = config or WorldConfig()
        self._event_bus = event_bus or EventBus()
        self._max_steps = max_steps
        self._state: WorldState | None = None
        self._steps = 0
        self._ended = False

    @property
    def event_bus(self) -> EventBus:
        """Retourne le bus d'évènements utilisé par le service."""

        return self._event_bus

    @property
    def agent(self) -> PlanningAgent:
        return self._agent

    @property
    def state(self) -> WorldState:
        """État courant de l'épisode (erreur si aucun épisode lancé)."""

        if self._state is None:
            raise RuntimeError("Aucun épisode initialisé. Utiliser start_episode().")
        return self._state

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def finished(self) -> bool:
        return self._ended

    def start_episode(
        self,
        *,
        seed: int | None = None,
        state: WorldState | None = None,
    ) -> WorldState:
        """Initialise un nouvel épisode et publie l'évènement associé."""

        self._state = state if state is not None else WorldState.initial(self._config, seed=seed)
        self._steps = 0
        self._ended = False
        self._event_bus.publish(
            EpisodeStartedEvent(state=self._state, agent_name=self._agent.name)
        )
        if self._state.is_terminal():
            self._end(truncated=False)
        return self._state

    def tick(self) -> WorldState:
        """Demande une action à l'agent et l'applique."""

        current = self.state
        if self._ended:
            raise RuntimeError("L'épisode est terminé: appeler start_episode()")
        return self.dispatch(self._agent.choose_action(current))

    def dispatch(self, action: Action) -> WorldState:
        """Applique une action, puis notifie les observateurs."""

        current_state = self.state
        if self._ended:
            raise RuntimeError("L'épisode est terminé: appeler start_episode()")

        new_state = current_state.transition(action)
        self._state = new_state
        self._steps += 1

        self._event_bus.publish(
            StepAppliedEvent(
                action=action,
                previous_state=current_state,
                new_state=new_state,
                step=self._steps,
            )
        )

        if new_state.is_terminal():
            self._end(truncated=False)
        elif self._max_steps is not None and self._steps >= self._max_steps:
            self._end(truncated=True)

        return new_state

    def _end(self, *, truncated: bool) -> None:
        self._ended = True
        state = self.state
        self._event_bus.publish(
            EpisodeEndedEvent(
                state=state,
                status=state.status,
                steps=self._steps,
                truncated=truncated,
            )
        )
