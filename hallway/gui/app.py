"""Orchestrateur principal de la GUI du couloir.

Ce module fournit un modèle testable indépendant de la boucle pygame:
- un objet `HallwayApp` coordonnant SimulationService, agent et rendu,
- un état d'interface (`HudState`) synthétisant l'épisode courant.

La boucle d'évènements elle-même vit dans `play_gui.py`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import pygame

from hallway.app.event_bus import EventBus
from hallway.app.events import EpisodeEndedEvent
from hallway.app.simulation_service import SimulationService
from hallway.engine.actions import Action
from hallway.engine.state import WorldConfig, WorldState
from hallway.gui.geometry import HallwayGeometry
from hallway.gui.renderer import HUD_HEIGHT, MARGIN, SCREEN_WIDTH, HallwayRenderer
from hallway.rl.mcts import MCTSAgent
from hallway.rl.policies import KeyboardAgent, PlanningAgent

__all__ = ["HudState", "HallwayApp", "KEY_BINDINGS"]

KEY_BINDINGS: Dict[int, Action] = {
    pygame.K_UP: Action.UP,
    pygame.K_DOWN: Action.DOWN,
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
}


@dataclass(frozen=True)
class HudState:
    """Données agrégées pour le bandeau d'informations."""

    agent_name: str
    steps: int
    score: int
    status: str
    player_x: float
    milestones: int
    paused: bool

    def lines(self) -> Tuple[str, ...]:
        pause = " (pause)" if self.paused else ""
        return (
            f"Agent: {self.agent_name} | Pas: {self.steps} | Score: {self.score}{pause}",
            f"Statut: {self.status} | x: {self.player_x:.1f} | Jalons: {self.milestones}",
        )


class HallwayApp:
    """Orchestrateur de la GUI.

    Cette classe ne gère pas la boucle pygame directement mais fournit
    les opérations nécessaires à l'UI:
    - démarrer ou relancer un épisode,
    - relayer les touches fléchées à un `KeyboardAgent`,
    - avancer d'un pas et exposer un état synthétique prêt à rendre.
    """

    def __init__(
        self,
        agent: PlanningAgent,
        *,
        config: Optional[WorldConfig] = None,
        event_bus: Optional[EventBus] = None,
        screen: Optional[pygame.Surface] = None,
        max_steps: Optional[int] = None,
        show_radar: bool = False,
    ) -> None:
        self.config = config or WorldConfig()
        self.service = SimulationService(
            agent, config=self.config, event_bus=event_bus, max_steps=max_steps
        )
        self.screen = screen
        self.show_radar = show_radar
        self.paused = False
        self.episodes_finished = 0
        self.geometry = HallwayGeometry(self.config, SCREEN_WIDTH, MARGIN)
        self._renderer: Optional[HallwayRenderer] = None
        self.service.event_bus.subscribe(self._on_episode_ended, EpisodeEndedEvent)

    @property
    def agent(self) -> PlanningAgent:
        return self.service.agent

    @property
    def state(self) -> WorldState:
        return self.service.state

    @property
    def window_size(self) -> Tuple[int, int]:
        width, height = self.geometry.surface_size
        return (width, height + HUD_HEIGHT)

    @property
    def renderer(self) -> HallwayRenderer:
        if self.screen is None:
            raise RuntimeError("Aucune surface pygame fournie")
        if self._renderer is None:
            self._renderer = HallwayRenderer(self.screen, self.geometry)
        return self._renderer

    def start_episode(self, *, seed: Optional[int] = None) -> WorldState:
        if isinstance(self.agent, KeyboardAgent):
            self.agent.release_all()
        elif isinstance(self.agent, MCTSAgent):
            # L'arbre retient les successeurs mémoïsés de tout l'épisode.
            self.agent.reset()
        return self.service.start_episode(seed=seed)

    # -- Entrées -----------------------------------------------------------------

    def handle_key_down(self, key: int) -> bool:
        """Relaye une touche pressée; retourne True si elle a été consommée."""

        if key == pygame.K_p:
            self.paused = not self.paused
            return True
        if key == pygame.K_TAB:
            self.show_radar = not self.show_radar
            return True
        action = KEY_BINDINGS.get(key)
        if action is not None and isinstance(self.agent, KeyboardAgent):
            self.agent.press(action)
            return True
        return False

    def handle_key_up(self, key: int) -> bool:
        action = KEY_BINDINGS.get(key)
        if action is not None and isinstance(self.agent, KeyboardAgent):
            self.agent.release(action)
            return True
        return False

    # -- Boucle ------------------------------------------------------------------

    def tick(self) -> bool:
        """Avance d'un pas si possible; retourne True si l'état a changé."""

        if self.paused or self.service.finished:
            return False
        self.service.tick()
        return True

    def get_hud_state(self) -> HudState:
        state = self.state
        return HudState(
            agent_name=self.agent.name,
            steps=self.service.steps,
            score=state.score,
            status=state.status.value,
            player_x=state.player.x,
            milestones=len(state.milestones),
            paused=self.paused,
        )

    def render(self) -> None:
        renderer = self.renderer
        renderer.render_world(self.state, show_radar=self.show_radar)
        _, hallway_height = self.geometry.surface_size
        renderer.render_text_lines(self.get_hud_state().lines(), (MARGIN, hallway_height + 8))

    def _on_episode_ended(self, event: EpisodeEndedEvent) -> None:
        self.episodes_finished += 1
