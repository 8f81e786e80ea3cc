"""HallwayRenderer: rendu pygame du couloir.

Responsabilités:
- Dessiner murs et bande de but depuis la configuration du run
- Dessiner le joueur et les obstacles depuis WorldState
- Dessiner optionnellement les rayons radar et un bandeau d'informations

Conventions visuelles:
- Obstacles touchés en rouge, les autres en gris clair
- Rayons radar: vert s'ils touchent un corps, gris sinon
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

import pygame

from hallway.engine.rules import NUM_RAYS, RAY_LENGTH
from hallway.engine.state import WorldState
from hallway.gui.geometry import HallwayGeometry

# Constantes écran
SCREEN_WIDTH = 1440
SCREEN_HEIGHT = 360
MARGIN = 20
HUD_HEIGHT = 70

# Couleurs (palette sobre)
COLOR_BG = (25, 30, 40)
COLOR_FLOOR = (40, 48, 60)
COLOR_WALL = (200, 200, 210)
COLOR_GOAL = (90, 200, 120)
COLOR_PLAYER = (60, 140, 230)
COLOR_OBSTACLE = (180, 180, 180)
COLOR_OBSTACLE_TOUCHED = (230, 70, 60)
COLOR_RAY_HIT = (120, 230, 120)
COLOR_RAY_MISS = (90, 90, 90)
COLOR_TEXT = (240, 240, 240)


class HallwayRenderer:
    """Rendu du couloir et des corps dynamiques."""

    def __init__(self, screen: pygame.Surface, geometry: HallwayGeometry) -> None:
        self.screen = screen
        self.geometry = geometry
        # Police initialisée au premier rendu de texte
        self._font: Optional[pygame.font.Font] = None

    def render_world(self, state: WorldState, *, show_radar: bool = False) -> None:
        self.screen.fill(COLOR_BG)
        self.render_floor()
        self.render_walls(state)
        self.render_goal(state)
        self.render_obstacles(state)
        if show_radar:
            self.render_radar(state)
        self.render_player(state)

    def render_floor(self) -> None:
        width, height = self.geometry.surface_size
        margin = int(self.geometry.margin)
        pygame.draw.rect(
            self.screen,
            COLOR_FLOOR,
            pygame.Rect(margin, margin, width - 2 * margin, height - 2 * margin),
        )

    def render_walls(self, state: WorldState) -> None:
        for wall in state.walls:
            pygame.draw.rect(self.screen, COLOR_WALL, pygame.Rect(*self.geometry.box_rect(wall)))

    def render_goal(self, state: WorldState) -> None:
        pygame.draw.rect(self.screen, COLOR_GOAL, pygame.Rect(*self.geometry.box_rect(state.goal)))

    def render_player(self, state: WorldState) -> None:
        center = self.geometry.world_to_screen(state.player.x, state.player.y)
        pygame.draw.circle(
            self.screen, COLOR_PLAYER, center, self.geometry.length(state.config.player_radius)
        )

    def render_obstacles(self, state: WorldState) -> None:
        radius = self.geometry.length(state.config.obstacle_radius)
        for obstacle, touched in zip(state.obstacles, state.touched):
            color = COLOR_OBSTACLE_TOUCHED if touched else COLOR_OBSTACLE
            pygame.draw.circle(
                self.screen, color, self.geometry.world_to_screen(obstacle.x, obstacle.y), radius
            )

    def render_radar(
        self,
        state: WorldState,
        *,
        num_rays: int = NUM_RAYS,
        ray_length: float = RAY_LENGTH,
    ) -> None:
        origin = state.player.position
        start = self.geometry.world_to_screen(*origin)
        for index, reading in enumerate(state.radar(num_rays, ray_length)):
            angle = 2.0 * math.pi * index / num_rays
            end = self.geometry.world_to_screen(
                origin[0] + math.cos(angle) * reading.distance,
                origin[1] + math.sin(angle) * reading.distance,
            )
            color = COLOR_RAY_HIT if reading.hit else COLOR_RAY_MISS
            pygame.draw.line(self.screen, color, start, end, 1)

    def render_text_lines(self, lines: Iterable[str], origin: Tuple[int, int]) -> None:
        if self._font is None:
            pygame.font.init()
            self._font = pygame.font.SysFont("Arial", 16)
        x, y = origin
        for line in lines:
            surface = self._font.render(line, True, COLOR_TEXT)
            self.screen.blit(surface, (x, y))
            y += surface.get_height() + 4


__all__ = [
    "HallwayRenderer",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "MARGIN",
    "HUD_HEIGHT",
    "COLOR_BG",
]
