"""Geometry utilities for hallway rendering.

Ce module fournit la classe HallwayGeometry qui calcule les coordonnées écran
des éléments du couloir (murs, but, disques) à partir des coordonnées monde.

Le monde est centré sur l'origine avec l'axe y vers le haut; l'écran a son
origine en haut à gauche avec l'axe y vers le bas.
"""

from __future__ import annotations

from typing import Tuple

from hallway.engine.state import StaticBox, WorldConfig


class HallwayGeometry:
    """Compute screen coordinates from world positions."""

    def __init__(self, config: WorldConfig, surface_width: float, margin: float) -> None:
        """Initialize geometry calculator.

        Args:
            config: Run configuration (hallway size)
            surface_width: Width available for the hallway, margins included
            margin: Margin around the hallway in pixels
        """
        if surface_width <= 2 * margin:
            raise ValueError("surface_width doit dépasser deux marges")
        self.config = config
        self.margin = margin
        self.scale = (surface_width - 2 * margin) / config.width

    def world_to_screen(self, x: float, y: float) -> Tuple[int, int]:
        """Project a world point to integer screen pixels."""
        screen_x = self.margin + (x + self.config.width / 2.0) * self.scale
        screen_y = self.margin + (self.config.height / 2.0 - y) * self.scale
        return (int(round(screen_x)), int(round(screen_y)))

    def length(self, value: float) -> int:
        """Scale a world length, never below one pixel."""
        return max(1, int(round(value * self.scale)))

    def box_rect(self, box: StaticBox) -> Tuple[int, int, int, int]:
        """(left, top, width, height) of a static box on screen."""
        left, top = self.world_to_screen(
            box.center_x - box.half_width, box.center_y + box.half_height
        )
        return (left, top, self.length(2 * box.half_width), self.length(2 * box.half_height))

    @property
    def surface_size(self) -> Tuple[int, int]:
        """Get the surface size required to contain the hallway.

        Returns:
            (width, height) in pixels
        """
        width = self.config.width * self.scale + 2 * self.margin
        height = self.config.height * self.scale + 2 * self.margin
        return (int(round(width)), int(round(height)))


__all__ = ["HallwayGeometry"]
