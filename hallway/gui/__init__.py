"""GUI package: visualisation pygame du couloir.

Modules:
- geometry: transformation coordonnées monde -> écran
- renderer: rendu des murs, du but, des corps et du radar
- app: orchestrateur testable (agent, service de simulation, HUD)
"""

__all__ = ["geometry", "renderer", "app"]
