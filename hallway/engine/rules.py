"""Règles et constantes du couloir (Hallway Weaver).

Ce module expose le contrat minimal attendu par le moteur et les agents:
- géométrie du monde (`WORLD_WIDTH`, `WORLD_HEIGHT`, murs, but)
- paramètres physiques (rayons, masse, amortissement, pas de temps)
- obstacles (nombre, vitesse, zone d'exclusion autour du départ)
- radar, récompenses et hyper-paramètres par défaut des agents
"""

# Géométrie (vue de dessus, origine au centre du couloir)
WORLD_WIDTH: float = 360.0
WORLD_HEIGHT: float = 60.0
WALL_THICKNESS: float = 1.0
GOAL_WIDTH: float = 1.0
PLAYER_START_X: float = -WORLD_WIDTH / 2.0 + 10.0
PLAYER_START_Y: float = 0.0

# Corps dynamiques
PLAYER_RADIUS: float = 1.0
PLAYER_MASS: float = 1.0
PLAYER_LINEAR_DAMPING: float = 0.95
OBSTACLE_RADIUS: float = 1.0
OBSTACLE_MASS: float = 1.0
OBSTACLE_COUNT: int = 60
OBSTACLE_SPEED: float = 10.0
OBSTACLE_SAFE_RADIUS: float = 10.0
RESTITUTION: float = 1.0

# Actions et intégration
FORCE_MAGNITUDE: float = 600.0
TIME_STEP: float = 1.0 / 60.0
NUM_STEPS: int = 3
MILESTONE_DISTANCE: int = 10

# Égalité structurelle des états (grille de quantification)
STATE_QUANTUM: float = 1e-6

# Radar
NUM_RAYS: int = 30
RAY_LENGTH: float = 10.0

# Récompenses Q-learning
REWARD_STEP: float = -1.0
REWARD_WIN: float = 1_000.0
REWARD_LOSE: float = -1_000.0

# Score de suivi (WorldState.score)
SCORE_WIN: int = 1_000
SCORE_LOSE: int = -1_000

# MCTS
ROLLOUT_DEPTH: int = 20
EXPLORATION_WEIGHT: float = 1.0

# Q-learning (valeurs de Simulation.main d'origine)
DEFAULT_ALPHA: float = 0.05
DEFAULT_GAMMA: float = 0.9
DEFAULT_EPSILON: float = 0.4
DEFAULT_EPISODES: int = 2_500

__all__ = [
    "WORLD_WIDTH",
    "WORLD_HEIGHT",
    "WALL_THICKNESS",
    "GOAL_WIDTH",
    "PLAYER_START_X",
    "PLAYER_START_Y",
    "PLAYER_RADIUS",
    "PLAYER_MASS",
    "PLAYER_LINEAR_DAMPING",
    "OBSTACLE_RADIUS",
    "OBSTACLE_MASS",
    "OBSTACLE_COUNT",
    "OBSTACLE_SPEED",
    "OBSTACLE_SAFE_RADIUS",
    "RESTITUTION",
    "FORCE_MAGNITUDE",
    "TIME_STEP",
    "NUM_STEPS",
    "MILESTONE_DISTANCE",
    "STATE_QUANTUM",
    "NUM_RAYS",
    "RAY_LENGTH",
    "REWARD_STEP",
    "REWARD_WIN",
    "REWARD_LOSE",
    "SCORE_WIN",
    "SCORE_LOSE",
    "ROLLOUT_DEPTH",
    "EXPLORATION_WEIGHT",
    "DEFAULT_ALPHA",
    "DEFAULT_GAMMA",
    "DEFAULT_EPSILON",
    "DEFAULT_EPISODES",
]
