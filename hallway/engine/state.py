"""État du couloir et logique de transition.

Ce module définit l'état immuable d'un épisode (joueur, obstacles, but, murs)
et la fonction de transition état + action -> état successeur.

Points clés:
- Un `WorldState` n'est jamais modifié après construction: `transition()`
  reconstruit un monde physique neuf à partir de l'instantané, applique la
  poussée au joueur, avance d'un nombre fixe de sous-pas puis relit les
  contacts pour dériver `won` et les drapeaux `touched`.
- L'égalité et le hash sont structurels (cinématique quantifiée + statut),
  ce qui permet d'utiliser les états comme clés du cache de features et de
  l'arbre MCTS.
- Les états terminaux sont absorbants: `won` et `touched` ne repassent
  jamais à False.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from hallway.engine import rules
from hallway.engine.actions import ACTIONS, Action, force_vector
from hallway.engine.physics import Contact, PhysicsWorld, RayHit

QuantizedBody = Tuple[int, int, int, int]


class StateStatus(Enum):
    """Classe de statut utilisée par l'égalité structurelle."""

    ONGOING = "ONGOING"
    WON = "WON"
    LOST = "LOST"


@dataclass(frozen=True)
class BodyInfo:
    """Instantané cinématique d'un corps dynamique."""

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def velocity(self) -> Tuple[float, float]:
        return (self.vx, self.vy)

    def quantized(self, quantum: float) -> QuantizedBody:
        """Projette la cinématique sur une grille de pas `quantum`."""

        return (
            round(self.x / quantum),
            round(self.y / quantum),
            round(self.vx / quantum),
            round(self.vy / quantum),
        )


@dataclass(frozen=True)
class StaticBox:
    """Boîte statique (mur ou bande de but) définie par son centre et ses demi-côtés."""

    name: str
    center_x: float
    center_y: float
    half_width: float
    half_height: float


@dataclass(frozen=True)
class WorldConfig:
    """Géométrie et physique d'un run.

    Tous les états d'un même run partagent la même configuration: murs et but
    sont dérivés d'elle et sont donc identiques d'un état à l'autre.
    """

    width: float = rules.WORLD_WIDTH
    height: float = rules.WORLD_HEIGHT
    wall_thickness: float = rules.WALL_THICKNESS
    goal_width: float = rules.GOAL_WIDTH
    player_start_x: float = rules.PLAYER_START_X
    player_start_y: float = rules.PLAYER_START_Y
    player_radius: float = rules.PLAYER_RADIUS
    player_mass: float = rules.PLAYER_MASS
    player_damping: float = rules.PLAYER_LINEAR_DAMPING
    obstacle_radius: float = rules.OBSTACLE_RADIUS
    obstacle_mass: float = rules.OBSTACLE_MASS
    obstacle_count: int = rules.OBSTACLE_COUNT
    obstacle_speed: float = rules.OBSTACLE_SPEED
    obstacle_safe_radius: float = rules.OBSTACLE_SAFE_RADIUS
    restitution: float = rules.RESTITUTION
    force_magnitude: float = rules.FORCE_MAGNITUDE
    time_step: float = rules.TIME_STEP
    num_steps: int = rules.NUM_STEPS
    milestone_distance: int = rules.MILESTONE_DISTANCE
    quantum: float = rules.STATE_QUANTUM

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width et height doivent être strictement positifs")
        if self.obstacle_count < 0:
            raise ValueError(f"obstacle_count doit être positif (reçu: {self.obstacle_count})")
        if self.num_steps <= 0:
            raise ValueError(f"num_steps doit être strictement positif (reçu: {self.num_steps})")
        if self.quantum <= 0:
            raise ValueError(f"quantum doit être strictement positif (reçu: {self.quantum})")
        if not 0.0 <= self.player_damping <= 1.0:
            raise ValueError("player_damping doit être dans [0, 1]")
        if self.obstacle_count > 0 and self._farthest_placement_distance() <= self.obstacle_safe_radius:
            raise ValueError(
                "obstacle_safe_radius couvre toute la zone de placement des obstacles"
            )

    def placement_half_extents(self) -> Tuple[float, float]:
        """Demi-dimensions de la zone où les centres d'obstacles sont tirés."""

        margin = self.wall_thickness / 2.0 + self.obstacle_radius
        return (
            max(0.0, self.width / 2.0 - margin),
            max(0.0, self.height / 2.0 - margin),
        )

    def _farthest_placement_distance(self) -> float:
        half_w, half_h = self.placement_half_extents()
        return math.hypot(
            half_w + abs(self.player_start_x), half_h + abs(self.player_start_y)
        )

    @property
    def goal_x(self) -> float:
        return self.width / 2.0

    @property
    def player_start(self) -> Tuple[float, float]:
        return (self.player_start_x, self.player_start_y)

    def goal(self) -> StaticBox:
        return StaticBox(
            name="goal",
            center_x=self.goal_x,
            center_y=0.0,
            half_width=self.goal_width / 2.0,
            half_height=self.height / 2.0,
        )

    def walls(self) -> Tuple[StaticBox, ...]:
        """Murs haut, bas et gauche (le bord droit est le but)."""

        half_t = self.wall_thickness / 2.0
        return (
            StaticBox("top", 0.0, self.height / 2.0, self.width / 2.0, half_t),
            StaticBox("bottom", 0.0, -self.height / 2.0, self.width / 2.0, half_t),
            StaticBox("left", -self.width / 2.0, 0.0, half_t, self.height / 2.0),
        )


@dataclass(frozen=True)
class _BodyHandles:
    """Identifiants pybullet des corps d'un monde physique reconstruit."""

    player: Optional[int]
    goal: int
    walls: Tuple[int, ...]
    obstacles: Tuple[int, ...]


def resolve_contacts(
    contacts: Iterable[Contact],
    *,
    player: int,
    goal: int,
    obstacles: Tuple[int, ...],
    won: bool,
    touched: Tuple[bool, ...],
) -> Tuple[bool, Tuple[bool, ...]]:
    """Dérive `won` et les drapeaux `touched` à partir des contacts d'une avance.

    Tous les contacts sont appliqués: un même pas peut à la fois gagner et
    toucher un obstacle. Les drapeaux existants sont conservés (monotonie).
    """

    index_by_body = {body_id: index for index, body_id in enumerate(obstacles)}
    updated = list(touched)
    for contact in contacts:
        if not contact.involves(player):
            continue
        other = contact.other(player)
        if other == goal:
            won = True
        elif other in index_by_body:
            updated[index_by_body[other]] = True
    return won, tuple(updated)


@dataclass(frozen=True, eq=False)
class WorldState:
    """État immuable du couloir.

    Toutes les modifications passent par `transition()` qui retourne un nouvel état.
    """

    config: WorldConfig
    player: BodyInfo
    obstacles: Tuple[BodyInfo, ...] = ()
    touched: Tuple[bool, ...] = ()
    won: bool = False
    # Suivi uniquement (hors égalité)
    score: int = 0
    milestones: FrozenSet[int] = frozenset()
    # Mémoïsation (successeurs par action, lectures radar)
    _successors: Dict[Action, "WorldState"] = field(
        default_factory=dict, init=False, repr=False
    )
    _radar: Dict[Tuple[int, float], Tuple[RayHit, ...]] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        obstacles = tuple(self.obstacles)
        touched = tuple(self.touched) if self.touched else (False,) * len(obstacles)
        if len(touched) != len(obstacles):
            raise ValueError(
                f"touched ({len(touched)}) doit avoir la taille de obstacles ({len(obstacles)})"
            )
        object.__setattr__(self, "obstacles", obstacles)
        object.__setattr__(self, "touched", touched)
        object.__setattr__(self, "milestones", frozenset(self.milestones))

    # -- Construction ------------------------------------------------------------

    @classmethod
    def initial(
        cls,
        config: WorldConfig | None = None,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> "WorldState":
        """Crée l'état initial d'un épisode.

        Args:
            config: configuration du run (par défaut `WorldConfig()`)
            seed: graine du placement des obstacles (ignorée si `rng` est fourni)
            rng: générateur à utiliser pour le placement

        Returns:
            État avec le joueur au repos au point de départ et des obstacles
            dispersés hors du disque d'exclusion, à vitesse fixe et cap aléatoire.
        """

        config = config or WorldConfig()
        rng = rng or random.Random(seed)
        player = BodyInfo(config.player_start_x, config.player_start_y)
        return cls(config=config, player=player, obstacles=_scatter_obstacles(config, rng))

    # -- Statut ------------------------------------------------------------------

    def is_win(self) -> bool:
        return self.won

    def is_lose(self) -> bool:
        return any(self.touched)

    def is_terminal(self) -> bool:
        return self.is_win() or self.is_lose()

    @property
    def status(self) -> StateStatus:
        if self.is_lose():
            return StateStatus.LOST
        if self.is_win():
            return StateStatus.WON
        return StateStatus.ONGOING

    def legal_actions(self) -> List[Action]:
        """Retourne les actions légales (toujours les cinq poussées)."""

        return list(ACTIONS)

    @property
    def goal(self) -> StaticBox:
        return self.config.goal()

    @property
    def walls(self) -> Tuple[StaticBox, ...]:
        return self.config.walls()

    # -- Transition --------------------------------------------------------------

    def transition(self, action: Action) -> "WorldState":
        """Retourne l'état successeur après application de `action` au joueur.

        Le résultat est mémoïsé par action: deux appels retournent le même objet.
        """

        cached = self._successors.get(action)
        if cached is not None:
            return cached

        config = self.config
        with PhysicsWorld(time_step=config.time_step) as world:
            handles = self._populate(world, include_player=True)
            assert handles.player is not None
            world.apply_force(handles.player, force_vector(action, config.force_magnitude))
            contacts = world.step(config.num_steps)
            player = BodyInfo(*world.kinematics(handles.player))
            obstacles = tuple(BodyInfo(*world.kinematics(body)) for body in handles.obstacles)

        won, touched = resolve_contacts(
            contacts,
            player=handles.player,
            goal=handles.goal,
            obstacles=handles.obstacles,
            won=self.won,
            touched=self.touched,
        )
        successor = WorldState(
            config=config,
            player=player,
            obstacles=obstacles,
            touched=touched,
            won=won,
            score=self._next_score(action, won, any(touched)),
            milestones=self._next_milestones(player),
        )
        self._successors[action] = successor
        return successor

    def successors(self) -> Tuple["WorldState", ...]:
        """Un successeur par action légale, dans l'ordre canonique des actions."""

        return tuple(self.transition(action) for action in self.legal_actions())

    def _next_score(self, action: Action, won: bool, lost: bool) -> int:
        score = self.score
        if action == Action.LEFT:
            score -= 1
        elif action == Action.RIGHT:
            score += 1
        if lost:
            score += rules.SCORE_LOSE
        elif won:
            score += rules.SCORE_WIN
        return score

    def _next_milestones(self, player: BodyInfo) -> FrozenSet[int]:
        distance = self.config.milestone_distance
        if player.x > distance - self.config.width / 2.0:
            return self.milestones | {int(int(player.x) / distance)}
        return self.milestones

    # -- Perception --------------------------------------------------------------

    def radar(
        self,
        num_rays: int = rules.NUM_RAYS,
        ray_length: float = rules.RAY_LENGTH,
    ) -> Tuple[RayHit, ...]:
        """Lectures radar: un rayon par angle 2*pi*i/num_rays depuis la coque du joueur.

        Le monde de détection contient obstacles, murs et but (pas le joueur).
        """

        if num_rays <= 0:
            raise ValueError(f"num_rays doit être strictement positif (reçu: {num_rays})")

        key = (num_rays, ray_length)
        cached = self._radar.get(key)
        if cached is not None:
            return cached

        angles = [2.0 * math.pi * index / num_rays for index in range(num_rays)]
        with PhysicsWorld(time_step=self.config.time_step) as world:
            self._populate(world, include_player=False)
            readings = world.raycast(
                self.player.position,
                angles,
                ray_length,
                start_offset=self.config.player_radius,
            )
        self._radar[key] = readings
        return readings

    # -- Monde physique ----------------------------------------------------------

    def _populate(self, world: PhysicsWorld, *, include_player: bool) -> _BodyHandles:
        """Enregistre l'instantané (et la géométrie statique) dans `world`."""

        config = self.config
        player_id: Optional[int] = None
        if include_player:
            player_id = world.add_circle(
                self.player.x,
                self.player.y,
                self.player.vx,
                self.player.vy,
                radius=config.player_radius,
                mass=config.player_mass,
                linear_damping=config.player_damping,
                restitution=config.restitution,
            )

        obstacle_ids = tuple(
            world.add_circle(
                obstacle.x,
                obstacle.y,
                obstacle.vx,
                obstacle.vy,
                radius=config.obstacle_radius,
                mass=config.obstacle_mass,
                restitution=config.restitution,
            )
            for obstacle in self.obstacles
        )

        goal = config.goal()
        goal_id = world.add_box(
            goal.center_x,
            goal.center_y,
            goal.half_width,
            goal.half_height,
            restitution=config.restitution,
        )
        wall_ids = tuple(
            world.add_box(
                wall.center_x,
                wall.center_y,
                wall.half_width,
                wall.half_height,
                restitution=config.restitution,
            )
            for wall in config.walls()
        )
        return _BodyHandles(player=player_id, goal=goal_id, walls=wall_ids, obstacles=obstacle_ids)

    # -- Égalité structurelle ----------------------------------------------------

    def identity_key(self) -> Tuple[object, ...]:
        """Clé d'égalité: cinématique quantifiée (ordre stable) + statut."""

        quantum = self.config.quantum
        return (
            self.status,
            len(self.obstacles),
            self.player.quantized(quantum),
            tuple(obstacle.quantized(quantum) for obstacle in self.obstacles),
        )

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, WorldState):
            return NotImplemented
        return self.identity_key() == other.identity_key()

    def __hash__(self) -> int:
        return hash(self.identity_key())


def _scatter_obstacles(config: WorldConfig, rng: random.Random) -> Tuple[BodyInfo, ...]:
    """Disperse les obstacles uniformément, hors du disque d'exclusion du départ."""

    half_w, half_h = config.placement_half_extents()
    start_x, start_y = config.player_start

    obstacles: List[BodyInfo] = []
    for _ in range(config.obstacle_count):
        heading = rng.random() * 2.0 * math.pi
        vx = math.cos(heading) * config.obstacle_speed
        vy = math.sin(heading) * config.obstacle_speed

        x = rng.uniform(-half_w, half_w)
        y = rng.uniform(-half_h, half_h)
        while math.hypot(x - start_x, y - start_y) < config.obstacle_safe_radius:
            x = rng.uniform(-half_w, half_w)
            y = rng.uniform(-half_h, half_h)

        obstacles.append(BodyInfo(x, y, vx, vy))
    return tuple(obstacles)


__all__ = [
    "BodyInfo",
    "StaticBox",
    "StateStatus",
    "WorldConfig",
    "WorldState",
    "resolve_contacts",
]
