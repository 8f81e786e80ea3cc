"""Collaborateur physique basé sur pybullet.

Le moteur ne consomme que quatre opérations du monde physique:
- enregistrer un corps (position, vitesse, forme, masse finie ou infinie)
- avancer la simulation d'un nombre fixe de sous-pas
- rapporter les contacts apparus pendant cette avance
- lancer des rayons et rapporter la cible la plus proche

Chaque `PhysicsWorld` possède son propre client pybullet en mode DIRECT
(pas de GUI). Le monde est plan: tous les corps sont centrés sur z = 0, la
gravité est nulle et seules les composantes (x, y) sont relues.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import pybullet as p

from hallway.engine.rules import TIME_STEP

# Demi-hauteur des boîtes statiques (murs, but): largement au-dessus des sphères
BOX_HALF_DEPTH = 5.0


@dataclass(frozen=True)
class Contact:
    """Paire de corps en contact pendant un sous-pas."""

    body_a: int
    body_b: int

    def involves(self, body_id: int) -> bool:
        return body_id in (self.body_a, self.body_b)

    def other(self, body_id: int) -> int:
        """Retourne l'autre corps de la paire (`body_id` doit en faire partie)."""

        if body_id == self.body_a:
            return self.body_b
        if body_id == self.body_b:
            return self.body_a
        raise ValueError(f"Le corps {body_id} ne participe pas au contact {self}")


@dataclass(frozen=True)
class RayHit:
    """Résultat d'un rayon: corps touché et distance depuis l'origine."""

    body_id: Optional[int]
    distance: float

    @property
    def hit(self) -> bool:
        return self.body_id is not None


class PhysicsWorld:
    """Monde pybullet éphémère, à utiliser comme gestionnaire de contexte.

    Exemple:
        >>> with PhysicsWorld() as world:
        ...     ball = world.add_circle(0.0, 0.0, radius=1.0, mass=1.0)
        ...     contacts = world.step(3)
    """

    def __init__(self, *, time_step: float = TIME_STEP) -> None:
        if time_step <= 0:
            raise ValueError(f"time_step doit être strictement positif (reçu: {time_step})")
        self._client: Optional[int] = p.connect(p.DIRECT)
        if self._client is None or self._client < 0:
            raise RuntimeError("Impossible d'ouvrir un client pybullet DIRECT")
        p.setGravity(0.0, 0.0, 0.0, physicsClientId=self._client)
        p.setTimeStep(time_step, physicsClientId=self._client)
        p.setPhysicsEngineParameter(
            deterministicOverlappingPairs=1,
            physicsClientId=self._client,
        )
        self._time_step = time_step
        self._sphere_shapes: Dict[float, int] = {}

    # -- Cycle de vie ------------------------------------------------------------

    @property
    def client(self) -> int:
        if self._client is None:
            raise RuntimeError("Le monde physique a déjà été fermé")
        return self._client

    @property
    def time_step(self) -> float:
        return self._time_step

    def close(self) -> None:
        if self._client is not None:
            p.disconnect(physicsClientId=self._client)
            self._client = None

    def __enter__(self) -> "PhysicsWorld":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- Corps -------------------------------------------------------------------

    def add_circle(
        self,
        x: float,
        y: float,
        vx: float = 0.0,
        vy: float = 0.0,
        *,
        radius: float,
        mass: float,
        linear_damping: float = 0.0,
        restitution: float = 1.0,
    ) -> int:
        """Ajoute un disque dynamique (sphère dans le plan z = 0)."""

        client = self.client
        shape = self._sphere_shapes.get(radius)
        if shape is None:
            shape = p.createCollisionShape(p.GEOM_SPHERE, radius=radius, physicsClientId=client)
            self._sphere_shapes[radius] = shape

        body = p.createMultiBody(
            baseMass=mass,
            baseCollisionShapeIndex=shape,
            basePosition=[x, y, 0.0],
            useMaximalCoordinates=True,
            physicsClientId=client,
        )
        p.resetBaseVelocity(
            body,
            linearVelocity=[vx, vy, 0.0],
            angularVelocity=[0.0, 0.0, 0.0],
            physicsClientId=client,
        )
        p.changeDynamics(
            body,
            -1,
            linearDamping=linear_damping,
            angularDamping=0.0,
            lateralFriction=0.0,
            spinningFriction=0.0,
            rollingFriction=0.0,
            restitution=restitution,
            physicsClientId=client,
        )
        return body

    def add_box(
        self,
        center_x: float,
        center_y: float,
        half_width: float,
        half_height: float,
        *,
        restitution: float = 1.0,
    ) -> int:
        """Ajoute une boîte statique (masse infinie)."""

        client = self.client
        shape = p.createCollisionShape(
            p.GEOM_BOX,
            halfExtents=[half_width, half_height, BOX_HALF_DEPTH],
            physicsClientId=client,
        )
        body = p.createMultiBody(
            baseMass=0.0,
            baseCollisionShapeIndex=shape,
            basePosition=[center_x, center_y, 0.0],
            useMaximalCoordinates=True,
            physicsClientId=client,
        )
        p.changeDynamics(
            body,
            -1,
            lateralFriction=0.0,
            restitution=restitution,
            physicsClientId=client,
        )
        return body

    def apply_force(self, body_id: int, force: Tuple[float, float]) -> None:
        """Applique une force au centre du corps pour le prochain sous-pas seulement."""

        client = self.client
        position, _ = p.getBasePositionAndOrientation(body_id, physicsClientId=client)
        p.applyExternalForce(
            body_id,
            -1,
            forceObj=[force[0], force[1], 0.0],
            posObj=list(position),
            flags=p.WORLD_FRAME,
            physicsClientId=client,
        )

    def kinematics(self, body_id: int) -> Tuple[float, float, float, float]:
        """Retourne (x, y, vx, vy) du corps."""

        client = self.client
        position, _ = p.getBasePositionAndOrientation(body_id, physicsClientId=client)
        velocity, _ = p.getBaseVelocity(body_id, physicsClientId=client)
        return (position[0], position[1], velocity[0], velocity[1])

    # -- Simulation --------------------------------------------------------------

    def step(self, num_steps: int = 1) -> Tuple[Contact, ...]:
        """Avance de `num_steps` sous-pas et retourne les contacts observés.

        Les contacts sont relevés après chaque sous-pas (dédoublonnés, dans
        l'ordre de première apparition) afin qu'un contact bref ne soit pas
        perdu entre deux sous-pas.
        """

        if num_steps <= 0:
            raise ValueError(f"num_steps doit être strictement positif (reçu: {num_steps})")

        client = self.client
        seen: Dict[Tuple[int, int], Contact] = {}
        for _ in range(num_steps):
            p.stepSimulation(physicsClientId=client)
            for point in p.getContactPoints(physicsClientId=client):
                body_a, body_b = point[1], point[2]
                key = (min(body_a, body_b), max(body_a, body_b))
                if key not in seen:
                    seen[key] = Contact(body_a=key[0], body_b=key[1])
        return tuple(seen.values())

    def raycast(
        self,
        origin: Tuple[float, float],
        angles: Sequence[float],
        max_length: float,
        *,
        start_offset: float = 0.0,
    ) -> Tuple[RayHit, ...]:
        """Lance un rayon par angle depuis `origin` et retourne le premier impact.

        Les rayons démarrent à `start_offset` de l'origine (coque du joueur) et
        s'arrêtent à `max_length`. Un rayon sans impact rapporte `max_length`.
        """

        if max_length <= start_offset:
            raise ValueError("max_length doit dépasser start_offset")

        starts: List[List[float]] = []
        ends: List[List[float]] = []
        for angle in angles:
            cos_a, sin_a = math.cos(angle), math.sin(angle)
            starts.append([origin[0] + cos_a * start_offset, origin[1] + sin_a * start_offset, 0.0])
            ends.append([origin[0] + cos_a * max_length, origin[1] + sin_a * max_length, 0.0])

        if not starts:
            return tuple()

        results = p.rayTestBatch(starts, ends, physicsClientId=self.client)
        segment = max_length - start_offset
        hits: List[RayHit] = []
        for hit_uid, _, hit_fraction, _, _ in results:
            if hit_uid == -1:
                hits.append(RayHit(body_id=None, distance=max_length))
            else:
                distance = min(max_length, start_offset + hit_fraction * segment)
                hits.append(RayHit(body_id=hit_uid, distance=distance))
        return tuple(hits)


__all__ = ["Contact", "RayHit", "PhysicsWorld", "BOX_HALF_DEPTH"]
