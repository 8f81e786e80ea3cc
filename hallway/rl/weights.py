"""Stockage des poids du Q-learning linéaire et persistance `name;value`.

Deux stockages partagent la même interface (`dot`, `update`, `items`):
- `SparseWeights`: dictionnaire nom de feature -> poids, croissance libre
- `DenseWeights`: tableau numpy aligné positionnellement sur un schéma fixe

Format fichier: une ligne d'en-tête `# schema: <version>` puis une ligne
`name;value` par feature. Un fichier absent, illisible, mal formé ou d'un autre
schéma donne des poids vides (jamais d'erreur fatale).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, Mapping, Sequence, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

SCHEMA_PREFIX = "# schema:"


class SparseWeights:
    """Poids indexés par nom; une feature jamais vue vaut 0."""

    def __init__(self, values: Mapping[str, float] | None = None) -> None:
        self._values: Dict[str, float] = dict(values or {})

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __getitem__(self, name: str) -> float:
        return self._values.get(name, 0.0)

    def items(self) -> Iterator[Tuple[str, float]]:
        return iter(self._values.items())

    def as_dict(self) -> Dict[str, float]:
        return dict(self._values)

    def dot(self, features: Mapping[str, float]) -> float:
        return sum(value * self._values.get(name, 0.0) for name, value in features.items())

    def update(self, features: Mapping[str, float], scale: float) -> None:
        """w[k] += scale * f[k] pour chaque feature présente."""

        for name, value in features.items():
            self._values[name] = self._values.get(name, 0.0) + scale * value

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"SparseWeights(len={len(self)})"


class DenseWeights:
    """Poids positionnels alignés sur `names`."""

    def __init__(self, names: Sequence[str], values: np.ndarray | None = None) -> None:
        self._names: Tuple[str, ...] = tuple(names)
        if values is None:
            values = np.zeros(len(self._names), dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (len(self._names),):
            raise ValueError(
                f"values doit avoir la forme ({len(self._names)},), reçu {values.shape}"
            )
        self._values = values.copy()

    def __len__(self) -> int:
        return len(self._names)

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def values(self) -> np.ndarray:
        return self._values.copy()

    def items(self) -> Iterator[Tuple[str, float]]:
        return iter(zip(self._names, (float(value) for value in self._values)))

    def dot(self, features: np.ndarray) -> float:
        return float(np.dot(self._values, features))

    def update(self, features: np.ndarray, scale: float) -> None:
        self._values += scale * np.asarray(features, dtype=np.float64)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"DenseWeights(len={len(self)})"


Weights = Union[SparseWeights, DenseWeights]


def save_weights(weights: Weights, path: str | Path, *, schema: str) -> None:
    """Écrit les poids au format `name;value` précédé de l'en-tête de schéma."""

    path = Path(path)
    lines = [f"{SCHEMA_PREFIX} {schema}"]
    lines.extend(f"{name};{value!r}" for name, value in weights.items())
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def load_weights(
    path: str | Path,
    *,
    schema: str,
    names: Sequence[str] | None = None,
) -> Weights:
    """Charge des poids; retombe sur des poids vides en cas de problème.

    Args:
        path: fichier `name;value`
        schema: version de schéma attendue (en-tête du fichier)
        names: noms positionnels pour un stockage dense (None = stockage creux)
    """

    def empty() -> Weights:
        return DenseWeights(names) if names is not None else SparseWeights()

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Fichier de poids absent (%s): poids vides", path)
        return empty()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Lecture des poids impossible (%s): %s; poids vides", path, exc)
        return empty()

    try:
        parsed = _parse_lines(text.splitlines(), schema)
    except ValueError as exc:
        logger.warning("Fichier de poids invalide (%s): %s; poids vides", path, exc)
        return empty()

    if names is None:
        return SparseWeights(parsed)

    index_by_name = {name: index for index, name in enumerate(names)}
    unknown = sorted(set(parsed) - set(index_by_name))
    if unknown:
        logger.warning("Features inconnues dans %s (%s): poids vides", path, ", ".join(unknown))
        return empty()
    values = np.zeros(len(names), dtype=np.float64)
    for name, value in parsed.items():
        values[index_by_name[name]] = value
    return DenseWeights(names, values)


def _parse_lines(lines: Sequence[str], schema: str) -> Dict[str, float]:
    parsed: Dict[str, float] = {}
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        if line.startswith(SCHEMA_PREFIX):
            found = line[len(SCHEMA_PREFIX):].strip()
            if found != schema:
                raise ValueError(f"schéma {found!r} au lieu de {schema!r}")
            continue
        if line.startswith("#"):
            continue
        parts = line.split(";")
        if len(parts) != 2 or not parts[0]:
            raise ValueError(f"ligne {number} mal formée: {raw!r}")
        parsed[parts[0]] = float(parts[1])
    return parsed


__all__ = [
    "SparseWeights",
    "DenseWeights",
    "Weights",
    "save_weights",
    "load_weights",
]
