"""Agent de recherche arborescente Monte-Carlo (UCT).

L'arbre est indexé par `WorldState` (égalité structurelle) via trois tables:
nombre de visites, récompense cumulée et enfants (un successeur par action
légale, dans l'ordre canonique des actions).

Une passe d'amélioration (`do_rollout`) enchaîne sélection UCT, expansion,
simulation aléatoire bornée puis rétropropagation. La rétropropagation inverse
la récompense à chaque niveau (`r := 1 - r`), convention de recherche à deux
joueurs conservée telle quelle pour ce problème à un seul agent.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from hallway.engine.actions import Action
from hallway.engine.rules import EXPLORATION_WEIGHT, ROLLOUT_DEPTH
from hallway.engine.state import WorldState
from hallway.rl.policies import PlanningAgent

logger = logging.getLogger(__name__)


class TerminalNodeError(RuntimeError):
    """`choose_action` appelé sur un nœud terminal."""


class UnvisitedNodeError(RuntimeError):
    """Score UCT demandé alors qu'un nœud ou un enfant n'a aucune visite."""


class TreeConsistencyError(AssertionError):
    """L'arbre et la fonction de transition ne concordent plus."""


def terminal_reward(state: WorldState) -> float:
    """1.0 pour une victoire, 0.0 pour une défaite (la défaite l'emporte)."""

    if state.is_lose():
        return 0.0
    if state.is_win():
        return 1.0
    raise ValueError("terminal_reward attend un état terminal")


def progress_reward(start: WorldState, end: WorldState) -> float:
    """Progression en x rapportée à la distance restante jusqu'au but, bornée à [0, 1]."""

    span = start.config.goal_x - start.player.x
    if span <= 0.0:
        return 1.0
    ratio = (end.player.x - start.player.x) / span
    return min(1.0, max(0.0, ratio))


@dataclass(frozen=True)
class RolloutResult:
    """Trace d'une passe `do_rollout`."""

    path: Tuple[WorldState, ...]
    reward: float
    depth: int

    @property
    def leaf(self) -> WorldState:
        return self.path[-1]


class MCTSAgent(PlanningAgent):
    """Planification UCT sur l'arbre des états."""

    def __init__(
        self,
        *,
        exploration_weight: float = EXPLORATION_WEIGHT,
        rollout_depth: int = ROLLOUT_DEPTH,
        rollouts_per_move: int = 0,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(name="MCTS")
        if exploration_weight < 0:
            raise ValueError(f"exploration_weight doit être positif (reçu: {exploration_weight})")
        if rollout_depth <= 0:
            raise ValueError(f"rollout_depth doit être strictement positif (reçu: {rollout_depth})")
        if rollouts_per_move < 0:
            raise ValueError(f"rollouts_per_move doit être positif (reçu: {rollouts_per_move})")

        self.exploration_weight = exploration_weight
        self.rollout_depth = rollout_depth
        self.rollouts_per_move = rollouts_per_move
        self._random = rng or random.Random(seed)
        self._reward: Dict[WorldState, float] = {}
        self._visited: Dict[WorldState, int] = {}
        self._children: Dict[WorldState, Tuple[WorldState, ...]] = {}

    # -- Lecture de l'arbre ------------------------------------------------------

    def visits(self, node: WorldState) -> int:
        return self._visited.get(node, 0)

    def total_reward(self, node: WorldState) -> float:
        return self._reward.get(node, 0.0)

    def children(self, node: WorldState) -> Optional[Tuple[WorldState, ...]]:
        """Enfants de `node` (None si jamais développé)."""

        return self._children.get(node)

    def is_expanded(self, node: WorldState) -> bool:
        return node in self._children

    def __len__(self) -> int:
        return len(self._children)

    def reset(self) -> None:
        self._reward.clear()
        self._visited.clear()
        self._children.clear()

    # -- Décision ----------------------------------------------------------------

    def choose_action(self, state: WorldState) -> Action:
        if state.is_terminal():
            raise TerminalNodeError("choose_action appelé sur un nœud terminal")

        for _ in range(self.rollouts_per_move):
            self.do_rollout(state)

        if state not in self._children:
            return self._random.choice(state.legal_actions())

        child = self.best_child(state)
        if child is None:
            return self._random.choice(state.legal_actions())
        return self.action_to(state, child)

    def best_child(self, node: WorldState) -> Optional[WorldState]:
        """Enfant visité de meilleure récompense moyenne (None si aucun)."""

        best: Optional[WorldState] = None
        best_average = -math.inf
        for child in self._children.get(node, ()):
            visits = self._visited.get(child, 0)
            if visits == 0:
                continue
            average = self._reward[child] / visits
            if average > best_average:
                best, best_average = child, average
        return best

    def action_to(self, parent: WorldState, child: WorldState) -> Action:
        """Retrouve l'action qui mène de `parent` à `child`."""

        for action in parent.legal_actions():
            if parent.transition(action) == child:
                return action
        raise TreeConsistencyError("Aucune action ne relie ce parent à cet enfant")

    # -- Passe d'amélioration ----------------------------------------------------

    def do_rollout(self, node: WorldState) -> RolloutResult:
        """Améliore l'arbre d'une passe depuis `node`."""

        path = self.select(node)
        leaf = path[-1]
        self.expand(leaf)
        reward, depth = self._playout(leaf)
        self.backpropagate(path, reward)
        return RolloutResult(path=tuple(path), reward=reward, depth=depth)

    def select(self, node: WorldState) -> List[WorldState]:
        """Descend par UCT jusqu'à un nœud non développé ou ayant un enfant inexploré."""

        path: List[WorldState] = []
        on_path: Set[WorldState] = set()
        while True:
            path.append(node)
            on_path.add(node)
            if not self._children.get(node):
                return path
            unexplored = self.find_unexplored(node)
            if unexplored:
                path.append(unexplored[-1])
                return path
            following = self.uct_select(node)
            if following in on_path:
                return path
            node = following

    def find_unexplored(self, node: WorldState) -> List[WorldState]:
        return [child for child in self._children.get(node, ()) if child not in self._children]

    def expand(self, node: WorldState) -> None:
        if node in self._children:
            return
        self._children[node] = () if node.is_terminal() else node.successors()

    def simulate(self, node: WorldState) -> float:
        """Partie aléatoire bornée depuis `node`; retourne la récompense estimée."""

        reward, _ = self._playout(node)
        return reward

    def _playout(self, node: WorldState) -> Tuple[float, int]:
        current = node
        for depth in range(self.rollout_depth):
            if current.is_terminal():
                return terminal_reward(current), depth
            current = current.transition(self._random.choice(current.legal_actions()))
        if current.is_terminal():
            return terminal_reward(current), self.rollout_depth
        reward = progress_reward(node, current)
        logger.debug("Récompense de progression: %.4f", reward)
        return reward, self.rollout_depth

    def backpropagate(self, path: Sequence[WorldState], reward: float) -> None:
        """Remonte la récompense de la feuille à la racine, inversée à chaque niveau."""

        for node in reversed(path):
            self._visited[node] = self._visited.get(node, 0) + 1
            self._reward[node] = self._reward.get(node, 0.0) + reward
            reward = 1.0 - reward

    def uct_select(self, node: WorldState) -> WorldState:
        """Enfant de score UCT maximal (premier rencontré en cas d'égalité)."""

        children = self._children.get(node)
        if not children:
            raise TreeConsistencyError("uct_select appelé sur un nœud sans enfants")
        parent_visits = self._visited.get(node, 0)
        if parent_visits == 0:
            raise UnvisitedNodeError("uct_select appelé sur un nœud jamais visité")
        for child in children:
            if self._visited.get(child, 0) == 0:
                raise UnvisitedNodeError("uct_select appelé avec un enfant jamais visité")
            if child not in self._children:
                raise TreeConsistencyError("Tous les enfants doivent être développés avant UCT")

        log_parent = math.log(parent_visits)
        best = children[0]
        best_score = -math.inf
        for child in children:
            visits = self._visited[child]
            score = self._reward[child] / visits + self.exploration_weight * math.sqrt(
                log_parent / visits
            )
            if score > best_score:
                best, best_score = child, score
        return best


__all__ = [
    "MCTSAgent",
    "RolloutResult",
    "TerminalNodeError",
    "TreeConsistencyError",
    "UnvisitedNodeError",
    "progress_reward",
    "terminal_reward",
]
