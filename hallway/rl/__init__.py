"""Module RL pour Hallway Weaver.

Ce module contient les stratégies de décision et leur représentation des états:

- features.py : encodage radar des états (schémas dense et creux versionnés)
- weights.py : stockage et persistance `name;value` des poids linéaires
- policies.py : contrat `PlanningAgent` et agents triviaux (aléatoire, fixe, clavier)
- qlearning.py : Q-learning à approximation linéaire
- mcts.py : recherche arborescente Monte-Carlo (UCT)

Exemple :
    >>> from hallway.engine.state import WorldState
    >>> from hallway.rl import QLearningAgent
    >>>
    >>> agent = QLearningAgent(episodes=5, seed=42)
    >>> agent.init()
    >>> action = agent.choose_action(WorldState.initial(seed=42))
"""

from .features import RadarFeatureExtractor, SparseFeatureExtractor
from .mcts import MCTSAgent
from .policies import FixedDirectionAgent, KeyboardAgent, PlanningAgent, RandomAgent
from .qlearning import QLearningAgent

__all__ = [
    "PlanningAgent",
    "RandomAgent",
    "FixedDirectionAgent",
    "KeyboardAgent",
    "QLearningAgent",
    "MCTSAgent",
    "RadarFeatureExtractor",
    "SparseFeatureExtractor",
]
