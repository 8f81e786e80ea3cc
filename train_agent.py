#!/usr/bin/env python3
"""Entraîne un agent Q-learning et écrit ses poids (format name;value).

Exemple:
    python train_agent.py --episodes 200 --output weights.txt
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from hallway.engine import rules
from hallway.engine.state import WorldConfig
from hallway.rl.features import RadarFeatureExtractor, SparseFeatureExtractor
from hallway.rl.qlearning import QLearningAgent
from hallway.sim.runner import HeadlessEnv, run_episode


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Entraînement Q-learning de Hallway Weaver")
    parser.add_argument("--episodes", type=int, default=rules.DEFAULT_EPISODES)
    parser.add_argument("--alpha", type=float, default=rules.DEFAULT_ALPHA)
    parser.add_argument("--gamma", type=float, default=rules.DEFAULT_GAMMA)
    parser.add_argument("--epsilon", type=float, default=rules.DEFAULT_EPSILON)
    parser.add_argument("--features", choices=("sparse", "dense"), default="sparse")
    parser.add_argument("--rays", type=int, default=rules.NUM_RAYS)
    parser.add_argument("--obstacles", type=int, default=rules.OBSTACLE_COUNT)
    parser.add_argument("--max-steps", type=int, default=None, help="Limite de pas par épisode")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--evaluate", type=int, default=0, help="Épisodes d'évaluation après l'entraînement")
    parser.add_argument("--output", default="weights.txt")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = WorldConfig(obstacle_count=args.obstacles)
    if args.features == "dense":
        extractor = RadarFeatureExtractor(num_rays=args.rays)
    else:
        extractor = SparseFeatureExtractor(num_rays=args.rays)

    agent = QLearningAgent(
        alpha=args.alpha,
        gamma=args.gamma,
        epsilon=args.epsilon,
        episodes=args.episodes,
        extractor=extractor,
        config=config,
        max_steps_per_episode=args.max_steps,
        seed=args.seed,
    )

    print(f"Démarrage de l'entraînement pour {args.episodes} épisodes...")
    agent.init()
    wins = sum(1 for stats in agent.history if stats.won)
    print(f"Entraînement terminé: {wins}/{len(agent.history)} victoires")

    agent.save_weights(args.output)
    print(f"Poids écrits dans {args.output} ({len(agent.weights)} entrées)")

    if args.evaluate:
        env = HeadlessEnv(config=config)
        evaluation_wins = 0
        for index in range(args.evaluate):
            seed = None if args.seed is None else args.seed + index
            summary = run_episode(agent, env=env, seed=seed, max_steps=args.max_steps)
            evaluation_wins += int(summary.won)
            print(f"Évaluation {index + 1}: {summary.steps} pas, score {summary.score}")
        print(f"Évaluation: {evaluation_wins}/{args.evaluate} victoires")
    return 0


if __name__ == "__main__":
    sys.exit(main())
