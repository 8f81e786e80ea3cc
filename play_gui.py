#!/usr/bin/env python3
"""Lance la GUI du couloir (visualisation pygame d'un agent).

Ce script fournit une boucle d'évènements minimale s'appuyant sur
`hallway.gui.app.HallwayApp`.

Raccourcis clavier principaux:
- FLÈCHES : pousser le joueur (agent clavier)
- P       : pause
- TAB     : afficher/masquer les rayons radar
- N       : nouvel épisode
- ESC     : quitter
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

import pygame

from hallway.app.recorder import TrajectoryRecorder
from hallway.engine.state import WorldConfig
from hallway.gui.app import HallwayApp
from hallway.gui.renderer import COLOR_BG
from hallway.rl.mcts import MCTSAgent
from hallway.rl.policies import FixedDirectionAgent, KeyboardAgent, PlanningAgent, RandomAgent
from hallway.rl.qlearning import QLearningAgent

AGENT_CHOICES = ("keyboard", "right", "random", "qlearning", "mcts")


def build_agent(args: argparse.Namespace, config: WorldConfig) -> PlanningAgent:
    if args.agent == "keyboard":
        return KeyboardAgent()
    if args.agent == "right":
        return FixedDirectionAgent()
    if args.agent == "random":
        return RandomAgent(seed=args.seed)
    if args.agent == "qlearning":
        if args.weights:
            return QLearningAgent.from_weights_file(args.weights, config=config)
        return QLearningAgent(episodes=args.episodes, config=config, seed=args.seed)
    return MCTSAgent(rollouts_per_move=args.rollouts, seed=args.seed)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Visualisation pygame de Hallway Weaver")
    parser.add_argument("--agent", choices=AGENT_CHOICES, default="keyboard")
    parser.add_argument("--weights", help="Fichier de poids name;value (agent qlearning)")
    parser.add_argument("--episodes", type=int, default=0, help="Pré-entraînement Q-learning")
    parser.add_argument("--rollouts", type=int, default=25, help="Rollouts MCTS par action")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--obstacles", type=int, default=None, help="Nombre d'obstacles")
    parser.add_argument("--max-steps", type=int, default=None)
    parser.add_argument("--fps", type=int, default=20)
    parser.add_argument("--record", help="Enregistre la trajectoire (JSON lines)")
    parser.add_argument("--radar", action="store_true", help="Affiche les rayons radar")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = WorldConfig() if args.obstacles is None else WorldConfig(obstacle_count=args.obstacles)
    agent = build_agent(args, config)
    if args.episodes:
        print(f"Pré-entraînement de {agent.name} ({args.episodes} épisodes)...")
    agent.init()

    pygame.init()
    app = HallwayApp(agent, config=config, max_steps=args.max_steps, show_radar=args.radar)
    screen = pygame.display.set_mode(app.window_size)
    pygame.display.set_caption(f"Hallway Weaver - {agent.name}")
    app.screen = screen

    recorder: Optional[TrajectoryRecorder] = None
    if args.record:
        recorder = TrajectoryRecorder(args.record)
        recorder.attach(app.service.event_bus)

    app.start_episode(seed=args.seed)
    clock = pygame.time.Clock()
    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_n:
                        app.start_episode()
                    else:
                        app.handle_key_down(event.key)
                elif event.type == pygame.KEYUP:
                    app.handle_key_up(event.key)

            if app.tick() and app.service.finished:
                hud = app.get_hud_state()
                print(f"Épisode terminé: {hud.status} en {hud.steps} pas (score {hud.score})")

            screen.fill(COLOR_BG)
            app.render()
            pygame.display.flip()
            clock.tick(args.fps)
    finally:
        if recorder is not None:
            recorder.close()
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
