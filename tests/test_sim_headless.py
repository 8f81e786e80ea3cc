"""Tests pour l'environnement headless et la boucle `run_episode`."""

from __future__ import annotations

import pytest

from hallway.engine.actions import Action
from hallway.engine.rules import REWARD_WIN, SCORE_WIN
from hallway.rl.policies import FixedDirectionAgent, KeyboardAgent, RandomAgent
from hallway.sim.runner import HeadlessEnv, run_episode


@pytest.fixture
def headless_env(empty_config):
    return HeadlessEnv(config=empty_config, seed=123)


class TestHeadlessEnv:
    def test_state_requires_reset(self, headless_env):
        with pytest.raises(RuntimeError):
            _ = headless_env.state

    def test_reset_returns_initial_state(self, headless_env, empty_config):
        state = headless_env.reset()
        assert headless_env.state is state
        assert state.player.position == empty_config.player_start
        assert headless_env.steps == 0

    def test_reset_reproducible_with_seed(self, crowded_config):
        env_a = HeadlessEnv(config=crowded_config, seed=999)
        env_b = HeadlessEnv(config=crowded_config, seed=999)
        assert env_a.reset() == env_b.reset()

    def test_step_reports_reward(self, headless_env):
        headless_env.reset()
        result = headless_env.step(Action.RIGHT)
        assert result.state is headless_env.state
        assert result.reward == 1.0
        assert not result.done
        assert result.info["last_action"] is Action.RIGHT
        assert result.info["status"] == "ONGOING"

    def test_step_after_terminal_state_is_rejected(self, headless_env, lost_state):
        headless_env.reset(state=lost_state)
        with pytest.raises(RuntimeError):
            headless_env.step(Action.NONE)

    def test_truncation(self, empty_config):
        env = HeadlessEnv(config=empty_config, max_steps=2)
        env.reset(seed=1)
        assert not env.step(Action.NONE).truncated
        assert env.step(Action.NONE).truncated


class TestRunEpisode:
    def test_fixed_direction_agent_reaches_goal(self, empty_config):
        env = HeadlessEnv(config=empty_config)
        summary = run_episode(FixedDirectionAgent(), env=env, seed=4, max_steps=60)

        assert summary.won
        assert not summary.lost
        assert not summary.truncated
        assert summary.agent_name == "FixedRight"
        assert summary.actions == (Action.RIGHT,) * summary.steps
        assert summary.score == summary.steps + SCORE_WIN
        assert summary.total_reward == pytest.approx(summary.steps - 1 + REWARD_WIN)

    def test_max_steps_truncates(self, empty_config):
        summary = run_episode(
            KeyboardAgent(), env=HeadlessEnv(config=empty_config), seed=0, max_steps=3
        )
        assert summary.truncated
        assert summary.steps == 3
        assert not summary.won

    def test_on_step_callback(self, empty_config):
        seen = []
        run_episode(
            RandomAgent(seed=5),
            env=HeadlessEnv(config=empty_config),
            max_steps=4,
            on_step=seen.append,
        )
        assert len(seen) == 4

    def test_terminal_start_state(self, lost_state):
        summary = run_episode(FixedDirectionAgent(), state=lost_state)
        assert summary.steps == 0
        assert summary.lost
