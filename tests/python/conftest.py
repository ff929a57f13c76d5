import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from habitat.sim.core.agent import Agent  # noqa: E402
from habitat.sim.core.config import SimulationConfig  # noqa: E402
from habitat.sim.systems.behavior import RandomWalkBehavior  # noqa: E402
from habitat.sim.types.actions import Direction, Movement  # noqa: E402


class StayPutBehavior:
    """Eats and reproduces like the default policy but never asks to move."""

    def decide_actions(self, agent, x, y):
        return RandomWalkBehavior.ACTIONS

    def decide_movement(self, agent, rng, x, y):
        return None


class FixedDirectionBehavior(StayPutBehavior):
    def __init__(self, direction: Direction):
        self.direction = direction
        self.calls = 0

    def decide_movement(self, agent, rng, x, y):
        self.calls += 1
        return Movement(self.direction, 1)


def make_agent(
    agent_id: int = 0,
    max_health: int = 20,
    health: int | None = None,
    health_decay: int = 1,
    reproduction_interval: int = 1000,
    time: int = 0,
) -> Agent:
    return Agent(
        id=agent_id,
        max_health=max_health,
        health=max_health if health is None else health,
        health_decay=health_decay,
        reproduction_interval=reproduction_interval,
        time=time,
    )


@pytest.fixture
def empty_config():
    def _factory(width: int = 1, height: int = 1, time_to_run: int = 5, seed: int = 1) -> SimulationConfig:
        return SimulationConfig(seed=seed, grid_width=width, grid_height=height, time_to_run=time_to_run)

    return _factory
