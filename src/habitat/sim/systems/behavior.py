from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

from ..types.actions import DIRECTIONS, Action, Movement

if TYPE_CHECKING:
    from ..core.agent import Agent
    from ..core.rng import DeterministicRng


class Behavior(Protocol):
    def decide_actions(self, agent: Agent, x: int, y: int) -> Sequence[Action]: ...

    def decide_movement(self, agent: Agent, rng: DeterministicRng, x: int, y: int) -> Optional[Movement]: ...


class RandomWalkBehavior:
    """Eat whatever is here, reproduce when ready, then step one cell in a random direction."""

    ACTIONS: tuple[Action, ...] = (Action.TAKE_RESOURCE, Action.REPRODUCE)

    def decide_actions(self, agent: Agent, x: int, y: int) -> Sequence[Action]:
        # Eating first can restore enough health to survive the reproduction split.
        return self.ACTIONS

    def decide_movement(self, agent: Agent, rng: DeterministicRng, x: int, y: int) -> Optional[Movement]:
        return Movement(rng.choice(DIRECTIONS), 1)
