from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:
    from .config import FounderConfig
    from .resource import ResourceKind
    from .rng import DeterministicRng

MAX_MUTATION_PERCENT = 5


def mutate(rng: DeterministicRng, attribute: int, max_percent: int = MAX_MUTATION_PERCENT) -> int:
    """Perturb an integer trait by up to ``max_percent`` percent either way, truncated."""
    change = rng.next_range(-1.0, 1.0)
    return attribute + int(attribute * max_percent / 100 * change)


@dataclass(slots=True, eq=False)
class Agent:
    """
    One inhabitant of the grid.

    There is a single agent type: every difference between two agents is a
    difference in these numeric attributes, inherited and mutated through
    reproduction.
    """

    id: int
    max_health: int
    health: int
    health_decay: int
    reproduction_interval: int
    time: int = 0
    reproduction_countdown: int = field(init=False)

    def __post_init__(self) -> None:
        if self.max_health <= 0:
            raise ValueError("An inhabitant's max health must be greater than 0.")
        if self.reproduction_interval < 0:
            raise ValueError("Reproduction interval cannot be below 0.")
        self.reproduction_countdown = self.reproduction_interval

    @classmethod
    def founder(cls, agent_id: int, rng: DeterministicRng, ranges: FounderConfig, time: int = 0) -> Agent:
        max_health = rng.next_int_between(*ranges.max_health)
        health_decay = rng.next_int_between(*ranges.health_decay)
        reproduction_interval = rng.next_int_between(*ranges.reproduction_interval)
        return cls(
            id=agent_id,
            max_health=max_health,
            health=max_health,
            health_decay=health_decay,
            reproduction_interval=reproduction_interval,
            time=time,
        )

    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    def step_time(self) -> None:
        self.time += 1
        self.reproduction_countdown = max(self.reproduction_countdown - 1, 0)
        # Clamped above only: health at or below zero is how death is signalled.
        self.health = min(self.health - self.health_decay, self.max_health)

    def modify_health(self, delta: int) -> None:
        self.health = min(self.max_health, self.health + delta)

    def take_resource(self, resource: Optional[ResourceKind]) -> None:
        if resource is not None:
            self.modify_health(resource.consume())

    def reproduce(
        self,
        rng: DeterministicRng,
        ids: Iterator[int],
        max_mutation_percent: int = MAX_MUTATION_PERCENT,
    ) -> Optional[Agent]:
        """
        Reproduce, if able, donating half of the current health to the offspring.

        Returns:
            The offspring, or None while the reproduction timer is still running
        """
        if self.reproduction_countdown > 0:
            return None

        self.reproduction_countdown = self.reproduction_interval
        # Halving truncates toward zero, also for a parent already at or below zero.
        self.health = int(self.health / 2)

        return Agent(
            id=next(ids),
            max_health=mutate(rng, self.max_health, max_mutation_percent),
            health=self.health,
            health_decay=mutate(rng, self.health_decay, max_mutation_percent),
            reproduction_interval=mutate(rng, self.reproduction_interval, max_mutation_percent),
            time=self.time,
        )
