from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from .rng import DeterministicRng

ENTIRE_RESOURCE = -1


@dataclass(frozen=True, slots=True)
class ResourceKind:
    """
    A kind of consumable resource that can sit in a cell.

    Kinds are immutable. Consuming a harmful kind yields a negative health
    delta; an inhabitant cannot tell the two apart until it has eaten.
    """

    name: str
    value: int
    regeneration_delay: int
    harmful: bool = False

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Value cannot be negative.")
        if self.regeneration_delay < 0:
            raise ValueError("Regeneration delay cannot be negative.")

    def consume(self, amount: int = ENTIRE_RESOURCE) -> int:
        """
        Consume some part of the resource.

        Args:
            amount: Maximum amount to consume, or ENTIRE_RESOURCE

        Returns:
            The health delta, negative for harmful kinds
        """
        if amount == ENTIRE_RESOURCE:
            consumed = self.value
        elif amount < 0:
            raise ValueError("Cannot consume a negative amount of a resource.")
        else:
            consumed = min(self.value, amount)
        return -consumed if self.harmful else consumed


MEAT = ResourceKind("MEAT", value=10, regeneration_delay=20)
BERRIES = ResourceKind("BERRIES", value=2, regeneration_delay=10)

CATALOG: Tuple[ResourceKind, ...] = (MEAT, BERRIES)


def random_resource(rng: DeterministicRng, catalog: Tuple[ResourceKind, ...] = CATALOG) -> ResourceKind:
    return rng.choice(catalog)
