from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class DeterministicRng:
    """Single seeded stream shared by every stochastic call in a world."""

    def __init__(self, seed: int):
        self._random = random.Random(seed)

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_int(self, max_value: int) -> int:
        return self._random.randrange(max_value)

    def next_int_between(self, low: int, high: int) -> int:
        # Half-open [low, high); collapses to low for an empty range.
        if high <= low:
            return low
        return low + self._random.randrange(high - low)

    def choice(self, items: Sequence[T]) -> T:
        return items[self._random.randrange(len(items))]
