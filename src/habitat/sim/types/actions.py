from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Action(str, Enum):
    TAKE_RESOURCE = "TakeResource"
    REPRODUCE = "Reproduce"


class Direction(Enum):
    # (column delta, row delta); row 0 is the top edge of the grid.
    NORTH = (0, -1)
    EAST = (1, 0)
    WEST = (-1, 0)
    SOUTH = (0, 1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]


DIRECTIONS: tuple[Direction, ...] = tuple(Direction)


@dataclass(frozen=True, slots=True)
class Movement:
    direction: Direction
    distance: int = 1
