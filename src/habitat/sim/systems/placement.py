from __future__ import annotations

from typing import TYPE_CHECKING, Callable, TypeVar

if TYPE_CHECKING:
    from ..core.rng import DeterministicRng

T = TypeVar("T")


def scatter(
    rng: DeterministicRng,
    width: int,
    height: int,
    count: int,
    create: Callable[[], T],
    try_place: Callable[[int, int, T], bool],
) -> int:
    """
    Place ``count`` freshly created items at random (column, row) positions.

    Random placement gives up once the total number of attempts exceeds
    ``count * (width + height)``; the remaining items are then laid out by
    a row-major sequential fill starting at (0, 0).

    Returns:
        The number of items placed by the sequential fill
    """
    budget = count * (width + height)
    attempts = 0
    for index in range(count):
        item = create()
        placed = False
        while not placed:
            attempts += 1
            x = rng.next_int(width)
            y = rng.next_int(height)
            if try_place(x, y, item):
                placed = True
            elif attempts > budget:
                break
        if not placed:
            return fill_sequentially(width, height, count - index, item, create, try_place)
    return 0


def fill_sequentially(
    width: int,
    height: int,
    remaining: int,
    first: T,
    create: Callable[[], T],
    try_place: Callable[[int, int, T], bool],
) -> int:
    item = first
    placed_total = 0
    while remaining > 0:
        placed_this_pass = 0
        for y in range(height):
            for x in range(width):
                if remaining == 0:
                    return placed_total
                if try_place(x, y, item):
                    remaining -= 1
                    placed_total += 1
                    placed_this_pass += 1
                    if remaining > 0:
                        item = create()
        if placed_this_pass == 0:
            raise RuntimeError(f"Grid is full with {remaining} items left to place.")
    return placed_total
