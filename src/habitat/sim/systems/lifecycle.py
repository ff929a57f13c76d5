from __future__ import annotations

from typing import TYPE_CHECKING

from ..types.actions import Action, Direction

if TYPE_CHECKING:
    from ..core.agent import Agent
    from ..core.cell import Cell
    from ..core.world import World


def step_cell(world: World, x: int, y: int) -> tuple[int, int]:
    """Advance one cell by a tick. Returns (births, deaths)."""
    cell = world.cell(x, y)
    cell.advance_time()
    deaths = cell.purge_dead()

    # Offspring born into this cell during the pass carry the current tick as
    # their local time, so the filter also keeps them from being stepped twice.
    tick = world.tick
    to_step = [agent for agent in cell.agents if agent.time < tick]

    births = 0
    for agent in to_step:
        agent.step_time()
        births += apply_actions(world, agent, cell, x, y)
        move_agent(world, agent, cell, x, y)
    return births, deaths


def apply_actions(world: World, agent: Agent, cell: Cell, x: int, y: int) -> int:
    births = 0
    for action in world.behavior.decide_actions(agent, x, y):
        if action is Action.TAKE_RESOURCE:
            agent.take_resource(cell.harvest_resource())
        elif action is Action.REPRODUCE:
            offspring = agent.reproduce(world.rng, world.ids, world.config.max_mutation_percent)
            if offspring is not None and cell.add_agent(offspring):
                births += 1
        else:
            raise ValueError(f"{action!r} is not a valid Action.")
    return births


def destination_of(world: World, x: int, y: int, direction: Direction, distance: int) -> tuple[int, int]:
    if not isinstance(direction, Direction):
        raise ValueError(f"{direction!r} is not a valid Direction.")
    return (
        (x + direction.dx * distance) % world.width,
        (y + direction.dy * distance) % world.height,
    )


def move_agent(world: World, agent: Agent, cell: Cell, x: int, y: int) -> bool:
    """
    Try to move an agent out of ``cell``, asking for a fresh decision after each failure.

    A decision of "no movement" counts as success. Returns False when every
    attempt hit a full (or the same) cell.
    """
    for _ in range(world.config.max_movement_attempts):
        movement = world.behavior.decide_movement(agent, world.rng, x, y)
        if movement is None:
            return True
        new_x, new_y = destination_of(world, x, y, movement.direction, movement.distance)
        if cell.transfer_agent(agent, world.cell(new_x, new_y)):
            return True
    return False
