from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from .config import MAX_OCCUPANTS

if TYPE_CHECKING:
    from .agent import Agent
    from .resource import ResourceKind


class Cell:
    """
    One unit of occupiable space in the world.

    A cell holds at most one resource, which regenerates after being
    harvested, and a bounded number of inhabitants.
    """

    __slots__ = ("_capacity", "_resource", "_cooldown", "_agents")

    def __init__(self, capacity: int = MAX_OCCUPANTS) -> None:
        self._capacity = capacity
        self._resource: Optional[ResourceKind] = None
        self._cooldown = 0
        self._agents: List[Agent] = []

    @property
    def resource(self) -> Optional[ResourceKind]:
        return self._resource

    @property
    def cooldown(self) -> int:
        return self._cooldown

    @property
    def agents(self) -> Tuple[Agent, ...]:
        return tuple(self._agents)

    @property
    def occupancy(self) -> int:
        return len(self._agents)

    @property
    def is_full(self) -> bool:
        return len(self._agents) >= self._capacity

    def place_resource(self, resource: ResourceKind) -> bool:
        if self._resource is not None:
            return False
        self._resource = resource
        self._cooldown = 0
        return True

    def harvest_resource(self) -> Optional[ResourceKind]:
        if self._resource is not None and self._cooldown == 0:
            self._cooldown = self._resource.regeneration_delay
            return self._resource
        return None

    def advance_time(self) -> None:
        self._cooldown = max(self._cooldown - 1, 0)

    def add_agent(self, agent: Optional[Agent]) -> bool:
        if agent is not None and len(self._agents) < self._capacity:
            self._agents.append(agent)
            return True
        return False

    def contains(self, agent: Agent) -> bool:
        return any(occupant is agent for occupant in self._agents)

    def transfer_agent(self, agent: Agent, destination: Cell) -> bool:
        """Move an inhabitant into ``destination``; nothing changes on failure."""
        if destination is self or not self.contains(agent):
            return False
        if not destination.add_agent(agent):
            return False
        self._remove(agent)
        return True

    def purge_dead(self) -> int:
        dead = [agent for agent in self._agents if agent.is_dead]
        for agent in dead:
            self._remove(agent)
        return len(dead)

    def _remove(self, agent: Agent) -> None:
        for index, occupant in enumerate(self._agents):
            if occupant is agent:
                del self._agents[index]
                return
