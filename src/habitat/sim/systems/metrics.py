from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.agent import Agent


@dataclass(slots=True)
class PopulationStats:
    population: int = 0
    max_health: int = 0
    health: int = 0
    health_decay: int = 0
    reproduction_interval: int = 0
    reproduction_countdown: int = 0


def _truncated_mean(total: int, count: int) -> int:
    # Integer division rounding toward zero, so negative totals match positive ones.
    quotient = abs(total) // count
    return quotient if total >= 0 else -quotient


def collect_population_stats(agents: Iterable[Agent]) -> PopulationStats:
    totals = PopulationStats()
    for agent in agents:
        totals.population += 1
        totals.max_health += agent.max_health
        totals.health += agent.health
        totals.health_decay += agent.health_decay
        totals.reproduction_interval += agent.reproduction_interval
        totals.reproduction_countdown += agent.reproduction_countdown
    count = totals.population
    if count == 0:
        return totals
    return PopulationStats(
        population=count,
        max_health=_truncated_mean(totals.max_health, count),
        health=_truncated_mean(totals.health, count),
        health_decay=_truncated_mean(totals.health_decay, count),
        reproduction_interval=_truncated_mean(totals.reproduction_interval, count),
        reproduction_countdown=_truncated_mean(totals.reproduction_countdown, count),
    )


def create_metrics(tick: int, births: int, deaths: int, stats: PopulationStats) -> TickMetrics:
    return TickMetrics(
        tick=tick,
        population=stats.population,
        births=births,
        deaths=deaths,
        average_max_health=stats.max_health,
        average_health=stats.health,
        average_health_decay=stats.health_decay,
        average_reproduction_interval=stats.reproduction_interval,
        average_reproduction_countdown=stats.reproduction_countdown,
    )
