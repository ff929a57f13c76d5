from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    births: int
    deaths: int
    average_max_health: int
    average_health: int
    average_health_decay: int
    average_reproduction_interval: int
    average_reproduction_countdown: int
