from __future__ import annotations

import itertools
import logging
from typing import TYPE_CHECKING, Iterator, List, Optional

from .agent import Agent
from .cell import Cell
from .config import SimulationConfig
from .resource import random_resource
from .rng import DeterministicRng
from ..systems import lifecycle, metrics as metrics_system, placement
from ..systems.behavior import Behavior, RandomWalkBehavior
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld

if TYPE_CHECKING:
    from ...app.reporting import MetricsReporter

logger = logging.getLogger(__name__)


class World:
    """
    The toroidal grid of cells and the clock that drives it.

    The world owns every cell and, through them, every agent. A single
    seeded random stream is shared by placement, reproduction and movement,
    so a run is reproducible as long as cells are visited in row-major
    order and agents in list order.
    """

    def __init__(self, config: SimulationConfig, behavior: Optional[Behavior] = None):
        config.validate()
        self._config = config
        self._behavior: Behavior = behavior if behavior is not None else RandomWalkBehavior()
        self._build()

    def _build(self) -> None:
        config = self._config
        self._rng = DeterministicRng(config.seed)
        self._ids: Iterator[int] = itertools.count()
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self._pending_births = 0
        self._pending_deaths = 0
        self._grid: List[List[Cell]] = [
            [Cell(config.cell_capacity) for _ in range(config.grid_width)] for _ in range(config.grid_height)
        ]
        self._generate_resources(config.num_random_resources)
        self._generate_inhabitants(config.num_random_inhabitants)
        logger.debug(
            "Initialized %dx%d world (seed=%d, resources=%d, inhabitants=%d)",
            config.grid_width,
            config.grid_height,
            config.seed,
            config.num_random_resources,
            config.num_random_inhabitants,
        )

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def behavior(self) -> Behavior:
        return self._behavior

    @property
    def rng(self) -> DeterministicRng:
        return self._rng

    @property
    def ids(self) -> Iterator[int]:
        return self._ids

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def width(self) -> int:
        return self._config.grid_width

    @property
    def height(self) -> int:
        return self._config.grid_height

    @property
    def finished(self) -> bool:
        return self._tick >= self._config.time_to_run

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def agents(self) -> List[Agent]:
        return [agent for row in self._grid for cell in row for agent in cell.agents]

    def cell(self, x: int, y: int) -> Cell:
        return self._grid[y][x]

    def allocate_id(self) -> int:
        return next(self._ids)

    def reset(self) -> None:
        self._build()

    def _generate_resources(self, count: int) -> None:
        fallback = placement.scatter(
            self._rng,
            self.width,
            self.height,
            count,
            create=lambda: random_resource(self._rng),
            try_place=lambda x, y, resource: self.cell(x, y).place_resource(resource),
        )
        if fallback:
            logger.debug("Placed %d resources by sequential fill", fallback)

    def _generate_inhabitants(self, count: int) -> None:
        fallback = placement.scatter(
            self._rng,
            self.width,
            self.height,
            count,
            create=lambda: Agent.founder(self.allocate_id(), self._rng, self._config.founder),
            try_place=lambda x, y, agent: self.cell(x, y).add_agent(agent),
        )
        if fallback:
            logger.debug("Placed %d inhabitants by sequential fill", fallback)

    def step(self) -> TickMetrics:
        """Process the current tick over the whole grid and advance the clock."""
        births = 0
        deaths = 0
        for y in range(self.height):
            for x in range(self.width):
                cell_births, cell_deaths = lifecycle.step_cell(self, x, y)
                births += cell_births
                deaths += cell_deaths

        metrics = metrics_system.create_metrics(
            self._tick, births, deaths, metrics_system.collect_population_stats(self.agents)
        )
        self._metrics = metrics
        self._tick += 1
        return metrics

    def current_metrics(self, births: int = 0, deaths: int = 0, tick: Optional[int] = None) -> TickMetrics:
        stats = metrics_system.collect_population_stats(self.agents)
        return metrics_system.create_metrics(self._tick if tick is None else tick, births, deaths, stats)

    def record_initial(self, reporter: Optional[MetricsReporter] = None) -> TickMetrics:
        """Emit the record describing the world before its first tick."""
        record = self.current_metrics()
        if reporter is not None:
            reporter.record(record)
        return record

    def advance(self, reporter: Optional[MetricsReporter] = None) -> TickMetrics | None:
        """
        Step once, accumulating births and deaths until the next record.

        A record is emitted after every tick that is a multiple of the log
        interval; its births and deaths cover every tick since the previous
        record.

        Returns:
            The record emitted by this tick, or None
        """
        metrics = self.step()
        self._pending_births += metrics.births
        self._pending_deaths += metrics.deaths
        if reporter is not None and (metrics.births or metrics.deaths):
            reporter.event(f"tick {metrics.tick}: births={metrics.births} deaths={metrics.deaths}")
        if metrics.tick % self._config.log_interval != 0:
            return None

        record = self.current_metrics(self._pending_births, self._pending_deaths, tick=metrics.tick)
        self._pending_births = 0
        self._pending_deaths = 0
        if reporter is not None:
            reporter.record(record)
        return record

    def run(self, reporter: Optional[MetricsReporter] = None) -> List[TickMetrics]:
        """
        Run until the configured number of ticks has elapsed.

        Returns:
            The initial record followed by every interval record, in order
        """
        records = [self.record_initial(reporter)]
        while not self.finished:
            record = self.advance(reporter)
            if record is not None:
                records.append(record)
        logger.debug("Run finished at tick %d with %d inhabitants", self._tick, records[-1].population)
        return records

    def snapshot(self) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else self.current_metrics()
        agents_payload = []
        resources_payload = []
        for y, row in enumerate(self._grid):
            for x, cell in enumerate(row):
                for agent in cell.agents:
                    agents_payload.append(
                        {
                            "id": agent.id,
                            "x": x,
                            "y": y,
                            "health": agent.health,
                            "max_health": agent.max_health,
                            "health_decay": agent.health_decay,
                            "reproduction_interval": agent.reproduction_interval,
                            "reproduction_countdown": agent.reproduction_countdown,
                        }
                    )
                if cell.resource is not None:
                    resources_payload.append(
                        {"x": x, "y": y, "kind": cell.resource.name, "cooldown": cell.cooldown}
                    )
        return Snapshot(
            tick=self._tick,
            metrics=metrics,
            agents=agents_payload,
            resources=resources_payload,
            world=SnapshotWorld(width=self.width, height=self.height, cell_capacity=self._config.cell_capacity),
            metadata=SnapshotMetadata(
                seed=self._config.seed,
                time_to_run=self._config.time_to_run,
                log_interval=self._config.log_interval,
            ),
        )
