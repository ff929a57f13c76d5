from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, List, Optional, Protocol

from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

METRICS_HEADER = (
    "#Time NumInhabitants AvgMaxHealth AvgHealth AvgHealthDegenerationRate "
    "AvgMinTimeToReproduce AvgTimeLeftBeforeReproduction NumBirths NumDeaths"
)

METRICS_EXT = ".out"
EVENTS_EXT = ".log"


class MetricsReporter(Protocol):
    def record(self, metrics: TickMetrics) -> None: ...

    def event(self, message: str) -> None: ...

    def close(self) -> None: ...


def format_metrics_line(metrics: TickMetrics) -> str:
    return "\t".join(
        str(value)
        for value in (
            metrics.tick,
            metrics.population,
            metrics.average_max_health,
            metrics.average_health,
            metrics.average_health_decay,
            metrics.average_reproduction_interval,
            metrics.average_reproduction_countdown,
            metrics.births,
            metrics.deaths,
        )
    )


class MemoryReporter:
    """Keeps every record and event in memory."""

    def __init__(self) -> None:
        self.records: List[TickMetrics] = []
        self.events: List[str] = []

    def record(self, metrics: TickMetrics) -> None:
        self.records.append(metrics)

    def event(self, message: str) -> None:
        self.events.append(message)

    def close(self) -> None:
        pass

    def lines(self) -> List[str]:
        return [METRICS_HEADER] + [format_metrics_line(metrics) for metrics in self.records]


class FileReporter:
    """
    Writes the metrics stream to ``<base>.out`` and the event log to ``<base>.log``.

    Write failures are logged and swallowed so that a full disk or a closed
    handle never stops a simulation that is already running.
    """

    def __init__(self, base_path: Path) -> None:
        base_path = Path(base_path)
        self.metrics_path = base_path.with_name(base_path.name + METRICS_EXT)
        self.events_path = base_path.with_name(base_path.name + EVENTS_EXT)
        self._metrics_file: Optional[IO[str]] = self.metrics_path.open("w", newline="")
        try:
            self._events_file: Optional[IO[str]] = self.events_path.open("w", newline="")
        except OSError:
            self._metrics_file.close()
            raise
        self._write(self._metrics_file, METRICS_HEADER)

    def __enter__(self) -> "FileReporter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def record(self, metrics: TickMetrics) -> None:
        self._write(self._metrics_file, format_metrics_line(metrics))

    def event(self, message: str) -> None:
        self._write(self._events_file, message)

    def close(self) -> None:
        for handle in (self._metrics_file, self._events_file):
            if handle is None:
                continue
            try:
                handle.close()
            except OSError:
                logger.exception("Failed to close %s", handle.name)
        self._metrics_file = None
        self._events_file = None

    def _write(self, handle: Optional[IO[str]], line: str) -> None:
        if handle is None:
            logger.error("Dropping line written after close: %s", line)
            return
        try:
            handle.write(line + "\r\n")
        except (OSError, ValueError):
            logger.exception("Failed to write to %s", handle.name)
