from __future__ import annotations

import argparse
import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from ..sim.core.config import ConfigError, load_config_file
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics
from .reporting import FileReporter

logger = logging.getLogger(__name__)


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
    }


def build_summary(world: World, records: List[TickMetrics]) -> dict:
    final = records[-1]
    return {
        "seed": world.config.seed,
        "grid": [world.width, world.height],
        "ticks": world.tick,
        "records": len(records),
        "final_population": final.population,
        "total_births": sum(record.births for record in records),
        "total_deaths": sum(record.deaths for record in records),
        "population": _summary_stats([float(record.population) for record in records]),
        "average_health": _summary_stats([float(record.average_health) for record in records]),
    }


def run_headless(
    config_path: Path,
    output_base: Optional[Path] = None,
    steps: Optional[int] = None,
    summary_path: Optional[Path] = None,
) -> List[TickMetrics]:
    config_path = Path(config_path)
    config = load_config_file(config_path)
    if steps is not None:
        config = replace(config, time_to_run=steps)
    world = World(config)

    if output_base is None:
        output_base = config_path.with_suffix("")

    with FileReporter(output_base) as reporter:
        reporter.event(
            f"start seed={config.seed} grid={config.grid_width}x{config.grid_height} "
            f"resources={config.num_random_resources} inhabitants={config.num_random_inhabitants} "
            f"ticks={config.time_to_run}"
        )
        records = world.run(reporter)
        reporter.event(f"end tick={world.tick} population={records[-1].population}")
    logger.info("Wrote %s and %s", reporter.metrics_path, reporter.events_path)

    if summary_path:
        Path(summary_path).write_text(json.dumps(build_summary(world, records), indent=2))
    return records


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Headless habitat simulation")
    parser.add_argument("config", type=Path, help="Environment (.env) or YAML configuration file")
    parser.add_argument(
        "--output-base",
        type=Path,
        default=None,
        help="Path prefix for the .out/.log files (defaults to the config path without its suffix).",
    )
    parser.add_argument("--steps", type=int, default=None, help="Override TIME_TO_RUN.")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run_headless(args.config, output_base=args.output_base, steps=args.steps, summary_path=args.summary)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
