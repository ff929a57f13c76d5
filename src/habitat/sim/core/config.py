from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Tuple

import yaml

MAX_OCCUPANTS = 2


class ConfigError(ValueError):
    """Raised when a configuration source is missing, malformed or out of range."""


@dataclass
class FounderConfig:
    """Half-open integer ranges sampled for randomly generated founders."""

    max_health: tuple[int, int] = (30, 70)
    health_decay: tuple[int, int] = (1, 5)
    reproduction_interval: tuple[int, int] = (30, 70)


@dataclass
class SimulationConfig:
    seed: int = 0
    grid_width: int = 1
    grid_height: int = 1
    num_random_resources: int = 0
    num_random_inhabitants: int = 0
    time_to_run: int = 1
    log_interval: int = 10
    max_movement_attempts: int = 4
    cell_capacity: int = MAX_OCCUPANTS
    max_mutation_percent: int = 5
    founder: FounderConfig = field(default_factory=FounderConfig)

    @property
    def cell_count(self) -> int:
        return self.grid_width * self.grid_height

    def validate(self) -> None:
        if self.grid_width <= 0 or self.grid_height <= 0:
            raise ConfigError("Grid must be at least 1x1.")
        if self.time_to_run < 1:
            raise ConfigError("Must have at least one time step.")
        if self.cell_capacity < 1:
            raise ConfigError("Cells must hold at least one inhabitant.")
        if self.log_interval < 1:
            raise ConfigError("Log interval must be at least 1.")
        if self.max_movement_attempts < 1:
            raise ConfigError("Must allow at least one movement attempt.")
        if not 0 <= self.max_mutation_percent < 100:
            raise ConfigError("Mutation percent must be between 0 and 99.")
        if not 0 <= self.num_random_resources <= self.cell_count:
            raise ConfigError(
                f"NUM_RANDOM_RESOURCES must be between 0 and {self.cell_count}, got {self.num_random_resources}."
            )
        inhabitant_capacity = self.cell_capacity * self.cell_count
        if not 0 <= self.num_random_inhabitants <= inhabitant_capacity:
            raise ConfigError(
                f"NUM_RANDOM_INHABITANTS must be between 0 and {inhabitant_capacity}, "
                f"got {self.num_random_inhabitants}."
            )
        low, high = self.founder.max_health
        if low <= 0 or high < low:
            raise ConfigError(f"Founder max health range {self.founder.max_health} is invalid.")
        low, high = self.founder.reproduction_interval
        if low < 0 or high < low:
            raise ConfigError(f"Founder reproduction interval range {self.founder.reproduction_interval} is invalid.")
        low, high = self.founder.health_decay
        if high < low:
            raise ConfigError(f"Founder health decay range {self.founder.health_decay} is invalid.")

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text())
        except FileNotFoundError:
            raise ConfigError(f"File '{path}' does not exist!") from None
        except yaml.YAMLError as exc:
            raise ConfigError(f"File '{path}' is not valid YAML: {exc}") from exc
        return load_config(data or {})

    @staticmethod
    def from_env_file(path: Path) -> "SimulationConfig":
        path = Path(path)
        try:
            text = path.read_text()
        except FileNotFoundError:
            raise ConfigError(f"File '{path}' does not exist!") from None
        return load_config(parse_env_text(text, source=str(path)))


def _parse_int(value: str) -> int:
    return int(value.strip())


def _parse_grid_size(value: str) -> Tuple[int, int]:
    width, height = value.split(",")
    return int(width.strip()), int(height.strip())


_ENV_KEYS: Dict[str, Tuple[str, Callable[[str], object]]] = {
    "SEED": ("seed", _parse_int),
    "GRID_SIZE": ("grid_size", _parse_grid_size),
    "NUM_RANDOM_RESOURCES": ("num_random_resources", _parse_int),
    "NUM_RANDOM_INHABITANTS": ("num_random_inhabitants", _parse_int),
    "TIME_TO_RUN": ("time_to_run", _parse_int),
}


def parse_env_text(text: str, source: str = "<string>") -> dict:
    """Parse the ``KEY=value`` environment format into a raw config dict.

    Keys are case-insensitive. Blank lines, ``#`` comments and unknown keys
    are skipped. A recognised key whose value does not parse raises
    :class:`ConfigError` naming the offending line.
    """

    raw: dict = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition("=")
        entry = _ENV_KEYS.get(key.strip().upper())
        if entry is None:
            continue
        name, parser = entry
        if not sep or not value.strip():
            raise ConfigError(f"Line {lineno} '{stripped}' in {source} is not formatted correctly.")
        try:
            parsed = parser(value)
        except ValueError:
            raise ConfigError(f"Line {lineno} '{stripped}' in {source} is not formatted correctly.") from None
        if name == "grid_size":
            raw["grid_width"], raw["grid_height"] = parsed
        else:
            raw[name] = parsed
    return raw


def load_config(raw: dict) -> SimulationConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(raw).__name__}.")
    default_founder = FounderConfig()
    founder_raw = raw.get("founder", {}) or {}
    if not isinstance(founder_raw, dict):
        raise ConfigError(f"founder must be a mapping, got {type(founder_raw).__name__}.")

    def _pair(value: tuple[int, int] | list[int] | None, default: tuple[int, int]) -> tuple[int, int]:
        if value is None:
            return default
        if isinstance(value, (tuple, list)) and len(value) == 2:
            try:
                return (int(value[0]), int(value[1]))
            except (TypeError, ValueError):
                pass
        raise ConfigError(f"Expected a [low, high] pair, got {value!r}.")

    founder = FounderConfig(
        max_health=_pair(founder_raw.get("max_health"), default_founder.max_health),
        health_decay=_pair(founder_raw.get("health_decay"), default_founder.health_decay),
        reproduction_interval=_pair(
            founder_raw.get("reproduction_interval"), default_founder.reproduction_interval
        ),
    )
    sim_values = {k: v for k, v in raw.items() if k != "founder"}
    try:
        config = SimulationConfig(founder=founder, **sim_values)
    except TypeError as exc:
        raise ConfigError(f"Unknown configuration key: {exc}") from exc
    for name, value in sim_values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{name} must be an integer, got {value!r}.")
    config.validate()
    return config


def load_config_file(path: Path) -> SimulationConfig:
    path = Path(path)
    if path.suffix.lower() in {".yaml", ".yml"}:
        return SimulationConfig.from_yaml(path)
    return SimulationConfig.from_env_file(path)
