from __future__ import annotations

import pytest

from habitat.sim.core.config import (
    ConfigError,
    FounderConfig,
    SimulationConfig,
    load_config,
    load_config_file,
    parse_env_text,
)

ENV_TEXT = """\
SEED=17
GRID_SIZE=10,8
NUM_RANDOM_RESOURCES=30
NUM_RANDOM_INHABITANTS=12
TIME_TO_RUN=200
"""


def test_parse_env_text_reads_all_keys():
    raw = parse_env_text(ENV_TEXT)
    assert raw == {
        "seed": 17,
        "grid_width": 10,
        "grid_height": 8,
        "num_random_resources": 30,
        "num_random_inhabitants": 12,
        "time_to_run": 200,
    }


def test_env_keys_are_case_insensitive_and_noise_is_skipped():
    raw = parse_env_text("# comment\n\nseed = 4\nGrid_Size=3, 2\nCOLOUR=blue\n")
    assert raw == {"seed": 4, "grid_width": 3, "grid_height": 2}


@pytest.mark.parametrize(
    "line",
    ["SEED=abc", "GRID_SIZE=10", "GRID_SIZE=1,2,3", "TIME_TO_RUN=", "NUM_RANDOM_RESOURCES"],
)
def test_malformed_lines_are_reported(line):
    with pytest.raises(ConfigError, match="line|Line"):
        parse_env_text(f"SEED=1\n{line}\n", source="bad.env")


def test_env_file_defaults(tmp_path):
    path = tmp_path / "empty.env"
    path.write_text("")
    config = SimulationConfig.from_env_file(path)
    assert (config.seed, config.grid_width, config.grid_height, config.time_to_run) == (0, 1, 1, 1)
    assert config.num_random_resources == 0
    assert config.num_random_inhabitants == 0


def test_missing_file_fails_fast(tmp_path):
    with pytest.raises(ConfigError, match="does not exist"):
        load_config_file(tmp_path / "missing.env")
    with pytest.raises(ConfigError, match="does not exist"):
        load_config_file(tmp_path / "missing.yaml")


def test_out_of_range_counts_are_rejected(tmp_path):
    path = tmp_path / "crowded.env"
    path.write_text("GRID_SIZE=2,2\nNUM_RANDOM_INHABITANTS=9\n")
    with pytest.raises(ConfigError, match="NUM_RANDOM_INHABITANTS"):
        load_config_file(path)

    path.write_text("GRID_SIZE=2,2\nNUM_RANDOM_RESOURCES=5\n")
    with pytest.raises(ConfigError, match="NUM_RANDOM_RESOURCES"):
        load_config_file(path)


def test_invalid_grid_and_run_length_are_rejected():
    with pytest.raises(ConfigError):
        load_config({"grid_width": 0})
    with pytest.raises(ConfigError):
        load_config({"time_to_run": 0})


def test_yaml_config_with_founder_ranges(tmp_path):
    path = tmp_path / "world.yaml"
    path.write_text(
        "seed: 5\n"
        "grid_width: 6\n"
        "grid_height: 4\n"
        "num_random_inhabitants: 10\n"
        "time_to_run: 50\n"
        "max_mutation_percent: 10\n"
        "founder:\n"
        "  max_health: [10, 20]\n"
    )
    config = load_config_file(path)
    assert config.seed == 5
    assert (config.grid_width, config.grid_height) == (6, 4)
    assert config.max_mutation_percent == 10
    assert config.founder.max_health == (10, 20)
    assert config.founder.health_decay == FounderConfig().health_decay


def test_unknown_yaml_key_is_rejected():
    with pytest.raises(ConfigError, match="Unknown"):
        load_config({"gird_width": 3})


def test_mutation_percent_must_stay_below_one_hundred():
    with pytest.raises(ConfigError):
        load_config({"max_mutation_percent": 100})


@pytest.mark.parametrize(
    "raw",
    [
        {"grid_width": "3"},
        {"time_to_run": 2.5},
        {"seed": True},
        {"founder": {"max_health": ["ten", 20]}},
        {"founder": {"health_decay": [1, None]}},
        {"founder": [1, 2]},
    ],
)
def test_badly_typed_values_are_config_errors(raw):
    with pytest.raises(ConfigError):
        load_config(raw)


def test_badly_typed_yaml_file_is_a_config_error(tmp_path):
    path = tmp_path / "world.yaml"
    path.write_text('grid_width: "3"\n')
    with pytest.raises(ConfigError, match="grid_width"):
        load_config_file(path)
