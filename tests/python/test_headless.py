import json

import pytest

from habitat.app.headless import main, run_headless
from habitat.app.reporting import METRICS_HEADER
from habitat.sim.core.config import ConfigError

ENV_TEXT = """\
SEED=2024
GRID_SIZE=10,10
NUM_RANDOM_RESOURCES=40
NUM_RANDOM_INHABITANTS=30
TIME_TO_RUN=25
"""


def _write_env(tmp_path, name="10x10Rand.env", text=ENV_TEXT):
    path = tmp_path / name
    path.write_text(text)
    return path


def _read_lines(path):
    return path.read_bytes().decode().split("\r\n")[:-1]


def test_headless_writes_metrics_and_event_log_next_to_config(tmp_path):
    config_path = _write_env(tmp_path)

    records = run_headless(config_path)

    out_path = tmp_path / "10x10Rand.out"
    log_path = tmp_path / "10x10Rand.log"
    assert out_path.exists()
    assert log_path.exists()

    lines = _read_lines(out_path)
    assert lines[0] == METRICS_HEADER
    # Initial record, then ticks 0, 10 and 20.
    assert len(lines) == 1 + 4
    assert [int(line.split("\t")[0]) for line in lines[1:]] == [0, 0, 10, 20]
    assert len(records) == 4
    for line in lines[1:]:
        fields = line.split()
        assert len(fields) == 9
        assert all(field.lstrip("-").isdigit() for field in fields)
    first = lines[1].split("\t")
    assert first[1] == "30"
    assert first[-2:] == ["0", "0"]

    events = _read_lines(log_path)
    assert events[0].startswith("start seed=2024")
    assert events[-1].startswith("end tick=25")


def test_identical_seeds_produce_identical_output(tmp_path):
    config_path = _write_env(tmp_path)

    run_headless(config_path, output_base=tmp_path / "run_a")
    run_headless(config_path, output_base=tmp_path / "run_b")

    assert (tmp_path / "run_a.out").read_bytes() == (tmp_path / "run_b.out").read_bytes()
    assert (tmp_path / "run_a.log").read_bytes() == (tmp_path / "run_b.log").read_bytes()


def test_steps_override_and_summary_output(tmp_path):
    config_path = _write_env(tmp_path)
    summary_path = tmp_path / "summary.json"

    records = run_headless(config_path, steps=41, summary_path=summary_path)

    assert [record.tick for record in records] == [0, 0, 10, 20, 30, 40]
    payload = json.loads(summary_path.read_text())
    assert payload["seed"] == 2024
    assert payload["ticks"] == 41
    assert payload["records"] == 6
    assert payload["final_population"] == records[-1].population
    assert payload["total_births"] == sum(record.births for record in records)
    assert "population" in payload
    assert payload["population"]["max"] >= payload["population"]["min"]


def test_missing_config_raises_before_any_output(tmp_path):
    with pytest.raises(ConfigError):
        run_headless(tmp_path / "nowhere.env")
    assert list(tmp_path.iterdir()) == []


def test_cli_exit_codes(tmp_path):
    config_path = _write_env(tmp_path, text="GRID_SIZE=3,3\nNUM_RANDOM_INHABITANTS=4\nTIME_TO_RUN=3\n")

    assert main([str(config_path), "--output-base", str(tmp_path / "cli")]) == 0
    assert (tmp_path / "cli.out").exists()
    assert main([str(tmp_path / "nowhere.env")]) == 2


def test_cli_reports_badly_typed_yaml_as_config_error(tmp_path):
    config_path = tmp_path / "typed.yaml"
    config_path.write_text('grid_width: "3"\ntime_to_run: 2\n')

    assert main([str(config_path)]) == 2
    assert not (tmp_path / "typed.out").exists()
