"""Tests for the operator CLI."""

import pytest
from typer.testing import CliRunner

from metrics_simulator.cli import app

runner = CliRunner()


@pytest.fixture
def config_path(write_config):
    return write_config(
        {
            "clouds": [
                {"name": "prod", "graphiteEndpoint": "127.0.0.1:2003"},
                {"name": "broken", "graphiteEndpoint": "not-an-address"},
            ],
            "microservices": [
                {
                    "name": "auth",
                    "metrics": {
                        "meters": [{"name": "logins", "low": 1, "high": 10}],
                        "timers": [{"name": "token_issue", "low": 1, "high": 4}],
                    },
                }
            ],
        }
    )


def test_validate(config_path):
    result = runner.invoke(app, ["validate", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "prod" in result.output
    assert "auth" in result.output
    assert "1/2 cloud(s) ready" in result.output


def test_validate_no_valid_clouds(write_config):
    path = write_config(
        {"clouds": [{"name": "broken", "graphiteEndpoint": "nope"}], "microservices": []}
    )
    result = runner.invoke(app, ["validate", "-c", str(path)])

    assert result.exit_code == 1
    assert "No valid cloud configurations" in result.output


def test_validate_invalid_file(tmp_path):
    result = runner.invoke(app, ["validate", "-c", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_validate_reads_env(config_path, monkeypatch):
    monkeypatch.setenv("SIMULATOR_CONFIG_PATH", str(config_path))
    result = runner.invoke(app, ["validate"])

    assert result.exit_code == 0


def test_show_lists_qualified_names(config_path):
    result = runner.invoke(app, ["show", "-c", str(config_path)])

    assert result.exit_code == 0
    assert "auth.meter.logins" in result.output
    assert "auth.timer.token_issue" in result.output


def test_run_invalid_config_exits_1(tmp_path):
    result = runner.invoke(app, ["run", "-c", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
