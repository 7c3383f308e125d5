"""Tests for the command line interface."""

import asyncio
import json

import pytest
from click.testing import CliRunner

from helix_train.cli import main
from helix_train.db import WorkoutInstanceRepository
from helix_train.models.duration import DurationUnit, DurationValue
from helix_train.models.load import LoadUnit, LoadValue


@pytest.fixture
def cli_env(temp_db_path, monkeypatch):
    monkeypatch.setenv("HELIX_TRAIN_DB", str(temp_db_path))
    return temp_db_path


@pytest.fixture
def protocol_file(tmp_path, sample_protocol_dict):
    path = tmp_path / "protocol.json"
    path.write_text(json.dumps(sample_protocol_dict))
    return path


class TestCli:
    """End-to-end CLI flows."""

    def test_requires_init(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HELIX_TRAIN_DB", str(tmp_path / "missing.db"))
        result = CliRunner().invoke(main, ["protocols", "list"])
        assert result.exit_code == 1
        assert "not initialized" in result.output

    def test_exercise_list(self, cli_env):
        result = CliRunner().invoke(main, ["exercises", "list", "--search", "squat"])
        assert result.exit_code == 0
        assert "back-squat" in result.output

    def test_import_start_log_finish(self, cli_env, protocol_file):
        runner = CliRunner()

        result = runner.invoke(main, ["protocols", "import", str(protocol_file)])
        assert result.exit_code == 0, result.output
        protocol_id = result.output.strip().rsplit("(", 1)[1].rstrip(")")

        result = runner.invoke(main, ["protocols", "show", protocol_id, "--json"])
        assert json.loads(result.output)["name"] == "Full Body A"

        result = runner.invoke(main, ["session", "start", protocol_id, "--user", "me"])
        assert result.exit_code == 0, result.output
        assert "0% (0/3 exercises)" in result.output

        instance = asyncio.run(WorkoutInstanceRepository(cli_env).list_for_user("me"))[0]
        leaf = instance.blocks[0].exercises[0]

        result = runner.invoke(
            main,
            ["session", "log", instance.id, leaf.id, "--reps", "5", "--duration", "2", "--unit", "min"],
        )
        assert result.exit_code == 0, result.output

        result = runner.invoke(main, ["session", "finish", instance.id])
        assert result.exit_code == 0
        assert "Elapsed: 02:00" in result.output

        result = runner.invoke(main, ["session", "log", instance.id, leaf.id])
        assert result.exit_code != 0
        assert "already completed" in result.output

    def test_log_clock_duration_and_load(self, cli_env, protocol_file):
        runner = CliRunner()
        result = runner.invoke(main, ["protocols", "import", str(protocol_file)])
        protocol_id = result.output.strip().rsplit("(", 1)[1].rstrip(")")
        runner.invoke(main, ["session", "start", protocol_id, "--user", "me"])
        instance = asyncio.run(WorkoutInstanceRepository(cli_env).list_for_user("me"))[0]
        leaf = instance.blocks[0].exercises[0]

        result = runner.invoke(
            main,
            [
                "session", "log", instance.id, leaf.id,
                "--reps", "5", "--duration", "1:30", "--unit", "min",
                "--load", "120", "--load-unit", "kg",
            ],
        )
        assert result.exit_code == 0, result.output

        logged = asyncio.run(WorkoutInstanceRepository(cli_env).get(instance.id))
        squat = logged.blocks[0].exercises[0]
        assert squat.actual_duration == DurationValue(1.5, DurationUnit.MINUTES)
        assert squat.actual_load == LoadValue(120, LoadUnit.KILOGRAMS)

        result = runner.invoke(main, ["session", "show", instance.id])
        assert "Elapsed: 01:30" in result.output
        assert "Volume: 600 kg" in result.output

    def test_bad_clock_rejected(self, cli_env, protocol_file):
        runner = CliRunner()
        result = runner.invoke(main, ["protocols", "import", str(protocol_file)])
        protocol_id = result.output.strip().rsplit("(", 1)[1].rstrip(")")
        runner.invoke(main, ["session", "start", protocol_id, "--user", "me"])
        instance = asyncio.run(WorkoutInstanceRepository(cli_env).list_for_user("me"))[0]
        leaf = instance.blocks[0].exercises[0]

        result = runner.invoke(main, ["session", "log", instance.id, leaf.id, "--duration", "1:xx"])
        assert result.exit_code == 2
        assert "not a duration" in result.output

    def test_exported_protocol_imports_as_copy(self, cli_env, protocol_file, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["protocols", "import", str(protocol_file)])
        protocol_id = result.output.strip().rsplit("(", 1)[1].rstrip(")")

        exported = tmp_path / "exported.json"
        exported.write_text(runner.invoke(main, ["protocols", "show", protocol_id, "--json"]).output)
        result = runner.invoke(main, ["protocols", "import", str(exported)])

        assert result.exit_code == 0, result.output
        assert protocol_id not in result.output
        result = runner.invoke(main, ["protocols", "list"])
        assert result.output.count("Full Body A") == 2

    def test_unknown_protocol_reports_error(self, cli_env):
        result = CliRunner().invoke(main, ["session", "start", "nope", "--user", "me"])
        assert result.exit_code != 0
        assert "not found" in result.output
