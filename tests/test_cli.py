# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for the command line interface."""

from __future__ import annotations

import json

import pytest
import structlog
from click.testing import CliRunner

from karasim.cli import cli, render_world
from karasim.interchange import export_fsm_xml, export_world_xml, world_to_json
from karasim.world.models import CellType, Direction


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    """Keep progress out of the user's data dir and logging off the runner's streams."""
    monkeypatch.setenv("KARASIM_DATA_ROOT", str(tmp_path / "data"))
    monkeypatch.delenv("KARASIM_LOG_LEVEL", raising=False)
    yield
    structlog.reset_defaults()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def world_file(tmp_path, world):
    path = tmp_path / "start.world"
    path.write_text(export_world_xml(world))
    return path


def write_commands(tmp_path, commands, name="commands.json"):
    path = tmp_path / name
    path.write_text(json.dumps(commands))
    return path


class TestRenderWorld:
    def test_glyphs(self, make_world):
        world = make_world(
            width=3,
            height=2,
            x=1,
            y=1,
            direction=Direction.EAST,
            inventory=2,
            cells={(0, 0): CellType.TREE, (1, 0): CellType.MUSHROOM, (2, 0): CellType.CLOVER},
        )
        assert render_world(world) == "T M *\n. > .\ninventory: 2"


class TestRunCommands:
    def test_prints_final_world(self, runner, tmp_path, world_file):
        commands = write_commands(tmp_path, ["MOVE_FORWARD", "TURN_RIGHT"])
        result = runner.invoke(cli, ["run-commands", str(world_file), str(commands)])
        assert result.exit_code == 0, result.output
        assert ". . > . ." in result.output
        assert "inventory: 0" in result.output

    def test_json_output(self, runner, tmp_path, world_file):
        commands = write_commands(tmp_path, ["MOVE_FORWARD"])
        result = runner.invoke(
            cli, ["run-commands", str(world_file), str(commands), "--output", "json"]
        )
        assert result.exit_code == 0, result.output
        assert '"x": 2' in result.output
        assert '"y": 1' in result.output

    def test_blocked_command_exits_nonzero(self, runner, tmp_path, world_file):
        commands = write_commands(tmp_path, ["MOVE_FORWARD"] * 3)
        result = runner.invoke(cli, ["run-commands", str(world_file), str(commands)])
        assert result.exit_code == 1
        assert "Error (blocked_action)" in result.output

    def test_bad_command_file(self, runner, tmp_path, world_file):
        commands = write_commands(tmp_path, ["JUMP"])
        result = runner.invoke(cli, ["run-commands", str(world_file), str(commands)])
        assert result.exit_code == 1
        assert "Invalid command list" in result.output

    def test_json_world_file(self, runner, tmp_path, world):
        path = tmp_path / "start.json"
        path.write_text(world_to_json(world))
        commands = write_commands(tmp_path, ["TURN_LEFT"])
        result = runner.invoke(cli, ["run-commands", str(path), str(commands)])
        assert result.exit_code == 0, result.output
        assert ". . < . ." in result.output


class TestRunFsm:
    def test_runs_kara_program(self, runner, tmp_path, world_file, move_once_program):
        program = tmp_path / "prog.kara"
        program.write_text(export_fsm_xml(move_once_program))
        result = runner.invoke(cli, ["run-fsm", str(world_file), str(program), "--output", "xml"])
        assert result.exit_code == 0, result.output
        assert 'x="2" y="1"' in result.output

    def test_invalid_program(self, runner, tmp_path, world_file, move_once_program):
        program = tmp_path / "prog.json"
        program.write_text(
            move_once_program.model_copy(update={"start_state_id": None}).model_dump_json(
                by_alias=True
            )
        )
        result = runner.invoke(cli, ["run-fsm", str(world_file), str(program)])
        assert result.exit_code == 1
        assert "No start state set" in result.output


class TestRunCode:
    def test_dialect_from_extension(self, runner, tmp_path, world_file):
        source = tmp_path / "walk.rb"
        source.write_text("def my_program\n  until kara.tree_front?\n    kara.move\n  end\nend\n")
        result = runner.invoke(cli, ["run-code", str(world_file), str(source)])
        assert result.exit_code == 0, result.output
        assert ". . ^ . ." in result.output.splitlines()[0]

    def test_unknown_extension(self, runner, tmp_path, world_file):
        source = tmp_path / "walk.txt"
        source.write_text("kara.move()")
        result = runner.invoke(cli, ["run-code", str(world_file), str(source)])
        assert result.exit_code == 2
        assert "--dialect" in result.output

    def test_step_limit(self, runner, tmp_path, world_file):
        source = tmp_path / "spin.txt"
        source.write_text("void myProgram() { while (true) { kara.turnLeft(); } }")
        result = runner.invoke(
            cli,
            ["run-code", str(world_file), str(source), "--dialect", "JavaKara", "--max-steps", "8"],
        )
        assert result.exit_code == 1
        assert "Execution limit exceeded (8 steps)" in result.output


class TestCatalogCommands:
    def test_template(self, runner):
        result = runner.invoke(cli, ["template", "Maze", "--output", "text"])
        assert result.exit_code == 0, result.output
        assert "inventory: 0" in result.output

    def test_template_default_is_xml(self, runner):
        result = runner.invoke(cli, ["template", "Garden"])
        assert "<XmlWorld" in result.output

    def test_scenarios(self, runner):
        result = runner.invoke(cli, ["scenarios"])
        assert result.exit_code == 0
        assert "level-1-first-steps" in result.output
        assert "Round Trip" in result.output


class TestSolve:
    def test_records_progress(self, runner, tmp_path):
        commands = write_commands(tmp_path, ["MOVE_FORWARD", "MOVE_FORWARD"])
        result = runner.invoke(cli, ["solve", "level-1-first-steps", str(commands)])
        assert result.exit_code == 0, result.output
        assert "Solved First Steps with 2 commands: 3 stars" in result.output

        saved = json.loads((tmp_path / "data" / "progress.json").read_text())
        assert saved["progress"][0]["scenario_id"] == "level-1-first-steps"

    def test_goal_not_reached(self, runner, tmp_path):
        commands = write_commands(tmp_path, ["MOVE_FORWARD"])
        result = runner.invoke(cli, ["solve", "level-1-first-steps", str(commands)])
        assert result.exit_code == 1
        assert "Goal not reached: Reach position (2, 2)" in result.output
        assert not (tmp_path / "data" / "progress.json").exists()

    def test_disallowed_command(self, runner, tmp_path):
        commands = write_commands(tmp_path, ["TURN_LEFT"])
        result = runner.invoke(cli, ["solve", "level-1-first-steps", str(commands)])
        assert result.exit_code == 1
        assert "only allows: MOVE_FORWARD" in result.output

    def test_unknown_scenario(self, runner, tmp_path):
        commands = write_commands(tmp_path, [])
        result = runner.invoke(cli, ["solve", "level-0", str(commands)])
        assert result.exit_code == 2
        assert "unknown scenario" in result.output
