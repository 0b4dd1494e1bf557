# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for the tick-driven simulation session."""

from __future__ import annotations

import pytest

from karasim.errors import ErrorKind
from karasim.fsm.editing import add_state, add_transition, create_empty_fsm, set_start_state
from karasim.fsm.models import ActionType
from karasim.fsm.phases import Phase
from karasim.interpreter.dialects import Dialect
from karasim.session import RunMode, SimulationSession
from karasim.settings import Settings
from karasim.world.actions import Command
from karasim.world.models import Direction, Position

M, L = Command.MOVE_FORWARD, Command.TURN_LEFT

SPIN_FOREVER = "void myProgram() { while (true) { kara.turnLeft(); } }"


@pytest.fixture
def session(world, settings):
    return SimulationSession(world, settings)


class TestCommandRuns:
    def test_tick_applies_one_command(self, session):
        session.start_commands([M, L])
        assert session.running
        assert session.mode == RunMode.COMMANDS

        first = session.tick()
        assert first.command == M
        assert not first.done
        assert session.world.character.position == Position(x=2, y=1)

        second = session.tick()
        assert second.command == L
        assert second.done
        assert not session.running
        assert session.world.character.direction == Direction.WEST

    def test_blocked_command_ends_run(self, session):
        session.start_commands([M, M, M, L])
        result = session.skip_to_end()
        assert result.done
        assert result.error.kind == ErrorKind.BLOCKED_ACTION
        assert result.error.reason == "edge"
        assert session.error is result.error
        assert session.world.character.position == Position(x=2, y=0)

    def test_empty_list_is_done_at_once(self, session, world):
        session.start_commands([])
        assert not session.running
        result = session.tick()
        assert result.done
        assert result.world is world

    def test_tick_without_run(self, session, world):
        result = session.tick()
        assert result.done
        assert result.error is None
        assert result.world is world


class TestFsmRuns:
    def test_ticks_follow_phases(self, session, move_once_program):
        assert session.start_fsm(move_once_program) is None
        phases = []
        result = session.tick()
        phases.append(result.phase)
        while not result.done:
            result = session.tick()
            phases.append(result.phase)
        assert phases == [
            Phase.TRANSITION_MATCHED,
            Phase.EXECUTING_ACTION,
            Phase.SHOWING_ARROW,
            Phase.FINISHED,
        ]
        assert result.state_id == "stop"
        assert session.world.character.position == Position(x=2, y=1)

    def test_invalid_program_is_rejected(self, session):
        error = session.start_fsm(create_empty_fsm())
        assert error.kind == ErrorKind.VALIDATION
        assert "No start state set" in error.message
        assert not session.running
        assert session.error is error

    def test_explicit_start_state(self, session, move_once_program):
        program = move_once_program.model_copy(update={"start_state_id": None})
        assert session.start_fsm(program, "state-1") is None
        result = session.skip_to_end()
        assert result.error is None
        assert result.phase == Phase.FINISHED

    @pytest.mark.parametrize(
        ("state_id", "message"),
        [("ghost", "Start state not found"), ("stop", "cannot start in the STOP state")],
    )
    def test_explicit_start_state_is_checked(self, session, move_once_program, state_id, message):
        error = session.start_fsm(move_once_program, state_id)
        assert error.kind == ErrorKind.VALIDATION
        assert message in error.message
        assert error.state_id == state_id
        assert not session.running

    def test_step_limit_from_settings(self, world, tmp_path, ids):
        program = add_state(create_empty_fsm(), "Spin", ids=ids)
        program = set_start_state(program, "state-1")
        program = add_transition(program, "state-1", "state-1", {}, [ActionType.TURN_LEFT], ids=ids)
        session = SimulationSession(world, Settings(data_root=tmp_path, max_fsm_steps=7))

        session.start_fsm(program)
        result = session.skip_to_end()

        assert result.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert "(7 steps)" in result.error.message


class TestCodeRuns:
    def test_streams_one_command_per_tick(self, session):
        source = "void myProgram() { while (!kara.treeFront()) { kara.move(); } }"
        assert session.start_code(source, Dialect.JAVA) is None
        commands = []
        result = session.tick()
        while not result.done:
            commands.append(result.command)
            result = session.tick()
        assert commands == [M, M]
        assert result.error is None

    def test_parse_error_is_returned(self, session):
        error = session.start_code("void main() {}", "JavaKara")
        assert error.kind == ErrorKind.PARSE
        assert not session.running

    def test_infinite_program_keeps_ticking(self, session):
        session.start_code(SPIN_FOREVER, Dialect.JAVA)
        for _ in range(50):
            assert not session.tick().done
        assert session.running

    def test_skip_to_end_is_bounded(self, world, tmp_path):
        session = SimulationSession(world, Settings(data_root=tmp_path, max_interpreter_steps=12))
        session.start_code(SPIN_FOREVER, Dialect.JAVA)
        result = session.skip_to_end()
        assert result.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert "(12 commands)" in result.error.message
        # Twelve left turns bring the character back to north
        assert session.world.character.direction == Direction.NORTH

    def test_limited_streaming(self, world, tmp_path):
        settings = Settings(data_root=tmp_path, max_interpreter_steps=3, limit_streaming=True)
        session = SimulationSession(world, settings)
        session.start_code(SPIN_FOREVER, Dialect.JAVA)
        results = [session.tick() for _ in range(4)]
        assert [r.done for r in results] == [False, False, False, True]
        assert results[-1].error.kind == ErrorKind.LIMIT_EXCEEDED

    def test_blocked_command(self, session):
        session.start_code("def my_program():\n    kara.remove_leaf()\n", Dialect.PYTHON)
        result = session.tick()
        assert result.done
        assert result.error.reason == "no_clover"
        assert result.command == Command.PICK_CLOVER


class TestSessionControl:
    def test_stop_keeps_world(self, session):
        session.start_commands([M, M])
        session.tick()
        result = session.stop()
        assert result.done
        assert not session.running
        assert session.world.character.position == Position(x=2, y=1)
        assert session.tick().world is session.world

    def test_reset_restores_initial_world(self, session, world):
        session.start_commands([M, L])
        session.skip_to_end()
        assert session.reset() is world
        assert session.mode is None
        assert session.error is None

    def test_new_run_starts_from_current_world(self, session):
        session.start_commands([M])
        session.skip_to_end()
        session.start_commands([M])
        session.skip_to_end()
        assert session.world.character.position == Position(x=2, y=0)

    def test_new_run_replaces_old_one(self, session):
        session.start_code(SPIN_FOREVER, Dialect.JAVA)
        session.tick()
        session.start_commands([M])
        assert session.mode == RunMode.COMMANDS
        assert session.tick().command == M

    def test_load_world(self, session, make_world):
        other = make_world(width=3, height=3, x=0, y=0)
        session.start_commands([M])
        session.load_world(other)
        assert not session.running
        assert session.world is other
        assert session.reset() is other
