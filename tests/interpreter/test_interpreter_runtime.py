# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for running text programs."""

from __future__ import annotations

import pytest

from karasim.errors import ErrorKind, KaraError
from karasim.interpreter.dialects import DEFAULT_TEMPLATES, Dialect
from karasim.interpreter.runtime import (
    StreamingInterpreter,
    create_streaming_interpreter,
    extract_commands,
    validate_source,
)
from karasim.world.actions import Command, apply_command
from karasim.world.models import CellType, Direction, Position

M, L, R, PICK, PUT = (
    Command.MOVE_FORWARD,
    Command.TURN_LEFT,
    Command.TURN_RIGHT,
    Command.PICK_CLOVER,
    Command.PLACE_CLOVER,
)

ROW_SOURCES = {
    Dialect.JAVA: """
public class MyProgram extends JavaKaraProgram {
    public void myProgram() {
        while (!kara.treeFront()) {
            if (kara.onLeaf()) {
                kara.removeLeaf();
            }
            kara.move();
        }
        if (kara.onLeaf()) kara.removeLeaf();
    }
}
""",
    Dialect.JAVASCRIPT: """
function myProgram() {
    while (!kara.treeFront()) {
        if (kara.onLeaf()) {
            kara.removeLeaf();
        } else if (kara.mushroomFront()) {
            kara.turnLeft();
        }
        kara.move();
    }
    if (kara.onLeaf()) { kara.removeLeaf(); }
}
""",
    Dialect.PYTHON: """
class MyProgram(PythonKaraProgram):
    def my_program(self):
        while not kara.tree_front():
            if kara.on_leaf():
                kara.remove_leaf()
            kara.move()
        if kara.on_leaf():
            kara.remove_leaf()
""",
    Dialect.RUBY: """
def my_program
  until kara.tree_front?
    kara.remove_leaf if kara.on_leaf?
    kara.move
  end
  kara.remove_leaf if kara.on_leaf?
end
""",
}


@pytest.fixture
def clover_row(make_world):
    """A single row walked eastwards, with clovers at x=1 and x=4."""
    return make_world(
        width=5,
        height=1,
        x=0,
        y=0,
        direction=Direction.EAST,
        cells={(1, 0): CellType.CLOVER, (4, 0): CellType.CLOVER},
    )


class TestExtractCommands:
    """Test eager extraction against a simulated world."""

    @pytest.mark.parametrize("dialect", list(Dialect))
    def test_all_dialects_agree(self, dialect, clover_row):
        result = extract_commands(ROW_SOURCES[dialect], dialect, clover_row)
        assert result.error is None
        assert result.commands == [M, PICK, M, M, M, PICK]
        assert result.world.count(CellType.CLOVER) == 0
        assert result.world.character.inventory == 2

    @pytest.mark.parametrize("dialect", list(Dialect))
    def test_default_template_walks_to_edge(self, dialect, make_world):
        result = extract_commands(DEFAULT_TEMPLATES[dialect], dialect, make_world(y=4))
        assert result.commands == [M] * 4
        assert result.world.character.position == Position(x=2, y=0)

    def test_input_world_is_not_changed(self, clover_row):
        extract_commands(ROW_SOURCES[Dialect.JAVA], Dialect.JAVA, clover_row)
        assert clover_row.count(CellType.CLOVER) == 2

    def test_stops_at_first_blocked_command(self, make_world):
        source = "void myProgram() { kara.move(); kara.move(); kara.turnLeft(); }"
        result = extract_commands(source, Dialect.JAVA, make_world(y=1))
        assert result.commands == [M]
        assert result.error.kind == ErrorKind.BLOCKED_ACTION
        assert result.error.reason == "edge"
        assert result.world.character.position == Position(x=2, y=0)

    def test_step_limit(self, world):
        source = "void myProgram() { while (true) { kara.turnLeft(); } }"
        result = extract_commands(source, Dialect.JAVA, world, max_steps=20)
        assert len(result.commands) == 20
        assert result.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert "Execution limit exceeded (20 steps)" in result.error.message

    def test_idle_loop_limit(self, world):
        source = "void myProgram() {\n  while (true) { }\n}"
        result = extract_commands(source, Dialect.JAVA, world, max_idle_iterations=100)
        assert result.commands == []
        assert result.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert result.error.reason == "idle_loop"
        assert result.error.line == 2

    def test_parse_error_is_returned(self, world):
        result = extract_commands("void main() {}", Dialect.JAVA, world)
        assert result.error.kind == ErrorKind.PARSE
        assert result.commands == []
        assert result.world is world

    def test_do_while(self, make_world):
        source = "void myProgram() { do { kara.move(); } while (!kara.treeFront()); }"
        result = extract_commands(source, Dialect.JAVA, make_world(y=4))
        assert result.commands == [M] * 4

    def test_place_and_pick(self, make_world):
        source = "def my_program():\n    kara.put_leaf()\n    kara.remove_leaf()\n"
        result = extract_commands(source, Dialect.PYTHON, make_world(inventory=1))
        assert result.commands == [PUT, PICK]
        assert result.world.character.inventory == 1


class TestStreamingInterpreter:
    """Test one-command-at-a-time execution."""

    def test_infinite_program_can_be_stepped(self, world):
        source = "void myProgram() { while (true) { kara.turnRight(); } }"
        interpreter = create_streaming_interpreter(source, Dialect.JAVA)
        assert isinstance(interpreter, StreamingInterpreter)

        for _ in range(200):
            step = interpreter.next_command(world)
            assert step.command == R
            assert not step.done
            world = apply_command(world, step.command)
        assert interpreter.commands_emitted == 200

    def test_sensors_read_the_callers_world(self, make_world):
        source = "void myProgram() { while (!kara.treeFront()) { kara.move(); } }"
        interpreter = create_streaming_interpreter(source, Dialect.JAVA)
        world = make_world(y=2)

        commands = []
        step = interpreter.next_command(world)
        while not step.done:
            commands.append(step.command)
            world = apply_command(world, step.command)
            step = interpreter.next_command(world)

        assert commands == [M, M]
        assert step.error is None

    def test_finished_interpreter_stays_done(self, world):
        interpreter = create_streaming_interpreter("void myProgram() { kara.turnLeft(); }", "JavaKara")
        assert interpreter.next_command(world).command == L
        assert interpreter.next_command(world).done
        assert interpreter.next_command(world).done

    def test_optional_step_limit(self, world):
        source = "def my_program\n  loop do\n    kara.turn_left\n  end\nend\n"
        interpreter = create_streaming_interpreter(source, Dialect.RUBY, max_steps=3)
        steps = [interpreter.next_command(world) for _ in range(4)]
        assert [s.command for s in steps[:3]] == [L, L, L]
        assert steps[3].done
        assert steps[3].error.kind == ErrorKind.LIMIT_EXCEEDED

    def test_parse_error_instead_of_interpreter(self):
        result = create_streaming_interpreter("def my_program(self):\n  kara.fly()\n", Dialect.PYTHON)
        assert isinstance(result, KaraError)
        assert result.kind == ErrorKind.PARSE
        assert result.line == 2


class TestValidateSource:
    def test_valid(self):
        assert validate_source(DEFAULT_TEMPLATES[Dialect.RUBY], Dialect.RUBY) is None

    def test_invalid(self):
        error = validate_source("function myProgram() { kara.move(", Dialect.JAVASCRIPT)
        assert error.kind == ErrorKind.PARSE
        assert "the program ended" in error.message

    def test_deeply_nested_condition(self):
        source = "void myProgram() { while (" + "!" * 3000 + "kara.treeFront()) { kara.move(); } }"
        error = validate_source(source, Dialect.JAVA)
        assert error.kind == ErrorKind.PARSE
        assert "nested too deeply" in error.message

    def test_deeply_nested_blocks(self):
        source = "void myProgram() { " + "if (true) { " * 3000 + "kara.move();" + " }" * 3000 + " }"
        result = create_streaming_interpreter(source, Dialect.JAVA)
        assert isinstance(result, KaraError)
        assert result.reason == "too_deep"

    def test_unknown_dialect(self, world):
        error = validate_source("x", "Cobol")
        assert error.kind == ErrorKind.PARSE
        assert "'Cobol'" in error.message
        assert all(dialect.value in error.message for dialect in Dialect)
        assert extract_commands("x", "Cobol", world).error.reason == "unknown_dialect"
