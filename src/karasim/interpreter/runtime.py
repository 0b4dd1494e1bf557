# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Public entry points of the mini-language interpreter.

Two ways to run a program:

- ``extract_commands`` runs it eagerly against a simulated copy of the world
  and returns the full command sequence (used for "skip to end").
- ``create_streaming_interpreter`` returns a resumable interpreter that hands
  out one command per ``next_command`` call, reading sensors from whatever
  world the caller passes in. Infinite loops can be stepped this way.

Nothing here raises for bad source or runtime trouble; errors come back as
``KaraError`` values.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from karasim.constants import DEFAULT_MAX_IDLE_ITERATIONS, DEFAULT_MAX_STEPS
from karasim.errors import ErrorKind, KaraError, KaraException, ParseError
from karasim.guard import StepBudget
from karasim.interpreter.dialects import Dialect
from karasim.interpreter.evaluator import Evaluator
from karasim.interpreter.nodes import Program
from karasim.interpreter.parser import parse_program
from karasim.logging import get_logger
from karasim.world.actions import Command, apply_command, explain_blocked
from karasim.world.detectors import Detector, evaluate_detector
from karasim.world.models import World

logger = get_logger(__name__)


class ExtractionResult(BaseModel):
    commands: list[Command] = Field(default_factory=list)
    world: World
    error: KaraError | None = None

    model_config = ConfigDict(frozen=True)


class NextCommand(BaseModel):
    command: Command | None = None
    done: bool = False
    error: KaraError | None = None

    model_config = ConfigDict(frozen=True)


def compile_program(source: str, dialect: Dialect | str) -> Program:
    """Parse source into a syntax tree.

    Raises:
        ParseError: Missing entry routine, malformed syntax or nesting
            too deep to parse
    """
    try:
        return parse_program(source, dialect)
    except RecursionError:
        raise ParseError(
            "Error: Your program is nested too deeply to parse.", reason="too_deep"
        ) from None


def validate_source(source: str, dialect: Dialect | str) -> KaraError | None:
    """Check that the entry routine exists and parses; None when it does."""
    try:
        compile_program(source, dialect)
    except ParseError as exc:
        return exc.to_error()
    return None


class StreamingInterpreter:
    """Resumable interpreter for one run of one program."""

    def __init__(
        self,
        program: Program,
        dialect: Dialect | str = Dialect.JAVA,
        max_steps: int | None = None,
        max_idle_iterations: int = DEFAULT_MAX_IDLE_ITERATIONS,
    ):
        self.program = program
        self.dialect = Dialect(dialect)
        self.budget = StepBudget(max_steps)
        self.done = False
        self.error: KaraError | None = None
        self._world: World | None = None
        self._commands = Evaluator(program, self._sense, max_idle_iterations).run()

    @property
    def commands_emitted(self) -> int:
        return self.budget.count

    def _sense(self, detector: Detector) -> bool:
        return evaluate_detector(self._world, detector)

    def _halt(self, error: KaraError | None = None) -> NextCommand:
        self.done = True
        self.error = error
        self._commands.close()
        if error is not None:
            logger.info("interpreter_halted", kind=str(error.kind), message=error.message)
        return NextCommand(done=True, error=error)

    def next_command(self, world: World) -> NextCommand:
        """Resume the program until it produces its next command.

        Args:
            world: The caller's current world, with every earlier command applied

        Returns:
            The next command, or ``done`` with an optional error
        """
        if self.done:
            return NextCommand(done=True, error=self.error)
        self._world = world
        try:
            command = next(self._commands)
        except StopIteration:
            return self._halt()
        except KaraException as exc:
            return self._halt(exc.to_error())
        except RecursionError:
            return self._halt(
                KaraError(
                    kind=ErrorKind.EXECUTION,
                    message="Error: Your program is nested too deeply to run.",
                )
            )
        if not self.budget.charge():
            return self._halt(self.budget.error())
        return NextCommand(command=command)


def create_streaming_interpreter(
    source: str,
    dialect: Dialect | str,
    max_steps: int | None = None,
    max_idle_iterations: int = DEFAULT_MAX_IDLE_ITERATIONS,
) -> StreamingInterpreter | KaraError:
    """Compile source into a streaming interpreter, or return the parse error."""
    try:
        program = compile_program(source, dialect)
    except ParseError as exc:
        return exc.to_error()
    return StreamingInterpreter(program, dialect, max_steps, max_idle_iterations)


def extract_commands(
    source: str,
    dialect: Dialect | str,
    world: World,
    max_steps: int = DEFAULT_MAX_STEPS,
    max_idle_iterations: int = DEFAULT_MAX_IDLE_ITERATIONS,
) -> ExtractionResult:
    """Run a program against a simulated copy of ``world``.

    Stops at the first blocked command, returning the commands that ran
    before it, or when the step budget is exhausted.
    """
    interpreter = create_streaming_interpreter(source, dialect, max_steps, max_idle_iterations)
    if isinstance(interpreter, KaraError):
        return ExtractionResult(world=world, error=interpreter)

    commands: list[Command] = []
    simulated = world
    while True:
        step = interpreter.next_command(simulated)
        if step.done:
            return ExtractionResult(commands=commands, world=simulated, error=step.error)
        new_world = apply_command(simulated, step.command)
        if new_world is simulated:
            error = explain_blocked(simulated, step.command)
            logger.info("extraction_blocked", command=str(step.command), steps=len(commands))
            return ExtractionResult(commands=commands, world=simulated, error=error)
        commands.append(step.command)
        simulated = new_world
