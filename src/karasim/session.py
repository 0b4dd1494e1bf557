# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tick-driven coordinator for one simulation.

A session owns the current world and at most one run. The caller decides
when to tick; nothing here sleeps or schedules.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from karasim.commands import CommandRunner
from karasim.errors import KaraError
from karasim.fsm.executor import validate_fsm_program, validate_start_state
from karasim.fsm.models import FSMProgram
from karasim.fsm.phases import FSMPhaseSequencer, Phase
from karasim.guard import StepBudget
from karasim.interpreter.dialects import Dialect
from karasim.interpreter.runtime import StreamingInterpreter, create_streaming_interpreter
from karasim.logging import get_logger
from karasim.settings import Settings
from karasim.world.actions import Command, apply_command, explain_blocked
from karasim.world.models import World

logger = get_logger(__name__)


class RunMode(StrEnum):
    COMMANDS = "commands"
    FSM = "fsm"
    CODE = "code"


class TickResult(BaseModel):
    world: World
    done: bool = False
    error: KaraError | None = None
    command: Command | None = None
    phase: Phase | None = None
    state_id: str | None = None

    model_config = ConfigDict(frozen=True)


class SimulationSession:
    """Runs command lists, FSM programs or source code against one world.

    Starting a run replaces whatever run came before it. Runs begin from the
    current world; ``reset`` goes back to the world the session was created
    with.
    """

    def __init__(self, world: World, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.initial_world = world
        self.world = world
        self.mode: RunMode | None = None
        self.done = True
        self.error: KaraError | None = None
        self._runner: CommandRunner | None = None
        self._sequencer: FSMPhaseSequencer | None = None
        self._interpreter: StreamingInterpreter | None = None

    @property
    def running(self) -> bool:
        return self.mode is not None and not self.done

    def _discard_run(self) -> None:
        self.mode = None
        self.done = True
        self.error = None
        self._runner = None
        self._sequencer = None
        self._interpreter = None

    def _begin(self, mode: RunMode) -> None:
        self._discard_run()
        self.mode = mode
        self.done = False
        logger.info("run_started", mode=str(mode))

    def _reject(self, mode: RunMode, error: KaraError) -> KaraError:
        self._discard_run()
        self.error = error
        logger.info("run_rejected", mode=str(mode), kind=str(error.kind), message=error.message)
        return error

    def start_commands(self, commands: Sequence[Command]) -> None:
        self._begin(RunMode.COMMANDS)
        self._runner = CommandRunner(commands)
        if not self._runner.commands:
            self.done = True

    def start_fsm(self, program: FSMProgram, start_state_id: str | None = None) -> KaraError | None:
        """Validate the program and prepare a phased run.

        Returns:
            The validation error, in which case no run is started
        """
        if start_state_id is None:
            error = validate_fsm_program(program)
        else:
            error = validate_start_state(program, start_state_id)
        if error is not None:
            return self._reject(RunMode.FSM, error)
        self._begin(RunMode.FSM)
        self._sequencer = FSMPhaseSequencer(
            program, start_state_id, max_steps=self.settings.max_fsm_steps
        )
        return None

    def start_code(self, source: str, dialect: Dialect | str) -> KaraError | None:
        """Compile the source and prepare a streamed run.

        Returns:
            The parse error, in which case no run is started
        """
        max_steps = self.settings.max_interpreter_steps if self.settings.limit_streaming else None
        interpreter = create_streaming_interpreter(
            source,
            dialect,
            max_steps=max_steps,
            max_idle_iterations=self.settings.max_idle_iterations,
        )
        if isinstance(interpreter, KaraError):
            return self._reject(RunMode.CODE, interpreter)
        self._begin(RunMode.CODE)
        self._interpreter = interpreter
        return None

    def _end(self, error: KaraError | None) -> None:
        self.done = True
        self.error = error
        logger.info(
            "run_finished",
            mode=str(self.mode),
            kind=str(error.kind) if error else None,
        )

    def _idle_result(self) -> TickResult:
        phase = self._sequencer.phase if self._sequencer else None
        state_id = self._sequencer.state_id if self._sequencer else None
        return TickResult(
            world=self.world, done=True, error=self.error, phase=phase, state_id=state_id
        )

    def tick(self) -> TickResult:
        """Advance the run by one atomic unit.

        One command for command lists and source code, one phase for FSM runs.
        """
        if not self.running:
            return self._idle_result()
        match self.mode:
            case RunMode.COMMANDS:
                return self._tick_commands()
            case RunMode.FSM:
                return self._tick_fsm()
            case _:
                return self._tick_code()

    def _tick_commands(self) -> TickResult:
        step = self._runner.step(self.world)
        self.world = step.world
        if step.done:
            self._end(step.error)
        return TickResult(world=self.world, done=step.done, error=step.error, command=step.command)

    def _tick_fsm(self) -> TickResult:
        snapshot = self._sequencer.advance(self.world)
        self.world = snapshot.world
        if snapshot.stopped:
            self._end(snapshot.error)
        return TickResult(
            world=self.world,
            done=snapshot.stopped,
            error=snapshot.error,
            phase=snapshot.phase,
            state_id=snapshot.state_id,
        )

    def _tick_code(self, budget: StepBudget | None = None) -> TickResult:
        step = self._interpreter.next_command(self.world)
        if step.done:
            self._end(step.error)
            return TickResult(world=self.world, done=True, error=step.error)
        if budget is not None and not budget.charge():
            self._end(budget.error())
            return TickResult(world=self.world, done=True, error=self.error)
        new_world = apply_command(self.world, step.command)
        if new_world is self.world:
            error = explain_blocked(self.world, step.command)
            self._end(error)
            return TickResult(world=self.world, done=True, error=error, command=step.command)
        self.world = new_world
        return TickResult(world=self.world, command=step.command)

    def skip_to_end(self) -> TickResult:
        """Run to completion without intermediate results."""
        if not self.running:
            return self._idle_result()
        match self.mode:
            case RunMode.COMMANDS:
                step = self._runner.skip_to_end(self.world)
                self.world = step.world
                self._end(step.error)
                return TickResult(
                    world=self.world, done=True, error=step.error, command=step.command
                )
            case RunMode.FSM:
                snapshot = self._sequencer.skip_to_end(self.world)
                self.world = snapshot.world
                self._end(snapshot.error)
                return TickResult(
                    world=self.world,
                    done=True,
                    error=snapshot.error,
                    phase=snapshot.phase,
                    state_id=snapshot.state_id,
                )
            case _:
                return self._skip_code()

    def _skip_code(self) -> TickResult:
        # A streamed program may never finish, so skipping is always bounded
        budget = StepBudget(self.settings.max_interpreter_steps, what="commands")
        result = self._tick_code(budget)
        while not result.done:
            result = self._tick_code(budget)
        return result

    def stop(self) -> TickResult:
        """End the current run where it stands, keeping the world."""
        if self.running:
            logger.info("run_stopped", mode=str(self.mode))
            self.done = True
        return self._idle_result()

    def reset(self) -> World:
        """Discard the run and restore the initial world."""
        self._discard_run()
        self.world = self.initial_world
        return self.world

    def load_world(self, world: World) -> None:
        """Replace both the current and the initial world."""
        self._discard_run()
        self.initial_world = world
        self.world = world
