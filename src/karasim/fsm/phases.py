# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Phased FSM stepping for animated runs.

One logical transition is split into observable phases so a caller can render
each part of it:

    idle -> transition-matched -> executing-action (once per action)
         -> showing-arrow -> transition-matched in the next state | finished

Each call to ``advance`` moves exactly one phase. Matching and action effects
use the same helpers as ``execute_fsm_step``, so a phased run ends in the same
world as an unphased one.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from karasim.constants import DEFAULT_MAX_STEPS
from karasim.errors import KaraError
from karasim.fsm.executor import (
    apply_action,
    execute_fsm_to_completion,
    find_matching_transition,
    structural_problem,
    stuck_error,
)
from karasim.fsm.models import FSMProgram, FSMTransition
from karasim.guard import StepBudget
from karasim.logging import get_logger
from karasim.world.models import World

logger = get_logger(__name__)


class Phase(StrEnum):
    IDLE = "idle"
    TRANSITION_MATCHED = "transition-matched"
    EXECUTING_ACTION = "executing-action"
    SHOWING_ARROW = "showing-arrow"
    FINISHED = "finished"


class PhaseSnapshot(BaseModel):
    """Everything a renderer needs after one phase."""

    world: World
    phase: Phase
    state_id: str | None
    transition_id: str | None = None
    action_index: int = -1
    previous_state_id: str | None = None
    steps: int = 0
    stopped: bool = False
    error: KaraError | None = None

    model_config = ConfigDict(frozen=True)


class FSMPhaseSequencer:
    """Drives one FSM run phase by phase.

    The sequencer belongs to a single run. Start a new run with a new
    sequencer rather than reusing an old one.
    """

    def __init__(
        self,
        program: FSMProgram,
        start_state_id: str | None = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ):
        self.program = program
        self.phase = Phase.IDLE
        self.state_id = start_state_id if start_state_id is not None else program.start_state_id
        self.transition: FSMTransition | None = None
        self.action_index = -1
        self.previous_state_id: str | None = None
        self.error: KaraError | None = None
        self.budget = StepBudget(max_steps)
        self.steps = 0

    @property
    def finished(self) -> bool:
        return self.phase is Phase.FINISHED

    def snapshot(self, world: World) -> PhaseSnapshot:
        return PhaseSnapshot(
            world=world,
            phase=self.phase,
            state_id=self.state_id,
            transition_id=self.transition.id if self.transition else None,
            action_index=self.action_index,
            previous_state_id=self.previous_state_id,
            steps=self.steps,
            stopped=self.finished,
            error=self.error,
        )

    def advance(self, world: World) -> PhaseSnapshot:
        """Move one phase forward against the caller's current world."""
        match self.phase:
            case Phase.FINISHED:
                pass
            case Phase.IDLE | Phase.SHOWING_ARROW:
                self._match(world)
            case Phase.TRANSITION_MATCHED | Phase.EXECUTING_ACTION:
                world = self._next_action(world)
        return self.snapshot(world)

    def skip_to_end(self, world: World) -> PhaseSnapshot:
        """Finish the pending transition, then run to completion unphased."""
        if self.phase in (Phase.TRANSITION_MATCHED, Phase.EXECUTING_ACTION):
            while self.phase is not Phase.SHOWING_ARROW and not self.finished:
                world = self._next_action(world)
        if self.finished:
            return self.snapshot(world)

        remaining = self.budget.remaining
        run = execute_fsm_to_completion(
            world,
            self.program,
            self.state_id,
            max_steps=remaining if remaining is not None else DEFAULT_MAX_STEPS,
        )
        self.steps += run.steps
        self.budget.charge(run.steps)
        self.transition = None
        self.action_index = -1
        self.state_id = run.state_id
        self._finish(run.error)
        return self.snapshot(run.world)

    def _finish(self, error: KaraError | None = None) -> None:
        self.phase = Phase.FINISHED
        self.error = error
        if error is not None:
            logger.info("fsm_phase_halted", kind=str(error.kind), state_id=self.state_id)

    def _match(self, world: World) -> None:
        self.transition = None
        self.action_index = -1
        problem = structural_problem(self.program, self.state_id)
        if problem is not None:
            self._finish(problem)
            return
        if self.state_id == self.program.stop_state_id:
            self._finish()
            return
        transition = find_matching_transition(world, self.program, self.state_id)
        if transition is None:
            self._finish(stuck_error(world, self.program, self.state_id))
            return
        if not self.budget.charge():
            self._finish(self.budget.error())
            return
        self.steps += 1
        self.transition = transition
        self.phase = Phase.TRANSITION_MATCHED

    def _next_action(self, world: World) -> World:
        transition = self.transition
        next_index = self.action_index + 1
        if next_index >= len(transition.actions):
            self.previous_state_id = self.state_id
            self.state_id = transition.target_state_id
            self.phase = Phase.SHOWING_ARROW
            return world

        new_world, error = apply_action(world, transition.actions[next_index])
        self.action_index = next_index
        if error is not None:
            self._finish(error.model_copy(update={"state_id": self.state_id}))
            return world
        self.phase = Phase.EXECUTING_ACTION
        return new_world
