# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""FSM execution: transition matching, single steps and full runs.

None of these functions raise for program or world problems. Every outcome is
returned as a result object whose ``error`` field carries a tagged
``KaraError`` when something went wrong.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from karasim.constants import DEFAULT_MAX_STEPS
from karasim.errors import ErrorKind, KaraError, structural_error, validation_error
from karasim.fsm.models import FSMAction, FSMProgram, FSMTransition
from karasim.guard import StepBudget
from karasim.logging import get_logger
from karasim.world.actions import apply_command, explain_blocked
from karasim.world.detectors import describe_detectors, describe_situation, evaluate_detector
from karasim.world.models import World

logger = get_logger(__name__)

STUCK_TIP = (
    'Tip: Add a transition that handles this case, or use "yes or no" (wildcard) '
    "for sensor conditions you don't care about."
)


class FSMStepResult(BaseModel):
    world: World
    next_state_id: str
    stopped: bool
    error: KaraError | None = None
    transition_id: str | None = None

    model_config = ConfigDict(frozen=True)


class FSMRunResult(BaseModel):
    world: World
    state_id: str | None
    steps: int
    stopped: bool = True
    error: KaraError | None = None

    model_config = ConfigDict(frozen=True)


def transition_matches(world: World, transition: FSMTransition) -> bool:
    """True when every non-wildcard condition equals the live reading."""
    for detector, expected in transition.detector_conditions.items():
        if expected is None:
            continue
        if evaluate_detector(world, detector) != expected:
            return False
    return True


def find_matching_transition(
    world: World, program: FSMProgram, state_id: str
) -> FSMTransition | None:
    """First transition of the state that matches, in declaration order."""
    state = program.get_state(state_id)
    if state is None or state_id == program.stop_state_id:
        return None
    for transition in state.transitions:
        if transition_matches(world, transition):
            return transition
    return None


def apply_action(world: World, action: FSMAction) -> tuple[World, KaraError | None]:
    """Apply one action; a no-op comes back with a blocked-action error."""
    new_world = apply_command(world, action.type.command)
    if new_world is world:
        error = explain_blocked(world, action.type.command)
        return world, error.model_copy(update={"action": str(action.type)})
    return new_world, None


def structural_problem(program: FSMProgram | None, state_id: str | None) -> KaraError | None:
    """Check that the program and the current state can be executed at all."""
    if not isinstance(program, FSMProgram) or not program.states:
        return structural_error(
            "The FSM program is not properly defined. Please create some states first."
        )
    if program.get_state(program.stop_state_id) is None:
        return structural_error("The FSM program has no STOP state.")
    if program.get_state(state_id) is None:
        return structural_error(
            "Cannot find the current state. This might happen if you deleted a state "
            "while the program was running. Try resetting the program.",
            state_id=state_id,
        )
    return None


def stuck_error(world: World, program: FSMProgram, state_id: str) -> KaraError:
    situation = describe_situation(world)
    return KaraError(
        kind=ErrorKind.STUCK_STATE,
        message=(
            f'Kara is stuck in state "{program.display_name(state_id)}"! '
            f"No transition matches the current situation: {situation}.\n\n{STUCK_TIP}"
        ),
        state_id=state_id,
        detectors=describe_detectors(world),
    )


def execute_fsm_step(world: World, program: FSMProgram, current_state_id: str) -> FSMStepResult:
    """Run one transition from ``current_state_id``.

    Args:
        world: World before the step
        program: Program to execute
        current_state_id: State the machine is in

    Returns:
        Step result. On a blocked action the world reflects only the actions
        that ran before the failing one.
    """
    problem = structural_problem(program, current_state_id)
    if problem is not None:
        return FSMStepResult(
            world=world, next_state_id=current_state_id, stopped=True, error=problem
        )

    if current_state_id == program.stop_state_id:
        return FSMStepResult(world=world, next_state_id=current_state_id, stopped=True)

    transition = find_matching_transition(world, program, current_state_id)
    if transition is None:
        return FSMStepResult(
            world=world,
            next_state_id=current_state_id,
            stopped=True,
            error=stuck_error(world, program, current_state_id),
        )

    new_world = world
    for action in transition.actions:
        new_world, error = apply_action(new_world, action)
        if error is not None:
            return FSMStepResult(
                world=new_world,
                next_state_id=current_state_id,
                stopped=True,
                error=error.model_copy(update={"state_id": current_state_id}),
                transition_id=transition.id,
            )

    return FSMStepResult(
        world=new_world,
        next_state_id=transition.target_state_id,
        stopped=transition.target_state_id == program.stop_state_id,
        transition_id=transition.id,
    )


def validate_fsm_program(program: FSMProgram) -> KaraError | None:
    """Check that a program is ready to run; None when it is."""
    if not isinstance(program, FSMProgram):
        return structural_problem(program, None)
    if not program.start_state_id:
        return validation_error('No start state set. Click "Set as Start" on a state to begin.')
    if program.get_state(program.start_state_id) is None:
        return validation_error("Start state not found", state_id=program.start_state_id)
    has_transitions = any(
        state.transitions for state in program.states if state.id != program.stop_state_id
    )
    if not has_transitions:
        return validation_error(
            "No transitions defined. Add at least one transition to a state."
        )
    return None


def validate_start_state(program: FSMProgram, state_id: str) -> KaraError | None:
    """Check that a run can begin in ``state_id``; None when it can."""
    if not isinstance(program, FSMProgram):
        return structural_problem(program, state_id)
    if program.get_state(state_id) is None:
        return validation_error("Start state not found", state_id=state_id)
    if state_id == program.stop_state_id:
        return validation_error("A run cannot start in the STOP state.", state_id=state_id)
    return None


def execute_fsm_to_completion(
    world: World,
    program: FSMProgram,
    state_id: str | None = None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> FSMRunResult:
    """Step until the machine stops, errors, or exhausts the step budget.

    Args:
        world: World to start from
        program: Program to run
        state_id: State to start in (defaults to the start state)
        max_steps: Maximum number of transitions

    Returns:
        Final world, the state reached and the number of transitions taken
    """
    if not isinstance(program, FSMProgram):
        return FSMRunResult(
            world=world, state_id=state_id, steps=0, error=structural_problem(program, state_id)
        )
    current = state_id if state_id is not None else program.start_state_id
    if current is None:
        return FSMRunResult(
            world=world,
            state_id=None,
            steps=0,
            error=validate_fsm_program(program),
        )

    budget = StepBudget(max_steps)
    steps = 0
    while True:
        if current == program.stop_state_id:
            return FSMRunResult(world=world, state_id=current, steps=steps)
        if not budget.charge():
            logger.warning("limit_exceeded", steps=steps, max_steps=max_steps, state_id=current)
            return FSMRunResult(world=world, state_id=current, steps=steps, error=budget.error())

        result = execute_fsm_step(world, program, current)
        world = result.world
        if result.error is not None:
            logger.info("fsm_run_halted", kind=str(result.error.kind), state_id=current)
            return FSMRunResult(world=world, state_id=current, steps=steps, error=result.error)
        steps += 1
        current = result.next_state_id
