# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Editing operations on FSM programs.

Programs are immutable; every operation returns a new program. Ids come from an
injected generator so tests and imports can produce stable ids.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from karasim.constants import STOP_STATE_ID, STOP_STATE_NAME
from karasim.fsm.models import ActionType, FSMAction, FSMProgram, FSMState, FSMTransition
from karasim.ids import IdGenerator, RandomIds
from karasim.world.detectors import Detector

_default_ids = RandomIds()


def create_empty_fsm() -> FSMProgram:
    """A program holding only the STOP state, with no start state yet."""
    stop = FSMState(id=STOP_STATE_ID, name=STOP_STATE_NAME, x=300, y=100)
    return FSMProgram(states=[stop], start_state_id=None, stop_state_id=STOP_STATE_ID)


def _require_state(program: FSMProgram, state_id: str) -> FSMState:
    state = program.get_state(state_id)
    if state is None:
        raise ValueError(f"Unknown state: {state_id}")
    return state


def _replace_state(
    program: FSMProgram, state_id: str, change: Callable[[FSMState], FSMState]
) -> FSMProgram:
    _require_state(program, state_id)
    states = [change(state) if state.id == state_id else state for state in program.states]
    return program.model_copy(update={"states": states})


def add_state(
    program: FSMProgram,
    name: str,
    *,
    x: float | None = None,
    y: float | None = None,
    ids: IdGenerator = _default_ids,
) -> FSMProgram:
    """Append a new state. Without coordinates it is placed in a cascade."""
    count = len(program.states)
    state = FSMState(
        id=ids("state"),
        name=name,
        x=150 + count * 50 if x is None else x,
        y=100 + count * 20 if y is None else y,
    )
    return program.model_copy(update={"states": [*program.states, state]})


def delete_state(program: FSMProgram, state_id: str) -> FSMProgram:
    """Remove a state, every transition targeting it, and the start mark if set.

    The STOP state cannot be deleted; the program is returned unchanged.
    """
    if state_id == program.stop_state_id:
        return program
    states = [
        state.model_copy(
            update={"transitions": [t for t in state.transitions if t.target_state_id != state_id]}
        )
        for state in program.states
        if state.id != state_id
    ]
    start = None if program.start_state_id == state_id else program.start_state_id
    return program.model_copy(update={"states": states, "start_state_id": start})


def rename_state(program: FSMProgram, state_id: str, name: str) -> FSMProgram:
    return _replace_state(program, state_id, lambda s: s.model_copy(update={"name": name}))


def move_state(program: FSMProgram, state_id: str, x: float, y: float) -> FSMProgram:
    return _replace_state(program, state_id, lambda s: s.model_copy(update={"x": x, "y": y}))


def set_start_state(program: FSMProgram, state_id: str | None) -> FSMProgram:
    if state_id is not None:
        _require_state(program, state_id)
        if state_id == program.stop_state_id:
            raise ValueError("The STOP state cannot be the start state")
    return program.model_copy(update={"start_state_id": state_id})


def set_active_detectors(
    program: FSMProgram, state_id: str, detectors: Iterable[Detector]
) -> FSMProgram:
    ordered = list(dict.fromkeys(detectors))
    return _replace_state(
        program, state_id, lambda s: s.model_copy(update={"active_detectors": ordered})
    )


def _actions(actions: Iterable[ActionType | FSMAction]) -> list[FSMAction]:
    return [a if isinstance(a, FSMAction) else FSMAction(type=a) for a in actions]


def add_transition(
    program: FSMProgram,
    state_id: str,
    target_state_id: str,
    conditions: Mapping[Detector, bool | None] | None = None,
    actions: Iterable[ActionType | FSMAction] = (),
    *,
    ids: IdGenerator = _default_ids,
) -> FSMProgram:
    """Append a transition to a state; it is tried after the existing ones."""
    if state_id == program.stop_state_id:
        raise ValueError("The STOP state cannot have transitions")
    _require_state(program, target_state_id)
    transition = FSMTransition(
        id=ids("transition"),
        target_state_id=target_state_id,
        detector_conditions=dict(conditions or {}),
        actions=_actions(actions),
    )
    return _replace_state(
        program,
        state_id,
        lambda s: s.model_copy(update={"transitions": [*s.transitions, transition]}),
    )


def update_transition(
    program: FSMProgram,
    state_id: str,
    transition_id: str,
    *,
    target_state_id: str | None = None,
    conditions: Mapping[Detector, bool | None] | None = None,
    actions: Iterable[ActionType | FSMAction] | None = None,
) -> FSMProgram:
    updates: dict[str, object] = {}
    if target_state_id is not None:
        _require_state(program, target_state_id)
        updates["target_state_id"] = target_state_id
    if conditions is not None:
        updates["detector_conditions"] = dict(conditions)
    if actions is not None:
        updates["actions"] = _actions(actions)

    state = _require_state(program, state_id)
    if not any(t.id == transition_id for t in state.transitions):
        raise ValueError(f"Unknown transition: {transition_id}")
    transitions = [
        t.model_copy(update=updates) if t.id == transition_id else t for t in state.transitions
    ]
    return _replace_state(
        program, state_id, lambda s: s.model_copy(update={"transitions": transitions})
    )


def delete_transition(program: FSMProgram, state_id: str, transition_id: str) -> FSMProgram:
    return _replace_state(
        program,
        state_id,
        lambda s: s.model_copy(
            update={"transitions": [t for t in s.transitions if t.id != transition_id]}
        ),
    )
