# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Finite state machine programs: model, editing and execution."""

from __future__ import annotations

from karasim.fsm.editing import (
    add_state,
    add_transition,
    create_empty_fsm,
    delete_state,
    delete_transition,
    move_state,
    rename_state,
    set_active_detectors,
    set_start_state,
    update_transition,
)
from karasim.fsm.executor import (
    FSMRunResult,
    FSMStepResult,
    execute_fsm_step,
    execute_fsm_to_completion,
    find_matching_transition,
    transition_matches,
    validate_fsm_program,
    validate_start_state,
)
from karasim.fsm.models import ActionType, FSMAction, FSMProgram, FSMState, FSMTransition
from karasim.fsm.phases import FSMPhaseSequencer, Phase, PhaseSnapshot

__all__ = [
    "ActionType",
    "FSMAction",
    "FSMPhaseSequencer",
    "FSMProgram",
    "FSMRunResult",
    "FSMState",
    "FSMStepResult",
    "FSMTransition",
    "Phase",
    "PhaseSnapshot",
    "add_state",
    "add_transition",
    "create_empty_fsm",
    "delete_state",
    "delete_transition",
    "execute_fsm_step",
    "execute_fsm_to_completion",
    "find_matching_transition",
    "move_state",
    "rename_state",
    "set_active_detectors",
    "set_start_state",
    "transition_matches",
    "update_transition",
    "validate_fsm_program",
    "validate_start_state",
]
