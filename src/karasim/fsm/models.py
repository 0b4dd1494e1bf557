# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Finite state machine program model.

Field names serialize in camelCase (``startStateId``, ``detectorConditions``)
so saved programs stay readable by the legacy web editor.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from karasim.constants import STOP_STATE_ID
from karasim.world.actions import Command
from karasim.world.detectors import Detector


class ActionType(StrEnum):
    MOVE = "move"
    TURN_LEFT = "turnLeft"
    TURN_RIGHT = "turnRight"
    PICK_CLOVER = "pickClover"
    PLACE_CLOVER = "placeClover"

    @property
    def command(self) -> Command:
        return _ACTION_COMMANDS[self]


_ACTION_COMMANDS = {
    ActionType.MOVE: Command.MOVE_FORWARD,
    ActionType.TURN_LEFT: Command.TURN_LEFT,
    ActionType.TURN_RIGHT: Command.TURN_RIGHT,
    ActionType.PICK_CLOVER: Command.PICK_CLOVER,
    ActionType.PLACE_CLOVER: Command.PLACE_CLOVER,
}


class _FSMModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FSMAction(_FSMModel):
    type: ActionType


class FSMTransition(_FSMModel):
    """Guarded edge to another state.

    A detector missing from ``detector_conditions`` is the same as ``None``:
    the transition does not care about that reading.
    """

    id: str
    target_state_id: str
    detector_conditions: dict[Detector, bool | None] = Field(default_factory=dict)
    actions: list[FSMAction] = Field(default_factory=list)

    def required_conditions(self) -> dict[Detector, bool]:
        return {
            detector: value
            for detector, value in self.detector_conditions.items()
            if value is not None
        }


class FSMState(_FSMModel):
    id: str
    name: str
    x: float = 0.0
    y: float = 0.0
    transitions: list[FSMTransition] = Field(default_factory=list)
    active_detectors: list[Detector] = Field(default_factory=list)


class FSMProgram(_FSMModel):
    states: list[FSMState]
    start_state_id: str | None = None
    stop_state_id: str = STOP_STATE_ID

    @model_validator(mode="after")
    def _check_stop_state(self) -> FSMProgram:
        stop = self.get_state(self.stop_state_id)
        if stop is None:
            raise ValueError(f"stop state {self.stop_state_id!r} is not among the states")
        if stop.transitions:
            raise ValueError("the stop state cannot have transitions")
        return self

    def get_state(self, state_id: str | None) -> FSMState | None:
        for state in self.states:
            if state.id == state_id:
                return state
        return None

    def state_by_name(self, name: str) -> FSMState | None:
        for state in self.states:
            if state.name == name:
                return state
        return None

    def display_name(self, state_id: str) -> str:
        """Name used in messages: ``STOP``, ``Name (Start)`` or the plain name."""
        state = self.get_state(state_id)
        if state is None:
            return f"unknown state ({state_id})"
        if state_id == self.stop_state_id:
            return "STOP"
        if state_id == self.start_state_id:
            return f"{state.name} (Start)"
        return state.name
