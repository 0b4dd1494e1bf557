# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from karasim.fsm.editing import add_state, add_transition, create_empty_fsm, set_start_state
from karasim.fsm.models import ActionType, FSMProgram
from karasim.ids import SequentialIds
from karasim.persistence import JsonFileProgressStore, MemoryProgressStore
from karasim.settings import Settings
from karasim.world.models import Character, CellType, Direction, Position, World

if TYPE_CHECKING:
    from pathlib import Path


def _make_world(
    width: int = 5,
    height: int = 5,
    x: int = 2,
    y: int = 2,
    direction: Direction = Direction.NORTH,
    inventory: int = 0,
    cells: dict[tuple[int, int], CellType] | None = None,
) -> World:
    """World with the character placed explicitly."""
    character = Character(position=Position(x=x, y=y), direction=direction, inventory=inventory)
    return World.blank(width, height, character=character, cells=cells)


@pytest.fixture
def world() -> World:
    """Empty 5x5 world, character in the middle facing north."""
    return _make_world()


@pytest.fixture
def make_world():
    """Factory for worlds with an explicitly placed character."""
    return _make_world


@pytest.fixture
def ids() -> SequentialIds:
    """Deterministic id generator."""
    return SequentialIds()


@pytest.fixture
def move_once_program(ids: SequentialIds) -> FSMProgram:
    """Start --(any)/move--> Stop."""
    program = add_state(create_empty_fsm(), "Start", ids=ids)
    start_id = program.states[-1].id
    program = set_start_state(program, start_id)
    return add_transition(program, start_id, "stop", actions=[ActionType.MOVE], ids=ids)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment and the user's data dir."""
    return Settings(data_root=tmp_path / "data", log_level="WARNING")


@pytest.fixture
def memory_store() -> MemoryProgressStore:
    return MemoryProgressStore()


@pytest.fixture
def file_store(tmp_path: Path) -> JsonFileProgressStore:
    return JsonFileProgressStore(tmp_path / "progress.json")
