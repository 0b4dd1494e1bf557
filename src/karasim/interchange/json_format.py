# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON mirrors of worlds, FSM programs and command lists.

The shapes match what the legacy web editor saves: grid cells are
``{"type": "TREE"}`` objects and FSM fields are camelCase.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from karasim.errors import ParseError
from karasim.fsm.models import FSMProgram
from karasim.world.actions import Command
from karasim.world.models import CellType, World

_COMMANDS = TypeAdapter(list[Command])


def _load(content: str, what: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON in {what}", line=exc.lineno, reason=exc.msg) from exc


def _validation_message(what: str, exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"Invalid {what}: {location}: {first['msg']}"
    return f"Invalid {what}: {first['msg']}"


def world_to_dict(world: World) -> dict[str, Any]:
    character = world.character
    return {
        "width": world.width,
        "height": world.height,
        "grid": [[{"type": cell.value} for cell in row] for row in world.grid],
        "character": {
            "position": {"x": character.position.x, "y": character.position.y},
            "direction": character.direction.value,
            "inventory": character.inventory,
        },
    }


def world_to_json(world: World) -> str:
    return json.dumps(world_to_dict(world), indent=2)


def _cell(raw: Any) -> CellType:
    value = raw.get("type") if isinstance(raw, dict) else raw
    if not isinstance(value, str):
        raise ParseError(f"Invalid world: unknown cell {raw!r}")
    try:
        return CellType.parse(value)
    except ValueError as exc:
        raise ParseError(f"Invalid world: unknown cell type {value!r}") from exc


def world_from_dict(data: Any) -> World:
    """Build a world from its JSON shape, accepting ``WALL`` cells as trees.

    Raises:
        ParseError: The data does not describe a valid world
    """
    if not isinstance(data, dict):
        raise ParseError("Invalid world: expected a JSON object")
    grid = data.get("grid")
    if not isinstance(grid, list) or not all(isinstance(row, list) for row in grid):
        raise ParseError("Invalid world: grid must be a list of rows")
    try:
        return World.model_validate(
            {**data, "grid": [[_cell(cell) for cell in row] for row in grid]}
        )
    except ValidationError as exc:
        raise ParseError(_validation_message("world", exc)) from exc


def world_from_json(content: str) -> World:
    return world_from_dict(_load(content, "world"))


def fsm_to_json(program: FSMProgram) -> str:
    return program.model_dump_json(by_alias=True, indent=2)


def fsm_from_dict(data: Any) -> FSMProgram:
    try:
        return FSMProgram.model_validate(data)
    except ValidationError as exc:
        raise ParseError(_validation_message("FSM program", exc)) from exc


def fsm_from_json(content: str) -> FSMProgram:
    return fsm_from_dict(_load(content, "FSM program"))


def commands_to_json(commands: list[Command]) -> str:
    return json.dumps([command.value for command in commands], indent=2)


def commands_from_json(content: str) -> list[Command]:
    data = _load(content, "command list")
    try:
        return _COMMANDS.validate_python(data)
    except ValidationError as exc:
        raise ParseError(_validation_message("command list", exc)) from exc
