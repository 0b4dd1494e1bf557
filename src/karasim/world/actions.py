# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Action primitives.

Every primitive is a pure function ``World -> World``. A primitive that cannot
act returns the very same object it was given; callers detect failure with an
identity check and use ``explain_blocked`` to describe it.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum

from karasim.errors import ErrorKind, KaraError
from karasim.world.models import CellType, World


class Command(StrEnum):
    MOVE_FORWARD = "MOVE_FORWARD"
    TURN_LEFT = "TURN_LEFT"
    TURN_RIGHT = "TURN_RIGHT"
    PICK_CLOVER = "PICK_CLOVER"
    PLACE_CLOVER = "PLACE_CLOVER"


def move_forward(world: World) -> World:
    """Step one cell ahead, pushing a mushroom when the cell behind it is free."""
    character = world.character
    if character.position.off_grid:
        return world
    target = character.position.step(character.direction)
    match world.cell_at(target):
        case None | CellType.TREE:
            return world
        case CellType.MUSHROOM:
            beyond = target.step(character.direction)
            if world.cell_at(beyond) != CellType.EMPTY:
                return world
            grid = world.replace_cells(
                {
                    (beyond.x, beyond.y): CellType.MUSHROOM,
                    (target.x, target.y): CellType.EMPTY,
                }
            )
            return world.model_copy(
                update={
                    "grid": grid,
                    "character": character.model_copy(update={"position": target}),
                }
            )
        case _:
            return world.model_copy(
                update={"character": character.model_copy(update={"position": target})}
            )


def turn_left(world: World) -> World:
    character = world.character
    return world.model_copy(
        update={"character": character.model_copy(update={"direction": character.direction.left})}
    )


def turn_right(world: World) -> World:
    character = world.character
    return world.model_copy(
        update={"character": character.model_copy(update={"direction": character.direction.right})}
    )


def pick_clover(world: World) -> World:
    character = world.character
    pos = character.position
    if world.cell_at(pos) != CellType.CLOVER:
        return world
    return world.model_copy(
        update={
            "grid": world.replace_cells({(pos.x, pos.y): CellType.EMPTY}),
            "character": character.model_copy(update={"inventory": character.inventory + 1}),
        }
    )


def place_clover(world: World) -> World:
    character = world.character
    pos = character.position
    if character.inventory == 0 or world.cell_at(pos) != CellType.EMPTY:
        return world
    return world.model_copy(
        update={
            "grid": world.replace_cells({(pos.x, pos.y): CellType.CLOVER}),
            "character": character.model_copy(update={"inventory": character.inventory - 1}),
        }
    )


PRIMITIVES: dict[Command, Callable[[World], World]] = {
    Command.MOVE_FORWARD: move_forward,
    Command.TURN_LEFT: turn_left,
    Command.TURN_RIGHT: turn_right,
    Command.PICK_CLOVER: pick_clover,
    Command.PLACE_CLOVER: place_clover,
}


def apply_command(world: World, command: Command) -> World:
    return PRIMITIVES[command](world)


def explain_blocked(world: World, command: Command) -> KaraError:
    """Describe why ``command`` left ``world`` unchanged.

    Args:
        world: World the command was applied to
        command: The command that had no effect

    Returns:
        A blocked-action error naming the obstacle
    """
    character = world.character
    match command:
        case Command.MOVE_FORWARD:
            ahead = world.cell_at(character.position.step(character.direction))
            if ahead is None:
                reason = "edge"
                message = "Kara cannot move forward - the edge of the world is in the way!"
            elif ahead == CellType.TREE:
                reason = "tree"
                message = "Kara cannot move forward - there's a tree blocking the way!"
            else:
                reason = "mushroom"
                message = (
                    "Kara cannot move forward - the mushroom ahead cannot be pushed any further!"
                )
            message += " Check your sensor conditions to avoid this situation."
        case Command.PICK_CLOVER:
            reason = "no_clover"
            message = (
                "Kara cannot pick up a clover - there's no clover here! "
                'Make sure the "on leaf?" condition is "yes" before picking up.'
            )
        case Command.PLACE_CLOVER if character.inventory == 0:
            reason = "inventory_empty"
            message = (
                "Kara cannot place a clover - the inventory is empty! Pick up some clovers first."
            )
        case Command.PLACE_CLOVER:
            reason = "cell_not_empty"
            message = "Kara cannot place a clover here - the cell is not empty!"
        case _:
            reason = "unknown"
            message = f"Kara cannot perform {command}."
    return KaraError(
        kind=ErrorKind.BLOCKED_ACTION,
        message=message,
        action=str(command),
        reason=reason,
    )
