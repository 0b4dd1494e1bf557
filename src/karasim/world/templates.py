# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Ready-made worlds and the point-list layout used to describe them."""

from __future__ import annotations

from pydantic import BaseModel, Field

from karasim.constants import DEFAULT_WORLD_HEIGHT, DEFAULT_WORLD_WIDTH
from karasim.world.models import Character, CellType, Direction, Position, World

Point = tuple[int, int]


class CharacterLayout(BaseModel):
    x: int
    y: int
    direction: Direction = Direction.NORTH
    inventory: int = Field(default=0, ge=0)


class WorldLayout(BaseModel):
    """A world described by lists of object positions.

    This mirrors how the ``.world`` format stores worlds and is the shape
    scenario files use.
    """

    width: int = Field(ge=1)
    height: int = Field(ge=1)
    trees: list[Point] = Field(default_factory=list)
    mushrooms: list[Point] = Field(default_factory=list)
    clovers: list[Point] = Field(default_factory=list)
    character: CharacterLayout | None = None

    def to_world(self) -> World:
        cells: dict[Point, CellType] = {}
        for points, cell in (
            (self.trees, CellType.TREE),
            (self.mushrooms, CellType.MUSHROOM),
            (self.clovers, CellType.CLOVER),
        ):
            for point in points:
                cells[point] = cell
        character = None
        if self.character is not None:
            character = Character(
                position=Position(x=self.character.x, y=self.character.y),
                direction=self.character.direction,
                inventory=self.character.inventory,
            )
        return World.blank(self.width, self.height, character=character, cells=cells)

    @classmethod
    def from_world(cls, world: World) -> WorldLayout:
        char = world.character
        return cls(
            width=world.width,
            height=world.height,
            trees=list(world.positions_of(CellType.TREE)),
            mushrooms=list(world.positions_of(CellType.MUSHROOM)),
            clovers=list(world.positions_of(CellType.CLOVER)),
            character=CharacterLayout(
                x=char.position.x,
                y=char.position.y,
                direction=char.direction,
                inventory=char.inventory,
            ),
        )


def create_world(width: int, height: int) -> World:
    """Centred character facing north; larger grids get a few decorations."""
    cells: dict[Point, CellType] = {}
    if width > 5 and height > 5:
        for point in ((3, 2), (4, 2), (2, 3), (5, 3), (3, 4), (4, 4), (2, 5)):
            cells[point] = CellType.CLOVER
        cells[(1, 1)] = CellType.TREE
        cells[(width - 2, 1)] = CellType.TREE
        cells[(1, height - 2)] = CellType.MUSHROOM
    return World.blank(width, height, cells=cells)


def reset_world(world: World) -> World:
    return create_world(world.width, world.height)


def create_empty_world(
    width: int = DEFAULT_WORLD_WIDTH, height: int = DEFAULT_WORLD_HEIGHT
) -> World:
    return World.blank(width, height)


def maze_template() -> World:
    width, height = 9, 7
    trees = [(x, y) for x in range(width) for y in (0, height - 1)]
    trees += [(x, y) for y in range(1, height - 1) for x in (0, width - 1)]
    trees += [(x, y) for y in (2, 4) for x in (2, 3, 5, 6)]
    return WorldLayout(
        width=width,
        height=height,
        trees=trees,
        clovers=[(width - 2, 1)],
        character=CharacterLayout(x=1, y=1, direction=Direction.EAST),
    ).to_world()


def garden_template() -> World:
    width, height = 8, 6
    clovers = [
        (x, y) for y in range(1, height - 1) for x in range(1, width - 1) if (x + y) % 2 == 0
    ]
    # Corner trees replace the clovers underneath them
    trees = [(1, 1), (width - 2, 1), (1, height - 2), (width - 2, height - 2)]
    clovers = [point for point in clovers if point not in trees]
    return WorldLayout(
        width=width,
        height=height,
        trees=trees,
        clovers=clovers,
        character=CharacterLayout(x=width // 2, y=height // 2),
    ).to_world()


def obstacle_course_template() -> World:
    width, height = 10, 7
    return WorldLayout(
        width=width,
        height=height,
        trees=[(2, 1), (5, 1), (8, 1), (3, 3), (6, 3), (2, 5), (5, 5), (8, 5)],
        mushrooms=[(1, 2), (7, 2), (4, 4)],
        clovers=[(1, 1), (width - 2, 1), (1, height - 2), (width - 2, height - 2)],
        character=CharacterLayout(x=0, y=0, direction=Direction.EAST),
    ).to_world()


TEMPLATES = {
    "Empty Grid": create_empty_world,
    "Maze": maze_template,
    "Garden": garden_template,
    "Obstacle Course": obstacle_course_template,
}


def template_by_name(name: str) -> World:
    """Named template; unknown names give the empty grid."""
    return TEMPLATES.get(name, create_empty_world)()
