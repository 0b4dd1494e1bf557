# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Grid world value types.

A ``World`` is immutable. Action primitives return the identical object when
nothing changes and otherwise build a new world that reuses every row they did
not touch.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from karasim.constants import OFF_GRID


class Direction(StrEnum):
    NORTH = "NORTH"
    EAST = "EAST"
    SOUTH = "SOUTH"
    WEST = "WEST"

    @property
    def delta(self) -> tuple[int, int]:
        """(dx, dy) of one step; y grows southwards."""
        return _DELTAS[self]

    @property
    def left(self) -> Direction:
        return _ORDER[(_ORDER.index(self) - 1) % 4]

    @property
    def right(self) -> Direction:
        return _ORDER[(_ORDER.index(self) + 1) % 4]


_ORDER = (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST)
_DELTAS = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}


class CellType(StrEnum):
    EMPTY = "EMPTY"
    TREE = "TREE"
    MUSHROOM = "MUSHROOM"
    CLOVER = "CLOVER"

    @classmethod
    def parse(cls, value: str) -> CellType:
        """Read a cell value, accepting the legacy ``WALL`` name for trees."""
        if value == "WALL":
            return cls.TREE
        return cls(value)


Grid = tuple[tuple[CellType, ...], ...]


class Position(BaseModel):
    x: int
    y: int

    model_config = ConfigDict(frozen=True)

    def step(self, direction: Direction) -> Position:
        dx, dy = direction.delta
        return Position(x=self.x + dx, y=self.y + dy)

    @property
    def off_grid(self) -> bool:
        return (self.x, self.y) == OFF_GRID


class Character(BaseModel):
    position: Position
    direction: Direction = Direction.NORTH
    inventory: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class World(BaseModel):
    """Rectangular grid plus the single character living on it."""

    width: int = Field(ge=1)
    height: int = Field(ge=1)
    grid: Grid
    character: Character

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_shape(self) -> World:
        if len(self.grid) != self.height:
            raise ValueError(f"grid has {len(self.grid)} rows, expected {self.height}")
        for y, row in enumerate(self.grid):
            if len(row) != self.width:
                raise ValueError(f"row {y} has {len(row)} cells, expected {self.width}")
        pos = self.character.position
        if not pos.off_grid and not self.in_bounds(pos.x, pos.y):
            raise ValueError(f"character position ({pos.x}, {pos.y}) is outside the grid")
        return self

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        character: Character | None = None,
        cells: Mapping[tuple[int, int], CellType] | None = None,
    ) -> World:
        """Build an all-empty world, optionally with some cells filled in.

        Points outside the grid are ignored.
        """
        rows = [[CellType.EMPTY] * width for _ in range(height)]
        for (x, y), cell in (cells or {}).items():
            if 0 <= x < width and 0 <= y < height:
                rows[y][x] = cell
        if character is None:
            character = Character(position=Position(x=width // 2, y=height // 2))
        return cls(
            width=width,
            height=height,
            grid=tuple(tuple(row) for row in rows),
            character=character,
        )

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> CellType:
        """Cell at (x, y). Callers check bounds first."""
        return self.grid[y][x]

    def cell_at(self, position: Position) -> CellType | None:
        """Cell at a position, or None outside the grid."""
        if not self.in_bounds(position.x, position.y):
            return None
        return self.grid[position.y][position.x]

    def replace_cells(self, changes: Mapping[tuple[int, int], CellType]) -> Grid:
        """New grid with the given cells replaced; untouched rows are shared."""
        rows = list(self.grid)
        by_row: dict[int, dict[int, CellType]] = {}
        for (x, y), cell in changes.items():
            by_row.setdefault(y, {})[x] = cell
        for y, updates in by_row.items():
            row = list(rows[y])
            for x, cell in updates.items():
                row[x] = cell
            rows[y] = tuple(row)
        return tuple(rows)

    def positions_of(self, cell_type: CellType) -> Iterable[tuple[int, int]]:
        for y, row in enumerate(self.grid):
            for x, cell in enumerate(row):
                if cell == cell_type:
                    yield (x, y)

    def count(self, cell_type: CellType) -> int:
        return sum(row.count(cell_type) for row in self.grid)
