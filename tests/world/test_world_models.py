# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for world value types."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from karasim.world.models import Character, CellType, Direction, Position, World


class TestDirection:
    def test_left_and_right_are_inverse(self):
        for direction in Direction:
            assert direction.left.right == direction

    def test_order(self):
        assert Direction.NORTH.right == Direction.EAST
        assert Direction.EAST.right == Direction.SOUTH
        assert Direction.SOUTH.right == Direction.WEST
        assert Direction.WEST.right == Direction.NORTH


class TestCellType:
    def test_wall_reads_as_tree(self):
        assert CellType.parse("WALL") == CellType.TREE

    def test_unknown_value_raises(self):
        with pytest.raises(ValueError):
            CellType.parse("ROCK")


class TestWorld:
    """Test world construction and validation."""

    def test_blank_centres_character(self):
        world = World.blank(8, 6)
        assert world.character.position == Position(x=4, y=3)
        assert world.character.direction == Direction.NORTH
        assert world.character.inventory == 0

    def test_blank_ignores_cells_outside_grid(self):
        world = World.blank(3, 3, cells={(5, 5): CellType.TREE, (0, 0): CellType.TREE})
        assert world.count(CellType.TREE) == 1

    def test_rejects_ragged_grid(self):
        with pytest.raises(ValidationError):
            World(
                width=2,
                height=2,
                grid=((CellType.EMPTY, CellType.EMPTY), (CellType.EMPTY,)),
                character=Character(position=Position(x=0, y=0)),
            )

    def test_rejects_wrong_row_count(self):
        with pytest.raises(ValidationError):
            World(
                width=1,
                height=2,
                grid=((CellType.EMPTY,),),
                character=Character(position=Position(x=0, y=0)),
            )

    def test_rejects_character_outside_grid(self):
        with pytest.raises(ValidationError):
            World.blank(3, 3, character=Character(position=Position(x=3, y=0)))

    def test_accepts_off_grid_sentinel(self):
        world = World.blank(3, 3, character=Character(position=Position(x=-1, y=-1)))
        assert world.character.position.off_grid

    def test_rejects_negative_inventory(self):
        with pytest.raises(ValidationError):
            Character(position=Position(x=0, y=0), inventory=-1)

    def test_cell_at_outside_is_none(self):
        world = World.blank(3, 3)
        assert world.cell_at(Position(x=-1, y=0)) is None
        assert world.cell_at(Position(x=1, y=1)) == CellType.EMPTY

    def test_positions_of(self):
        world = World.blank(3, 2, cells={(0, 1): CellType.CLOVER, (2, 0): CellType.CLOVER})
        assert list(world.positions_of(CellType.CLOVER)) == [(2, 0), (0, 1)]

    def test_is_frozen(self):
        world = World.blank(3, 3)
        with pytest.raises(ValidationError):
            world.width = 4
