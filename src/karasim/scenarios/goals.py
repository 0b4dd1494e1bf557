# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Goal conditions for scenarios.

Goals are plain data so they can live in YAML files. The ``kind`` field picks
the condition type.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from karasim.world.models import CellType, Direction, World


class CollectAllClovers(BaseModel):
    kind: Literal["collect_all_clovers"] = "collect_all_clovers"

    @property
    def description(self) -> str:
        return "Collect all clovers from the world"

    def check(self, world: World) -> bool:
        return world.count(CellType.CLOVER) == 0


class ReachPosition(BaseModel):
    kind: Literal["reach_position"] = "reach_position"
    x: int
    y: int

    @property
    def description(self) -> str:
        return f"Reach position ({self.x}, {self.y})"

    def check(self, world: World) -> bool:
        position = world.character.position
        return (position.x, position.y) == (self.x, self.y)


class CollectCloversAndReturn(BaseModel):
    kind: Literal["collect_clovers_and_return"] = "collect_clovers_and_return"
    x: int
    y: int

    @property
    def description(self) -> str:
        return "Collect all clovers and return to start"

    def check(self, world: World) -> bool:
        position = world.character.position
        at_start = (position.x, position.y) == (self.x, self.y)
        return at_start and world.count(CellType.CLOVER) == 0


class PlaceCloverAt(BaseModel):
    kind: Literal["place_clover_at"] = "place_clover_at"
    x: int
    y: int

    @property
    def description(self) -> str:
        return f"Place a clover at position ({self.x}, {self.y})"

    def check(self, world: World) -> bool:
        return world.in_bounds(self.x, self.y) and world.cell(self.x, self.y) == CellType.CLOVER


class InventoryEquals(BaseModel):
    kind: Literal["inventory_equals"] = "inventory_equals"
    count: int = Field(ge=0)

    @property
    def description(self) -> str:
        plural = "" if self.count == 1 else "s"
        return f"Have exactly {self.count} clover{plural} in inventory"

    def check(self, world: World) -> bool:
        return world.character.inventory == self.count


class Facing(BaseModel):
    kind: Literal["facing"] = "facing"
    direction: Direction

    @property
    def description(self) -> str:
        return f"Face {self.direction.value}"

    def check(self, world: World) -> bool:
        return world.character.direction == self.direction


class AllOf(BaseModel):
    kind: Literal["all_of"] = "all_of"
    conditions: list[GoalCondition]

    @property
    def description(self) -> str:
        return " AND ".join(condition.description for condition in self.conditions)

    def check(self, world: World) -> bool:
        return all(condition.check(world) for condition in self.conditions)


GoalCondition = Annotated[
    CollectAllClovers
    | ReachPosition
    | CollectCloversAndReturn
    | PlaceCloverAt
    | InventoryEquals
    | Facing
    | AllOf,
    Field(discriminator="kind"),
]

AllOf.model_rebuild()
