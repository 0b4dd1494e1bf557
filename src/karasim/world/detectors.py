# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Boolean sensors relative to the character's heading."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum

from karasim.world.models import CellType, Direction, World


class Detector(StrEnum):
    TREE_FRONT = "treeFront"
    TREE_LEFT = "treeLeft"
    TREE_RIGHT = "treeRight"
    MUSHROOM_FRONT = "mushroomFront"
    ON_LEAF = "onLeaf"


def _neighbour(world: World, direction: Direction) -> CellType | None:
    return world.cell_at(world.character.position.step(direction))


def _tree_towards(world: World, direction: Direction) -> bool:
    # The grid edge reads as a tree
    return _neighbour(world, direction) in (None, CellType.TREE)


def tree_front(world: World) -> bool:
    return _tree_towards(world, world.character.direction)


def tree_left(world: World) -> bool:
    return _tree_towards(world, world.character.direction.left)


def tree_right(world: World) -> bool:
    return _tree_towards(world, world.character.direction.right)


def mushroom_front(world: World) -> bool:
    return _neighbour(world, world.character.direction) == CellType.MUSHROOM


def on_leaf(world: World) -> bool:
    return world.cell_at(world.character.position) == CellType.CLOVER


DETECTORS: dict[Detector, Callable[[World], bool]] = {
    Detector.TREE_FRONT: tree_front,
    Detector.TREE_LEFT: tree_left,
    Detector.TREE_RIGHT: tree_right,
    Detector.MUSHROOM_FRONT: mushroom_front,
    Detector.ON_LEAF: on_leaf,
}

PHRASES: dict[Detector, str] = {
    Detector.TREE_FRONT: "tree in front",
    Detector.TREE_LEFT: "tree to the left",
    Detector.TREE_RIGHT: "tree to the right",
    Detector.MUSHROOM_FRONT: "mushroom in front",
    Detector.ON_LEAF: "standing on a clover",
}

NOTHING_DETECTED = "no obstacles detected, not on a clover"


def evaluate_detector(world: World, detector: Detector) -> bool:
    return DETECTORS[detector](world)


def read_detectors(world: World) -> dict[Detector, bool]:
    """All five readings, in declaration order."""
    return {detector: sense(world) for detector, sense in DETECTORS.items()}


def describe_detectors(world: World) -> list[str]:
    """Human phrases for every detector that currently reads true."""
    return [PHRASES[detector] for detector, value in read_detectors(world).items() if value]


def describe_situation(world: World) -> str:
    phrases = describe_detectors(world)
    return ", ".join(phrases) if phrases else NOTHING_DETECTED
