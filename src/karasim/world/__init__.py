# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Grid world model, action primitives and detectors."""

from __future__ import annotations

from karasim.world.actions import (
    Command,
    apply_command,
    explain_blocked,
    move_forward,
    pick_clover,
    place_clover,
    turn_left,
    turn_right,
)
from karasim.world.detectors import (
    Detector,
    describe_detectors,
    describe_situation,
    evaluate_detector,
    mushroom_front,
    on_leaf,
    read_detectors,
    tree_front,
    tree_left,
    tree_right,
)
from karasim.world.models import Character, CellType, Direction, Position, World
from karasim.world.templates import (
    WorldLayout,
    create_empty_world,
    create_world,
    template_by_name,
)

__all__ = [
    "CellType",
    "Character",
    "Command",
    "Detector",
    "Direction",
    "Position",
    "World",
    "WorldLayout",
    "apply_command",
    "create_empty_world",
    "create_world",
    "describe_detectors",
    "describe_situation",
    "evaluate_detector",
    "explain_blocked",
    "move_forward",
    "mushroom_front",
    "on_leaf",
    "pick_clover",
    "place_clover",
    "read_detectors",
    "template_by_name",
    "tree_front",
    "tree_left",
    "tree_right",
    "turn_left",
    "turn_right",
]
