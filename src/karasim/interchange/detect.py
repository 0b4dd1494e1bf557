# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Format auto-detection for imported content."""

from __future__ import annotations

from typing import Literal

from karasim.fsm.models import FSMProgram
from karasim.ids import IdGenerator
from karasim.interchange.json_format import fsm_from_json, world_from_json
from karasim.interchange.kara_format import parse_kara_file
from karasim.interchange.world_format import parse_world_file
from karasim.world.models import World

ContentFormat = Literal["xml", "json"]

WORLD_ROOT = "XmlWorld"
FSM_ROOT = "XmlStateMachines"


def detect_format(content: str, root_tag: str) -> ContentFormat:
    """``xml`` when the content opens with a declaration or the root tag."""
    trimmed = content.lstrip()
    if trimmed.startswith("<?xml") or trimmed.startswith(f"<{root_tag}"):
        return "xml"
    return "json"


def parse_world_content(content: str) -> World:
    if detect_format(content, WORLD_ROOT) == "xml":
        return parse_world_file(content)
    return world_from_json(content)


def parse_fsm_content(content: str, ids: IdGenerator | None = None) -> FSMProgram:
    if detect_format(content, FSM_ROOT) == "xml":
        return parse_kara_file(content, ids)
    return fsm_from_json(content)
