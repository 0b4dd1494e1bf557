# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Import and export of worlds, FSM programs and command lists."""

from __future__ import annotations

from karasim.interchange.detect import detect_format, parse_fsm_content, parse_world_content
from karasim.interchange.json_format import (
    commands_from_json,
    commands_to_json,
    fsm_from_json,
    fsm_to_json,
    world_from_json,
    world_to_json,
)
from karasim.interchange.kara_format import export_fsm_xml, parse_kara_file
from karasim.interchange.world_format import export_world_xml, parse_world_file

__all__ = [
    "commands_from_json",
    "commands_to_json",
    "detect_format",
    "export_fsm_xml",
    "export_world_xml",
    "fsm_from_json",
    "fsm_to_json",
    "parse_fsm_content",
    "parse_kara_file",
    "parse_world_content",
    "parse_world_file",
    "world_from_json",
    "world_to_json",
]
