# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for interchange format detection."""

from __future__ import annotations

import pytest

from karasim.errors import ParseError
from karasim.interchange import (
    detect_format,
    export_fsm_xml,
    export_world_xml,
    fsm_to_json,
    parse_fsm_content,
    parse_world_content,
    world_to_json,
)
from karasim.interchange.detect import FSM_ROOT, WORLD_ROOT


class TestDetectFormat:
    @pytest.mark.parametrize(
        ("content", "root", "expected"),
        [
            ('<?xml version="1.0"?><XmlWorld/>', WORLD_ROOT, "xml"),
            ("\n   <XmlWorld sizex='2'/>", WORLD_ROOT, "xml"),
            ("<XmlStateMachines/>", FSM_ROOT, "xml"),
            ("<XmlWorld/>", FSM_ROOT, "json"),
            ('{"width": 3}', WORLD_ROOT, "json"),
            ("", WORLD_ROOT, "json"),
        ],
    )
    def test_detection(self, content, root, expected):
        assert detect_format(content, root) == expected


class TestParseContent:
    """Test parsing with the format picked from the content."""

    def test_world_from_either_format(self, make_world):
        world = make_world()
        assert parse_world_content(world_to_json(world)) == world
        assert parse_world_content(export_world_xml(world)) == world

    def test_fsm_from_either_format(self, move_once_program, ids):
        assert parse_fsm_content(fsm_to_json(move_once_program)) == move_once_program
        imported = parse_fsm_content(export_fsm_xml(move_once_program), ids)
        assert [s.name for s in imported.states] == ["Stop", "Start"]
        assert imported.start_state_id == "state-start-1"

    def test_unrecognized_content_fails_as_json(self):
        with pytest.raises(ParseError, match="Invalid JSON in world"):
            parse_world_content("<Other/>")
