# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared constants for karasim."""

from __future__ import annotations

# Loop/limit guard default for FSM runs and interpreter extraction
DEFAULT_MAX_STEPS = 10_000

# Consecutive loop iterations allowed without a primitive command
DEFAULT_MAX_IDLE_ITERATIONS = 10_000

# Character position meaning "not on the grid"
OFF_GRID = (-1, -1)

# Interchange format markers
KARAX_VERSION = "KaraX 1.0 kara"
KARA_ACTOR = "Kara"
STOP_STATE_ID = "stop"
STOP_STATE_NAME = "Stop"

# Default sizes used by world templates
DEFAULT_WORLD_WIDTH = 8
DEFAULT_WORLD_HEIGHT = 6
