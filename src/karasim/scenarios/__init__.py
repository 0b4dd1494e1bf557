# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Levels with goals, and progress through them."""

from __future__ import annotations

from karasim.scenarios.goals import (
    AllOf,
    CollectAllClovers,
    CollectCloversAndReturn,
    Facing,
    GoalCondition,
    InventoryEquals,
    PlaceCloverAt,
    ReachPosition,
)
from karasim.scenarios.models import (
    Scenario,
    ScenarioCatalog,
    builtin_scenarios,
    get_scenario,
    load_scenarios,
)
from karasim.scenarios.progress import ScenarioProgress, record_completion, stars_for

__all__ = [
    "AllOf",
    "CollectAllClovers",
    "CollectCloversAndReturn",
    "Facing",
    "GoalCondition",
    "InventoryEquals",
    "PlaceCloverAt",
    "ReachPosition",
    "Scenario",
    "ScenarioCatalog",
    "ScenarioProgress",
    "builtin_scenarios",
    "get_scenario",
    "load_scenarios",
    "record_completion",
    "stars_for",
]
