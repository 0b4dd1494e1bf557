# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Scenario (level) definitions and loading."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from karasim.logging import get_logger
from karasim.scenarios.goals import GoalCondition
from karasim.world.actions import Command
from karasim.world.models import World
from karasim.world.templates import WorldLayout

logger = get_logger(__name__)

Difficulty = Literal["easy", "medium", "hard"]


class Scenario(BaseModel):
    id: str
    title: str
    description: str
    difficulty: Difficulty
    world: WorldLayout
    allowed_commands: list[Command]
    goal: GoalCondition
    hints: list[str] = Field(default_factory=list)

    def initial_world(self) -> World:
        return self.world.to_world()

    def is_complete(self, world: World) -> bool:
        return self.goal.check(world)

    def allows(self, commands: list[Command]) -> bool:
        """True when every command is one the scenario offers."""
        allowed = set(self.allowed_commands)
        return all(command in allowed for command in commands)


class ScenarioCatalog(BaseModel):
    scenarios: list[Scenario] = Field(default_factory=list)

    @classmethod
    def from_yaml_text(cls, text: str) -> ScenarioCatalog:
        data = yaml.safe_load(text) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> ScenarioCatalog:
        path = Path(path)
        logger.info("scenarios_loading", path=str(path))
        return cls.from_yaml_text(path.read_text())

    def get(self, scenario_id: str) -> Scenario | None:
        for scenario in self.scenarios:
            if scenario.id == scenario_id:
                return scenario
        return None


def load_scenarios(path: Path | str) -> list[Scenario]:
    return ScenarioCatalog.from_yaml(path).scenarios


_builtin: ScenarioCatalog | None = None


def builtin_catalog() -> ScenarioCatalog:
    """Levels shipped with the package, loaded once."""
    global _builtin
    if _builtin is None:
        text = resources.files("karasim.scenarios").joinpath("builtin.yaml").read_text()
        _builtin = ScenarioCatalog.from_yaml_text(text)
    return _builtin


def builtin_scenarios() -> list[Scenario]:
    return list(builtin_catalog().scenarios)


def get_scenario(scenario_id: str) -> Scenario | None:
    return builtin_catalog().get(scenario_id)
