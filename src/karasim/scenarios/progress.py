# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-scenario completion records."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from karasim.ids import Clock, utc_now
from karasim.logging import get_logger

if TYPE_CHECKING:
    from karasim.persistence import ProgressStore

logger = get_logger(__name__)


class ScenarioProgress(BaseModel):
    scenario_id: str = Field(min_length=1)
    completed: bool = False
    stars: int = Field(default=0, ge=0, le=3)
    best_command_count: int | None = Field(default=None, ge=0)
    completed_at: datetime | None = None

    model_config = ConfigDict(frozen=True)


def stars_for(command_count: int) -> int:
    """Shorter solutions earn more stars."""
    if command_count <= 5:
        return 3
    if command_count <= 10:
        return 2
    return 1


def record_completion(
    store: ProgressStore,
    scenario_id: str,
    command_count: int,
    clock: Clock = utc_now,
) -> ScenarioProgress:
    """Save a completed attempt, keeping the best stars and command count.

    Args:
        store: Where progress is kept
        scenario_id: Scenario that was solved
        command_count: Number of commands the solution used
        clock: Source of the completion timestamp

    Returns:
        The progress record as stored

    Raises:
        ValueError: Empty scenario id or negative command count
        StorageError: The store could not be read or written
    """
    if not scenario_id:
        raise ValueError("scenario_id must not be empty")
    if command_count < 0:
        raise ValueError("command_count must not be negative")

    stars = stars_for(command_count)
    best = command_count
    previous = store.get(scenario_id)
    if previous is not None:
        stars = max(stars, previous.stars)
        if previous.best_command_count is not None:
            best = min(best, previous.best_command_count)

    progress = ScenarioProgress(
        scenario_id=scenario_id,
        completed=True,
        stars=stars,
        best_command_count=best,
        completed_at=clock(),
    )
    store.save(progress)
    logger.info(
        "scenario_completed",
        scenario_id=scenario_id,
        command_count=command_count,
        stars=stars,
        best_command_count=best,
    )
    return progress
