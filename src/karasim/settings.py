# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from karasim.constants import DEFAULT_MAX_IDLE_ITERATIONS, DEFAULT_MAX_STEPS
from karasim.paths import default_data_root


class Settings(BaseSettings):
    data_root: Path = Field(default_factory=default_data_root)
    log_level: str = "WARNING"
    max_fsm_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1)
    max_interpreter_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1)
    max_idle_iterations: int = Field(default=DEFAULT_MAX_IDLE_ITERATIONS, ge=1)
    # Streamed programs may loop forever by design; cap them only when asked
    limit_streaming: bool = False

    model_config = SettingsConfigDict(
        env_prefix="KARASIM_",
        env_nested_delimiter="__",
        extra="ignore",
    )
