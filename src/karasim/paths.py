# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Filesystem paths for locally stored progress."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

ENV_DATA_ROOT = "KARASIM_DATA_ROOT"
PROGRESS_FILENAME = "progress.json"


def default_data_root() -> Path:
    """Get the default data root directory."""
    env_root = os.getenv(ENV_DATA_ROOT)
    if env_root:
        return Path(env_root)
    return Path(user_data_dir("karasim", "karasim"))


def progress_path(data_root: Path) -> Path:
    """Location of the scenario progress file under a data root."""
    return data_root / PROGRESS_FILENAME
