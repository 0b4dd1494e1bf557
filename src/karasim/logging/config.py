# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""structlog setup for simulation runs.

Events go to stderr so that CLI output on stdout stays parseable.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from karasim.settings import Settings

__all__ = ["get_logger", "configure_logging", "level_number"]


def level_number(name: str) -> int:
    """Map a level name such as ``"info"`` to its number; unknown names give WARNING."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(settings: Settings | None = None) -> None:
    """Install the processor chain; call once before the first run.

    The level comes from ``settings.log_level`` (``KARASIM_LOG_LEVEL``).
    """
    if settings is None:
        from karasim.settings import Settings

        settings = Settings()

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_number(settings.log_level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)
