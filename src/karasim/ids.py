# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Injectable id generators and clocks.

Editing and import operations take one of these instead of reading the
wall clock or a random source, so the engine stays deterministic under test.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

_SLUG_RE = re.compile(r"[^a-z0-9]+")


class IdGenerator(Protocol):
    """Returns a fresh identifier for the given prefix."""

    def __call__(self, prefix: str) -> str: ...


class SequentialIds:
    """Deterministic ``prefix-N`` ids, counted per prefix."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}

    def __call__(self, prefix: str) -> str:
        count = self._counters.get(prefix, 0) + 1
        self._counters[prefix] = count
        return f"{prefix}-{count}"


class RandomIds:
    """Collision-resistant ids for interactive editors."""

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex[:12]}"


def slugify(name: str) -> str:
    """Lowercase dash-separated form of a state name, used inside ids."""
    slug = _SLUG_RE.sub("-", name.strip().lower()).strip("-")
    return slug or "state"


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)
