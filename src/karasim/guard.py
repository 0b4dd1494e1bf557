# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Deterministic loop and limit guards.

Runs are bounded by counting units of work (FSM transitions, interpreter
commands, idle loop iterations) rather than by wall-clock time, so a run that
trips the guard trips it at the same point every time.
"""

from __future__ import annotations

from karasim.constants import DEFAULT_MAX_STEPS
from karasim.errors import KaraError, limit_exceeded_error


class StepBudget:
    """Counts units of work against an optional maximum.

    A maximum of ``None`` disables the limit.
    """

    def __init__(self, max_steps: int | None = DEFAULT_MAX_STEPS, what: str = "steps"):
        """Initialize the budget.

        Args:
            max_steps: Number of units allowed before the budget is exhausted
            what: Unit name used in the limit error message
        """
        if max_steps is not None and max_steps < 0:
            raise ValueError("max_steps must be non-negative")
        self.max_steps = max_steps
        self.what = what
        self.count = 0

    def charge(self, units: int = 1) -> bool:
        """Record work and report whether the budget still holds.

        Returns:
            True while the count is within the maximum, False once exceeded
        """
        self.count += units
        return not self.exhausted

    @property
    def exhausted(self) -> bool:
        return self.max_steps is not None and self.count > self.max_steps

    @property
    def remaining(self) -> int | None:
        if self.max_steps is None:
            return None
        return max(0, self.max_steps - self.count)

    def error(self) -> KaraError:
        return limit_exceeded_error(self.max_steps or 0, self.what)

    def reset(self) -> None:
        self.count = 0
