# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy for the simulation engine.

Execution-facing functions never raise across their API. They return a result
object carrying the (possibly unchanged) world plus an optional ``KaraError``
describing what went wrong. Import/parse helpers raise ``ParseError`` instead,
and the persistence layer raises ``StorageError``; both wrap a ``KaraError``
so callers can report them the same way.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(StrEnum):
    """Where a failure was decided."""

    STRUCTURAL = "structural"
    VALIDATION = "validation"
    BLOCKED_ACTION = "blocked_action"
    STUCK_STATE = "stuck_state"
    LIMIT_EXCEEDED = "limit_exceeded"
    PARSE = "parse"
    EXECUTION = "execution"
    STORAGE = "storage"


TERMINAL_KINDS = frozenset(
    {
        ErrorKind.BLOCKED_ACTION,
        ErrorKind.STUCK_STATE,
        ErrorKind.LIMIT_EXCEEDED,
        ErrorKind.EXECUTION,
    }
)


class KaraError(BaseModel):
    """Tagged error descriptor attached to execution results."""

    kind: ErrorKind
    message: str
    state_id: str | None = None
    action: str | None = None
    detectors: list[str] = Field(default_factory=list)
    line: int | None = None
    reason: str | None = None

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.message

    @property
    def halts_run(self) -> bool:
        """Blocked, stuck and limit errors end the current run."""
        return self.kind in TERMINAL_KINDS


def structural_error(message: str, **context: object) -> KaraError:
    return KaraError(kind=ErrorKind.STRUCTURAL, message=message, **context)


def validation_error(message: str, **context: object) -> KaraError:
    return KaraError(kind=ErrorKind.VALIDATION, message=message, **context)


def limit_exceeded_error(max_steps: int, what: str = "steps") -> KaraError:
    return KaraError(
        kind=ErrorKind.LIMIT_EXCEEDED,
        message=f"Execution limit exceeded ({max_steps} {what}). Possible infinite loop.",
        reason=what,
    )


class KaraException(Exception):
    """Base exception carrying a ``KaraError`` descriptor."""

    kind: ErrorKind = ErrorKind.EXECUTION

    def __init__(self, message: str, *, line: int | None = None, reason: str | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.reason = reason

    def to_error(self) -> KaraError:
        return KaraError(kind=self.kind, message=self.message, line=self.line, reason=self.reason)


class ParseError(KaraException):
    """Malformed mini-language source or unrecognized interchange content."""

    kind = ErrorKind.PARSE


class StorageError(KaraException):
    """Progress could not be read or written.

    ``reason`` is ``"io"`` for filesystem failures and ``"corrupt"`` for
    unreadable stored data.
    """

    kind = ErrorKind.STORAGE
