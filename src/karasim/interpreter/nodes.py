# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Syntax tree shared by all dialects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from karasim.world.actions import Command
from karasim.world.detectors import Detector


@dataclass(frozen=True)
class SensorCall:
    detector: Detector
    line: int


@dataclass(frozen=True)
class BoolLiteral:
    value: bool
    line: int


@dataclass(frozen=True)
class Not:
    operand: Expr
    line: int


@dataclass(frozen=True)
class BoolOp:
    op: Literal["and", "or"]
    operands: tuple[Expr, ...]
    line: int


Expr = SensorCall | BoolLiteral | Not | BoolOp


@dataclass(frozen=True)
class CommandCall:
    command: Command
    line: int


@dataclass(frozen=True)
class ExprStmt:
    """A bare sensor read used as a statement; evaluated for nothing."""

    expr: Expr
    line: int


@dataclass(frozen=True)
class While:
    condition: Expr
    body: tuple[Stmt, ...]
    line: int


@dataclass(frozen=True)
class If:
    """``if``/``else if``/``else`` chain as ordered (condition, body) branches."""

    branches: tuple[tuple[Expr, tuple[Stmt, ...]], ...]
    orelse: tuple[Stmt, ...] = ()
    line: int = 0


Stmt = CommandCall | ExprStmt | While | If


@dataclass(frozen=True)
class Program:
    body: tuple[Stmt, ...]
    entry_line: int = 1
