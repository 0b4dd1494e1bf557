# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Generator-based tree-walking evaluator.

``Evaluator.run`` yields one ``Command`` at a time. Between two yields the
caller may apply the command to its world; sensors are read through the
``sense`` callback at the moment a condition is evaluated, so they always see
the caller's latest world.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from karasim.constants import DEFAULT_MAX_IDLE_ITERATIONS
from karasim.errors import ErrorKind, KaraException
from karasim.guard import StepBudget
from karasim.interpreter.nodes import (
    BoolLiteral,
    BoolOp,
    CommandCall,
    Expr,
    ExprStmt,
    If,
    Not,
    Program,
    SensorCall,
    Stmt,
    While,
)
from karasim.world.actions import Command
from karasim.world.detectors import Detector


class LoopLimitExceeded(KaraException):
    """A loop kept iterating without producing any command."""

    kind = ErrorKind.LIMIT_EXCEEDED


class Evaluator:
    def __init__(
        self,
        program: Program,
        sense: Callable[[Detector], bool],
        max_idle_iterations: int = DEFAULT_MAX_IDLE_ITERATIONS,
    ):
        self.program = program
        self.sense = sense
        self.idle = StepBudget(max_idle_iterations, what="loop iterations without a command")

    def run(self) -> Iterator[Command]:
        yield from self._block(self.program.body)

    def _block(self, body: Iterable[Stmt]) -> Iterator[Command]:
        for statement in body:
            yield from self._statement(statement)

    def _statement(self, statement: Stmt) -> Iterator[Command]:
        match statement:
            case CommandCall(command=command):
                self.idle.reset()
                yield command
            case ExprStmt(expr=expr):
                self.evaluate(expr)
            case While(condition=condition, body=body):
                while self.evaluate(condition):
                    if not self.idle.charge():
                        raise LoopLimitExceeded(
                            self.idle.error().message, line=statement.line, reason="idle_loop"
                        )
                    yield from self._block(body)
            case If(branches=branches, orelse=orelse):
                for condition, body in branches:
                    if self.evaluate(condition):
                        yield from self._block(body)
                        break
                else:
                    yield from self._block(orelse)

    def evaluate(self, expr: Expr) -> bool:
        match expr:
            case SensorCall(detector=detector):
                return self.sense(detector)
            case BoolLiteral(value=value):
                return value
            case Not(operand=operand):
                return not self.evaluate(operand)
            case BoolOp(op="and", operands=operands):
                return all(self.evaluate(operand) for operand in operands)
            case BoolOp(operands=operands):
                return any(self.evaluate(operand) for operand in operands)
        raise TypeError(f"unknown expression node: {expr!r}")
