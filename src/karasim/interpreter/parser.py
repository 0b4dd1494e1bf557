# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Entry-routine extraction and recursive-descent parsers.

Only the body of the designated entry routine is parsed; class wrappers,
imports and anything else around it are ignored. All dialects share one
expression grammar:

    expr    := and ( ('||' | 'or') and )*
    and     := not ( ('&&' | 'and') not )*
    not     := ('!' | 'not') not | primary
    primary := '(' expr ')' | boolean literal | kara.SENSOR[?][()]
"""

from __future__ import annotations

from karasim.errors import ParseError
from karasim.interpreter.dialects import (
    COMMAND_NAMES,
    RECEIVER,
    SENSOR_NAMES,
    Dialect,
    available_commands,
    method_example,
)
from karasim.interpreter.lexer import Token, TokenKind, tokenize
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


def missing_entry_message(dialect: Dialect) -> str:
    return (
        f'Could not find the main program method. Please define a "{dialect.entry_name}" '
        f"method in your code.\n\nExample:\n{method_example(dialect)}"
    )


def _matches(tokens: list[Token], start: int, pattern: list[tuple[TokenKind, str | None]]) -> bool:
    if start + len(pattern) > len(tokens):
        return False
    for offset, (kind, value) in enumerate(pattern):
        token = tokens[start + offset]
        if token.kind is not kind or (value is not None and token.value != value):
            return False
    return True


def find_entry(tokens: list[Token], dialect: Dialect) -> int | None:
    """Index of the first body token of the entry routine's header.

    For brace dialects this is the opening ``{``, for PythonKara the ``:``
    and for RubyKara the first token after the method name and parameters.
    """
    name = (TokenKind.NAME, dialect.entry_name)
    lparen, rparen = (TokenKind.OP, "("), (TokenKind.OP, ")")
    for i, token in enumerate(tokens):
        match dialect:
            case Dialect.JAVA | Dialect.JAVASCRIPT:
                keyword = "void" if dialect is Dialect.JAVA else "function"
                header = [(TokenKind.NAME, keyword), name, lparen, rparen, (TokenKind.OP, "{")]
                if _matches(tokens, i, header):
                    return i + 4
            case Dialect.PYTHON:
                for header in (
                    [(TokenKind.NAME, "def"), name, lparen, (TokenKind.NAME, "self"), rparen],
                    [(TokenKind.NAME, "def"), name, lparen, rparen],
                ):
                    if _matches(tokens, i, header) and tokens[i + len(header)].is_op(":"):
                        return i + len(header)
            case Dialect.RUBY:
                if _matches(tokens, i, [(TokenKind.NAME, "def"), name]):
                    j = i + 2
                    if _matches(tokens, j, [lparen, rparen]):
                        j += 2
                    return j
    return None


class _Parser:
    """Shared cursor handling and expression grammar."""

    not_words: tuple[str, ...] = ()
    and_words: tuple[str, ...] = ()
    or_words: tuple[str, ...] = ()
    true_words: tuple[str, ...] = ("true",)
    false_words: tuple[str, ...] = ("false",)
    parens_optional = False

    def __init__(self, tokens: list[Token], pos: int, dialect: Dialect):
        self.tokens = tokens
        self.pos = pos
        self.dialect = dialect

    # cursor

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind is not TokenKind.EOF:
            self.pos += 1
        return token

    def accept_op(self, *values: str) -> Token | None:
        if self.current.is_op(*values):
            return self.advance()
        return None

    def accept_name(self, *values: str) -> Token | None:
        if self.current.is_name(*values):
            return self.advance()
        return None

    def expect_op(self, value: str, context: str) -> Token:
        token = self.accept_op(value)
        if token is None:
            raise self.error(f"Expected '{value}' {context}")
        return token

    def error(self, detail: str, token: Token | None = None) -> ParseError:
        token = token or self.current
        if token.kind is TokenKind.EOF:
            return ParseError(
                f"Syntax error: {detail}, but the program ended. {self.incomplete_hint}",
                line=token.line,
            )
        found = token.value or token.kind.value
        return ParseError(
            f"Syntax error on line {token.line}: {detail}, found '{found}'.", line=token.line
        )

    incomplete_hint = "Check that every block is closed."

    # expressions

    def parse_expr(self) -> Expr:
        line = self.current.line
        operands = [self.parse_and()]
        while self.accept_op("||") or self.accept_name(*self.or_words):
            operands.append(self.parse_and())
        return operands[0] if len(operands) == 1 else BoolOp("or", tuple(operands), line)

    def parse_and(self) -> Expr:
        line = self.current.line
        operands = [self.parse_not()]
        while self.accept_op("&&") or self.accept_name(*self.and_words):
            operands.append(self.parse_not())
        return operands[0] if len(operands) == 1 else BoolOp("and", tuple(operands), line)

    def parse_not(self) -> Expr:
        token = self.accept_op("!") or self.accept_name(*self.not_words)
        if token is not None:
            return Not(self.parse_not(), token.line)
        return self.parse_primary()

    def parse_primary(self) -> Expr:
        token = self.current
        if self.accept_op("("):
            expr = self.parse_expr()
            self.expect_op(")", "to close the parenthesis")
            return expr
        if self.accept_name(*self.true_words):
            return BoolLiteral(True, token.line)
        if self.accept_name(*self.false_words):
            return BoolLiteral(False, token.line)
        if token.is_name(RECEIVER):
            name, line = self.parse_member()
            if name in SENSOR_NAMES:
                return SensorCall(SENSOR_NAMES[name], line)
            if name in COMMAND_NAMES:
                raise ParseError(
                    f'Error on line {line}: "kara.{name}" is a command and cannot be used '
                    "as a condition.",
                    line=line,
                )
            raise self.unknown_member(name, line)
        raise self.error("Expected a sensor such as kara.treeFront()")

    def parse_member(self) -> tuple[str, int]:
        """Parse ``kara.NAME`` with its optional ``?`` and call parentheses."""
        receiver = self.advance()
        self.expect_op(".", f"after '{receiver.value}'")
        token = self.current
        if token.kind is not TokenKind.NAME:
            raise self.error("Expected a method name after 'kara.'")
        self.advance()
        if self.dialect is Dialect.RUBY:
            self.accept_op("?")
        if self.accept_op("("):
            self.expect_op(")", f"to close the call to kara.{token.value}")
        elif not self.parens_optional:
            raise self.error(f"Expected '()' after kara.{token.value}")
        return token.value, token.line

    def unknown_member(self, name: str, line: int) -> ParseError:
        return ParseError(
            f'Error on line {line}: "{name}" is not recognized. Did you spell it correctly? '
            f"Available commands: {available_commands(self.dialect)}.",
            line=line,
        )

    def parse_call_statement(self) -> Stmt:
        name, line = self.parse_member()
        if name in COMMAND_NAMES:
            return CommandCall(COMMAND_NAMES[name], line)
        if name in SENSOR_NAMES:
            return ExprStmt(SensorCall(SENSOR_NAMES[name], line), line)
        raise self.unknown_member(name, line)


class BraceParser(_Parser):
    """JavaKara and JavaScriptKara: ``{}`` blocks and optional semicolons."""

    incomplete_hint = "Check if you have matching brackets {} and parentheses ()."

    def parse_entry(self) -> list[Stmt]:
        self.expect_op("{", "to open the main program")
        return self.parse_block_body()

    def parse_block_body(self) -> list[Stmt]:
        body: list[Stmt] = []
        while not self.accept_op("}"):
            if self.current.kind is TokenKind.EOF:
                raise self.error("Expected '}'")
            body.extend(self.parse_statement())
        return body

    def parse_body(self) -> list[Stmt]:
        if self.accept_op("{"):
            return self.parse_block_body()
        return self.parse_statement()

    def parse_condition(self, keyword: str) -> Expr:
        self.expect_op("(", f"after '{keyword}'")
        expr = self.parse_expr()
        self.expect_op(")", f"to close the '{keyword}' condition")
        return expr

    def parse_statement(self) -> list[Stmt]:
        token = self.current
        if self.accept_op(";"):
            return []
        if self.accept_op("{"):
            return self.parse_block_body()
        if self.accept_name("while"):
            condition = self.parse_condition("while")
            return [While(condition, tuple(self.parse_body()), token.line)]
        if self.accept_name("do"):
            body = tuple(self.parse_body())
            if self.accept_name("while") is None:
                raise self.error("Expected 'while' after a do block")
            condition = self.parse_condition("while")
            self.accept_op(";")
            return [*body, While(condition, body, token.line)]
        if self.accept_name("if"):
            return [self.parse_if(token)]
        if token.is_name(RECEIVER):
            statement = self.parse_call_statement()
            self.accept_op(";")
            return [statement]
        raise self.error("Expected a statement")

    def parse_if(self, token: Token) -> If:
        branches = [(self.parse_condition("if"), tuple(self.parse_body()))]
        orelse: tuple[Stmt, ...] = ()
        while self.accept_name("else"):
            if self.accept_name("if"):
                branches.append((self.parse_condition("if"), tuple(self.parse_body())))
                continue
            orelse = tuple(self.parse_body())
            break
        return If(tuple(branches), orelse, token.line)


class PythonParser(_Parser):
    """PythonKara: indentation blocks delimited by INDENT/DEDENT tokens."""

    not_words = ("not",)
    and_words = ("and",)
    or_words = ("or",)
    true_words = ("True",)
    false_words = ("False",)
    incomplete_hint = "Check the indentation of your blocks."

    def parse_entry(self) -> list[Stmt]:
        self.expect_op(":", "after the method definition")
        return self.parse_suite()

    def parse_suite(self) -> list[Stmt]:
        if self.current.kind is not TokenKind.NEWLINE:
            return self.parse_simple_statements()
        self.advance()
        if self.current.kind is not TokenKind.INDENT:
            raise self.error("Expected an indented block")
        self.advance()
        body: list[Stmt] = []
        while self.current.kind is not TokenKind.DEDENT:
            if self.current.kind is TokenKind.EOF:
                break
            body.extend(self.parse_statement())
        self.advance()
        return body

    def parse_simple_statements(self) -> list[Stmt]:
        body: list[Stmt] = []
        while True:
            body.extend(self.parse_simple())
            if not self.accept_op(";") or self.current.kind is TokenKind.NEWLINE:
                break
        if self.current.kind is not TokenKind.NEWLINE:
            raise self.error("Expected the end of the line")
        self.advance()
        return body

    def parse_simple(self) -> list[Stmt]:
        if self.accept_name("pass"):
            return []
        if self.current.is_name(RECEIVER):
            return [self.parse_call_statement()]
        raise self.error("Expected a statement")

    def parse_block_header(self, keyword: str) -> Expr:
        expr = self.parse_expr()
        self.expect_op(":", f"after the '{keyword}' condition")
        return expr

    def parse_statement(self) -> list[Stmt]:
        token = self.current
        if self.accept_name("while"):
            condition = self.parse_block_header("while")
            return [While(condition, tuple(self.parse_suite()), token.line)]
        if self.accept_name("if"):
            branches = [(self.parse_block_header("if"), tuple(self.parse_suite()))]
            orelse: tuple[Stmt, ...] = ()
            while self.accept_name("elif"):
                branches.append((self.parse_block_header("elif"), tuple(self.parse_suite())))
            if self.accept_name("else"):
                self.expect_op(":", "after 'else'")
                orelse = tuple(self.parse_suite())
            return [If(tuple(branches), orelse, token.line)]
        return self.parse_simple_statements()


class RubyParser(_Parser):
    """RubyKara: ``end``-terminated blocks, optional parentheses."""

    not_words = ("not",)
    and_words = ("and",)
    or_words = ("or",)
    parens_optional = True
    incomplete_hint = "Check that every block has a matching 'end'."

    _terminators = ("end", "else", "elsif")

    def skip_separators(self) -> None:
        while self.current.kind is TokenKind.NEWLINE or self.current.is_op(";"):
            self.advance()

    def parse_entry(self) -> list[Stmt]:
        return self.parse_body_until_end()

    def parse_body(self) -> list[Stmt]:
        body: list[Stmt] = []
        self.skip_separators()
        while not self.current.is_name(*self._terminators):
            if self.current.kind is TokenKind.EOF:
                raise self.error("Expected 'end'")
            body.extend(self.parse_statement())
            self.skip_separators()
        return body

    def parse_body_until_end(self) -> list[Stmt]:
        body = self.parse_body()
        if self.accept_name("end") is None:
            raise self.error("Expected 'end'")
        return body

    def parse_statement(self) -> list[Stmt]:
        token = self.current
        if self.accept_name("while", "until"):
            condition = self.parse_expr()
            if token.value == "until":
                condition = Not(condition, token.line)
            self.accept_name("do")
            return [While(condition, tuple(self.parse_body_until_end()), token.line)]
        if self.accept_name("loop"):
            if self.accept_name("do") is None:
                raise self.error("Expected 'do' after 'loop'")
            forever = BoolLiteral(True, token.line)
            return [While(forever, tuple(self.parse_body_until_end()), token.line)]
        if self.accept_name("if", "unless"):
            return [self.parse_if(token)]
        if token.is_name(RECEIVER):
            return [self.parse_modifiers(self.parse_call_statement())]
        raise self.error("Expected a statement")

    def parse_if(self, token: Token) -> If:
        condition = self.parse_expr()
        if token.value == "unless":
            condition = Not(condition, token.line)
        self.accept_name("then")
        branches = [(condition, tuple(self.parse_body()))]
        orelse: tuple[Stmt, ...] = ()
        while self.accept_name("elsif"):
            elsif_condition = self.parse_expr()
            self.accept_name("then")
            branches.append((elsif_condition, tuple(self.parse_body())))
        if self.accept_name("else"):
            orelse = tuple(self.parse_body())
        if self.accept_name("end") is None:
            raise self.error("Expected 'end'")
        return If(tuple(branches), orelse, token.line)

    def parse_modifiers(self, statement: Stmt) -> Stmt:
        """Trailing ``if``/``unless``/``while``/``until`` modifiers."""
        while self.current.is_name("if", "unless", "while", "until"):
            keyword = self.advance()
            condition = self.parse_expr()
            if keyword.value in ("unless", "until"):
                condition = Not(condition, keyword.line)
            if keyword.value in ("if", "unless"):
                statement = If(((condition, (statement,)),), (), keyword.line)
            else:
                statement = While(condition, (statement,), keyword.line)
        return statement


_PARSERS: dict[Dialect, type[BraceParser | PythonParser | RubyParser]] = {
    Dialect.JAVA: BraceParser,
    Dialect.JAVASCRIPT: BraceParser,
    Dialect.PYTHON: PythonParser,
    Dialect.RUBY: RubyParser,
}


def parse_program(source: str, dialect: Dialect | str) -> Program:
    """Parse the entry routine of ``source`` into a syntax tree.

    Raises:
        ParseError: Unknown dialect, missing entry routine or malformed body
    """
    try:
        dialect = Dialect(dialect)
    except ValueError:
        known = ", ".join(d.value for d in Dialect)
        raise ParseError(
            f"Unknown language '{dialect}'. Choose one of: {known}", reason="unknown_dialect"
        ) from None
    tokens = tokenize(source, dialect)
    start = find_entry(tokens, dialect)
    if start is None:
        raise ParseError(missing_entry_message(dialect), reason="missing_entry")
    parser = _PARSERS[dialect](tokens, start, dialect)
    body = parser.parse_entry()
    return Program(body=tuple(body), entry_line=tokens[start].line)
