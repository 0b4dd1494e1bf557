# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tokenizer for the text dialects.

Comments are dropped according to each dialect's rules. PythonKara gets
NEWLINE/INDENT/DEDENT tokens computed from the column of the first token on
each logical line; RubyKara gets NEWLINE tokens; the brace dialects get
neither. Characters the tokenizer does not recognize become single-character
OP tokens so the parser can report them with a line number.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from karasim.errors import ParseError
from karasim.interpreter.dialects import Dialect


class TokenKind(StrEnum):
    NAME = "name"
    NUMBER = "number"
    STRING = "string"
    OP = "op"
    NEWLINE = "newline"
    INDENT = "indent"
    DEDENT = "dedent"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    line: int
    col: int

    def is_op(self, *values: str) -> bool:
        return self.kind is TokenKind.OP and self.value in values

    def is_name(self, *values: str) -> bool:
        return self.kind is TokenKind.NAME and self.value in values


_COMMENTS = {
    Dialect.JAVA: r"//[^\n]*|/\*[\s\S]*?\*/",
    Dialect.JAVASCRIPT: r"//[^\n]*|/\*[\s\S]*?\*/",
    Dialect.PYTHON: r"#[^\n]*|\"\"\"[\s\S]*?\"\"\"|'''[\s\S]*?'''",
    Dialect.RUBY: r"#[^\n]*|^=begin\b[\s\S]*?^=end\b[^\n]*",
}

_TOKEN_SPEC = [
    ("SPACE", r"[ \t\r\f]+"),
    ("NL", r"\n"),
    ("COMMENT", None),
    ("NAME", r"[A-Za-z_][A-Za-z0-9_]*"),
    ("NUMBER", r"\d+(?:\.\d+)?"),
    ("STRING", r"\"(?:\\.|[^\"\\\n])*\"|'(?:\\.|[^'\\\n])*'"),
    ("OP", r"&&|\|\||==|!=|<=|>=|::|\S"),
]

_OPENERS = {"(", "[", "{"}
_CLOSERS = {")", "]", "}"}


def _compile(dialect: Dialect) -> re.Pattern[str]:
    parts = []
    for name, pattern in _TOKEN_SPEC:
        pattern = _COMMENTS[dialect] if name == "COMMENT" else pattern
        parts.append(f"(?P<{name}>{pattern})")
    return re.compile("|".join(parts), re.MULTILINE)


_PATTERNS = {dialect: _compile(dialect) for dialect in Dialect}


def scan(source: str, dialect: Dialect) -> list[Token]:
    """Raw tokens without any layout tokens."""
    tokens: list[Token] = []
    line = 1
    line_start = 0
    for match in _PATTERNS[dialect].finditer(source):
        kind = match.lastgroup
        text = match.group()
        if kind in ("NL", "COMMENT", "SPACE"):
            newlines = text.count("\n")
            if newlines:
                line += newlines
                line_start = match.start() + text.rindex("\n") + 1
            continue
        tokens.append(Token(TokenKind[kind], text, line, match.start() - line_start))
    return tokens


def _layout(tokens: list[Token], *, indentation: bool) -> list[Token]:
    out: list[Token] = []
    indents = [0]
    depth = 0
    last_line = 0
    for token in tokens:
        if depth == 0 and token.line > last_line:
            if out:
                out.append(Token(TokenKind.NEWLINE, "", last_line, 0))
            if indentation:
                if token.col > indents[-1]:
                    indents.append(token.col)
                    out.append(Token(TokenKind.INDENT, "", token.line, token.col))
                while token.col < indents[-1]:
                    indents.pop()
                    out.append(Token(TokenKind.DEDENT, "", token.line, token.col))
                if token.col != indents[-1]:
                    raise ParseError("Inconsistent indentation.", line=token.line)
        if token.kind is TokenKind.OP:
            if token.value in _OPENERS:
                depth += 1
            elif token.value in _CLOSERS and depth > 0:
                depth -= 1
        out.append(token)
        last_line = token.line

    if out:
        out.append(Token(TokenKind.NEWLINE, "", last_line, 0))
    for _ in indents[1:]:
        out.append(Token(TokenKind.DEDENT, "", last_line + 1, 0))
    return out


def tokenize(source: str, dialect: Dialect) -> list[Token]:
    """Tokenize source text, ending with an EOF token.

    Raises:
        ParseError: PythonKara source whose indentation does not line up
    """
    tokens = scan(source, dialect)
    if dialect is Dialect.PYTHON:
        tokens = _layout(tokens, indentation=True)
    elif dialect is Dialect.RUBY:
        tokens = _layout(tokens, indentation=False)
    last_line = tokens[-1].line if tokens else 1
    tokens.append(Token(TokenKind.EOF, "", last_line, 0))
    return tokens
