"""Tokenizer and parser for CSS-like style expressions.

Turns a source string such as ``"0 calc(90deg - env(window-scroll-y) * 1rad) auto"``
into a tuple of ``ExpressionNode``. Top-level expressions are separated by
commas and terms within an expression by whitespace. Unlike the evaluators,
the parser raises ``ParseError`` on malformed input.
"""

from __future__ import annotations

import functools
import re

from calcstyle.errors import ParseError
from calcstyle.nodes import (
    ExpressionNode,
    FunctionNode,
    IdentNode,
    NumberNode,
    OperatorNode,
)

_TOKEN_RE = re.compile(
    r"""
    ([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)  # NUMBER
    ([A-Za-z]+|%)?                               # UNIT (attached to NUMBER)
    |([A-Za-z_][A-Za-z0-9_-]*)(\()?              # IDENT, or FUNCTION when followed by (
    |([+\-*/])                                   # OPERATOR
    |(\()                                        # LPAREN
    |(\))                                        # RPAREN
    |(,)                                         # COMMA
    |(\s+)                                       # WHITESPACE (skip)
    """,
    re.VERBOSE,
)

# A sign only belongs to a number at the start of an expression or after
# whitespace, an opening parenthesis, a comma or another operator.
_SIGN_CONTEXT = frozenset(" \t\r\n\f(,+-*/")

# Parsing and evaluation both recurse once per operand or nesting level.
MAX_TOKENS = 256


class _Token:
    __slots__ = ("kind", "value", "unit", "pos")

    def __init__(self, kind: str, value: object = None, unit: str | None = None, pos: int = 0):
        self.kind = kind
        self.value = value
        self.unit = unit
        self.pos = pos


def _tokenize(source: str) -> list[_Token]:
    """Tokenize an expression string into tokens."""
    tokens: list[_Token] = []
    pos = 0
    while pos < len(source):
        m = _TOKEN_RE.match(source, pos)
        if m is None:
            raise ParseError(f"unexpected character {source[pos]!r} at position {pos}: {source!r}")

        number = m.group(1)
        if (
            number is not None
            and number[0] in "+-"
            and pos > 0
            and source[pos - 1] not in _SIGN_CONTEXT
        ):
            # Binary operator directly after a value, e.g. "1-2".
            tokens.append(_Token("OPERATOR", number[0], pos=pos))
            pos += 1
            continue

        start, pos = pos, m.end()
        if number is not None:
            tokens.append(_Token("NUMBER", float(number), unit=m.group(2), pos=start))
        elif m.group(3) is not None:
            kind = "FUNCTION" if m.group(4) is not None else "IDENT"
            tokens.append(_Token(kind, m.group(3), pos=start))
        elif m.group(5) is not None:
            tokens.append(_Token("OPERATOR", m.group(5), pos=start))
        elif m.group(6) is not None:
            tokens.append(_Token("LPAREN", pos=start))
        elif m.group(7) is not None:
            tokens.append(_Token("RPAREN", pos=start))
        elif m.group(8) is not None:
            tokens.append(_Token("COMMA", pos=start))
        # group(9) is whitespace, skip
    if len(tokens) > MAX_TOKENS:
        raise ParseError(
            f"expression too long: {len(tokens)} tokens (limit {MAX_TOKENS}): {source[:40]!r}..."
        )
    tokens.append(_Token("EOF", pos=len(source)))
    return tokens


class _ExpressionParser:
    """Recursive descent parser over the token stream."""

    def __init__(self, tokens: list[_Token], source: str):
        self.tokens = tokens
        self.pos = 0
        self.source = source

    def _peek(self) -> _Token:
        return self.tokens[self.pos]

    def _advance(self) -> _Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _expect(self, kind: str) -> _Token:
        tok = self._advance()
        if tok.kind != kind:
            raise ParseError(
                f"expected {kind}, got {tok.kind} at position {tok.pos}: {self.source!r}"
            )
        return tok

    def parse(self) -> tuple[ExpressionNode, ...]:
        if self._peek().kind == "EOF":
            return ()
        expressions = self._expression_list()
        self._expect("EOF")
        return tuple(expressions)

    def _expression_list(self) -> list[ExpressionNode]:
        expressions = [self._expression()]
        while self._peek().kind == "COMMA":
            self._advance()
            expressions.append(self._expression())
        return expressions

    def _expression(self) -> ExpressionNode:
        terms = []
        while self._peek().kind not in ("COMMA", "RPAREN", "EOF"):
            terms.append(self._term())
        return ExpressionNode(terms=tuple(terms))

    def _term(self) -> NumberNode | IdentNode | OperatorNode | FunctionNode:
        tok = self._advance()
        if tok.kind == "NUMBER":
            return NumberNode(number=tok.value, unit=tok.unit)
        if tok.kind == "IDENT":
            return IdentNode(value=tok.value)
        if tok.kind == "OPERATOR":
            return OperatorNode(value=tok.value)
        if tok.kind == "FUNCTION":
            return self._function_call(tok)
        if tok.kind == "LPAREN":
            raise ParseError(
                f"parenthesized grouping is not supported at position {tok.pos}, "
                f"use calc() instead: {self.source!r}"
            )
        raise ParseError(f"unexpected {tok.kind} at position {tok.pos}: {self.source!r}")

    def _function_call(self, name_tok: _Token) -> FunctionNode:
        arguments: list[ExpressionNode] = []
        if self._peek().kind != "RPAREN":
            arguments = self._expression_list()
        self._expect("RPAREN")
        return FunctionNode(name=IdentNode(value=name_tok.value), arguments=tuple(arguments))


@functools.lru_cache(maxsize=256)
def parse_expressions(source: str) -> tuple[ExpressionNode, ...]:
    """Parse a style expression string.

    Args:
        source: Expression source, e.g. ``"1.5rad -30deg calc(1m + 10cm)"``.

    Returns:
        One ExpressionNode per comma-separated expression. Empty or
        whitespace-only input yields an empty tuple.

    Raises:
        ParseError: On characters outside the grammar, unbalanced
            parentheses, or parenthesized grouping outside a function call.
            Sources longer than ``MAX_TOKENS`` tokens are also rejected.
    """
    return _ExpressionParser(_tokenize(source), source).parse()
