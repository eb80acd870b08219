"""
Expression Parser.

Grammar:
    expression := term ( "+" term )*
    term       := literal | path | "(" expression ")"
    path       := IDENT ( "." ( IDENT | INDEX ) )*
    literal    := STRING | NUMBER | "true" | "false" | "null"

There is no assignment, branching or looping. Strings use single or double
quotes with backslash escapes. A numeric segment directly after a dot is a
list index, so ``items.0.name`` reads the first element of ``items``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Union

from pipeline_dispatcher.caching.expression_cache import ExpressionCache, default_cache
from pipeline_dispatcher.expression.ast import (
    BinaryOp,
    Expression,
    FieldPath,
    LiteralValue,
    Node,
)
from pipeline_dispatcher.expression.errors import ParseError

_NUMBER = re.compile(r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_INDEX = re.compile(r"\d+")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_\-]*")

_KEYWORDS = {"true": True, "false": False, "null": None}

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "0": "\0",
}


@dataclass(frozen=True)
class Token:
    kind: str
    value: Union[str, int, float, None]
    position: int


class Lexer:
    """Turns expression source into a token list."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            self._skip_whitespace()
            if self.pos >= len(self.source):
                tokens.append(Token("EOF", None, self.pos))
                return tokens

            ch = self.source[self.pos]
            start = self.pos
            after_dot = bool(tokens) and tokens[-1].kind == "DOT"

            if ch in "\"'":
                tokens.append(Token("STRING", self._read_string(ch), start))
            elif ch.isdigit():
                pattern = _INDEX if after_dot else _NUMBER
                match = pattern.match(self.source, self.pos)
                text = match.group(0)
                self.pos = match.end()
                if after_dot:
                    tokens.append(Token("INDEX", int(text), start))
                elif any(c in text for c in ".eE"):
                    tokens.append(Token("NUMBER", float(text), start))
                else:
                    tokens.append(Token("NUMBER", int(text), start))
            elif ch == "_" or ch.isalpha():
                match = _IDENT.match(self.source, self.pos)
                self.pos = match.end()
                tokens.append(Token("IDENT", match.group(0), start))
            elif ch == ".":
                self.pos += 1
                tokens.append(Token("DOT", ".", start))
            elif ch == "+":
                self.pos += 1
                tokens.append(Token("PLUS", "+", start))
            elif ch == "(":
                self.pos += 1
                tokens.append(Token("LPAREN", "(", start))
            elif ch == ")":
                self.pos += 1
                tokens.append(Token("RPAREN", ")", start))
            else:
                raise ParseError(f"Unexpected character {ch!r}", self.source, start)

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos].isspace():
            self.pos += 1

    def _read_string(self, quote: str) -> str:
        start = self.pos
        self.pos += 1
        chars: List[str] = []
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(chars)
            if ch == "\\":
                if self.pos + 1 >= len(self.source):
                    break
                escaped = self.source[self.pos + 1]
                if escaped not in _ESCAPES:
                    raise ParseError(
                        f"Unknown escape sequence \\{escaped}", self.source, self.pos
                    )
                chars.append(_ESCAPES[escaped])
                self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1
        raise ParseError("Unterminated string literal", self.source, start)


class Parser:
    """Recursive-descent parser producing an Expression."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens = Lexer(source).tokenize()
        self.index = 0

    def parse(self) -> Expression:
        if self._peek().kind == "EOF":
            raise ParseError("Empty expression", self.source, 0)
        root = self._expression()
        token = self._peek()
        if token.kind != "EOF":
            raise ParseError(f"Unexpected token {token.value!r}", self.source, token.position)
        return Expression(source=self.source, root=root)

    def _expression(self) -> Node:
        node = self._term()
        while self._peek().kind == "PLUS":
            self._advance()
            node = BinaryOp("+", node, self._term())
        return node

    def _term(self) -> Node:
        token = self._advance()
        if token.kind in ("STRING", "NUMBER"):
            return LiteralValue(token.value)
        if token.kind == "IDENT":
            if token.value in _KEYWORDS:
                return LiteralValue(_KEYWORDS[token.value])
            return self._path(token)
        if token.kind == "LPAREN":
            node = self._expression()
            self._expect("RPAREN")
            return node
        if token.kind == "EOF":
            raise ParseError("Unexpected end of expression", self.source, token.position)
        raise ParseError(f"Unexpected token {token.value!r}", self.source, token.position)

    def _path(self, first: Token) -> FieldPath:
        segments: List[Union[str, int]] = [first.value]
        while self._peek().kind == "DOT":
            self._advance()
            token = self._advance()
            if token.kind not in ("IDENT", "INDEX"):
                raise ParseError("Expected field name after '.'", self.source, token.position)
            segments.append(token.value)
        return FieldPath(tuple(segments))

    def _expect(self, kind: str) -> Token:
        token = self._advance()
        if token.kind != kind:
            raise ParseError(f"Expected {kind}", self.source, token.position)
        return token

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != "EOF":
            self.index += 1
        return token


def parse_uncached(source: str) -> Expression:
    """Parse expression source without consulting any cache."""
    if not isinstance(source, str):
        raise ParseError("Expression source must be a string", repr(source), 0)
    return Parser(source).parse()


def parse(source: str, cache: Optional[ExpressionCache] = None) -> Expression:
    """
    Parse expression source, sharing one tree per distinct source.

    Args:
        source: Expression text
        cache: Cache to use (defaults to the process-wide cache)

    Returns:
        Parsed Expression

    Raises:
        ParseError: If source is malformed
    """
    if cache is None:
        cache = default_cache()
    return cache.get_or_parse(source, parse_uncached)
