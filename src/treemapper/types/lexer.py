# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for type descriptions.

Converts a type description such as ``array<string, list<int>>|null`` into a
sequence of tokens for subsequent parsing.
"""

import enum
from dataclasses import dataclass

from treemapper.errors import TypeParsingError

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the type lexer."""

    # Symbols
    LANGLE = "<"
    RANGLE = ">"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    COLON = ":"
    QUESTION = "?"
    PIPE = "|"

    # Literals
    STRING = "STRING"
    INTEGER = "INTEGER"

    # Identifiers: keywords and dotted class paths
    IDENTIFIER = "IDENTIFIER"

    # End of input
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its position in the type description.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (or decoded content for STRING tokens).
        column: 1-based column where the token starts.
    """

    type: TokenType
    value: str
    column: int


def tokenize(source: str) -> list[Token]:
    """Tokenize a type description.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        TypeParsingError: On unexpected characters or unterminated quoted keys.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "<": TokenType.LANGLE,
    ">": TokenType.RANGLE,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    "?": TokenType.QUESTION,
    "|": TokenType.PIPE,
}

_DIGITS = frozenset("0123456789")


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r\n":
                self._pos += 1
            else:
                self._scan_token()
        self._tokens.append(Token(TokenType.EOF, "", self._pos + 1))
        return self._tokens

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _scan_token(self) -> None:
        """Scan a single token starting at the current position."""
        ch = self._current()
        column = self._pos + 1

        if ch in _SINGLE_CHAR_TOKENS:
            self._pos += 1
            self._tokens.append(Token(_SINGLE_CHAR_TOKENS[ch], ch, column))
        elif ch in "'\"":
            self._scan_string(ch)
        elif ch in _DIGITS:
            start = self._pos
            while self._current() in _DIGITS:
                self._pos += 1
            self._tokens.append(Token(TokenType.INTEGER, self._source[start : self._pos], column))
        elif ch.isalpha() or ch == "_":
            self._scan_identifier()
        else:
            raise TypeParsingError(f"Unexpected character {ch!r}", column)

    def _scan_identifier(self) -> None:
        """Scan a keyword or dotted class path.

        Hyphens are allowed so that keywords like ``non-empty-list`` form a
        single token.
        """
        start = self._pos
        while True:
            ch = self._current()
            if ch and (ch.isalnum() or ch in "_.-"):
                self._pos += 1
            else:
                break
        value = self._source[start : self._pos]
        if value.endswith((".", "-")):
            raise TypeParsingError(f"Invalid identifier {value!r}", start + 1)
        self._tokens.append(Token(TokenType.IDENTIFIER, value, start + 1))

    def _scan_string(self, quote: str) -> None:
        """Scan a quoted shaped-array key, honouring backslash escapes."""
        column = self._pos + 1
        self._pos += 1
        chars: list[str] = []
        while self._pos < len(self._source):
            ch = self._current()
            if ch == "\\" and self._pos + 1 < len(self._source):
                chars.append(self._source[self._pos + 1])
                self._pos += 2
                continue
            if ch == quote:
                self._pos += 1
                self._tokens.append(Token(TokenType.STRING, "".join(chars), column))
                return
            chars.append(ch)
            self._pos += 1
        raise TypeParsingError("Unterminated quoted key", column)
