"""
Lexer (tokenizer) for entry point expressions.

An expression is a whitespace-separated list of tokens:

    Name:foo Address::8000 TLS:cert.pem,key.pem TLS

Each token is either ``key:value`` (split on the first colon, so the value
may itself contain colons) or a bare marker key without a value.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from ..const import KEY_VALUE_SEPARATOR


class TokenType(Enum):
    """Token types of the expression syntax."""

    KEY_VALUE = auto()  # key:value
    MARKER = auto()     # bare key, no value
    EOF = auto()        # end of expression


@dataclass
class Token:
    """A single token from the lexer."""

    type: TokenType
    key: str
    value: str | None
    position: int  # offset of the token in the expression
    raw: str = ""  # original text of the token

    def __repr__(self) -> str:
        if self.type == TokenType.KEY_VALUE:
            return f"Token({self.type.name}, {self.key!r}={self.value!r}, @{self.position})"
        return f"Token({self.type.name}, {self.key!r}, @{self.position})"


class Lexer:
    """
    Tokenizer for entry point expressions.

    There is no quoting or escaping: whitespace always ends a token, and
    empty tokens never appear.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def _current(self) -> str:
        """Get current character or empty string if at end."""
        if self.pos >= len(self.source):
            return ""
        return self.source[self.pos]

    def _skip_whitespace(self) -> None:
        while self._current() and self._current().isspace():
            self.pos += 1

    def _read_word(self) -> str:
        start = self.pos
        while self._current() and not self._current().isspace():
            self.pos += 1
        return self.source[start:self.pos]

    def next_token(self) -> Token:
        """Get the next token from the source."""
        self._skip_whitespace()

        start = self.pos
        if start >= len(self.source):
            return Token(TokenType.EOF, "", None, start)

        raw = self._read_word()
        key, sep, value = raw.partition(KEY_VALUE_SEPARATOR)

        if not sep:
            return Token(TokenType.MARKER, raw, None, start, raw)

        return Token(TokenType.KEY_VALUE, key, value, start, raw)

    def tokenize(self) -> Iterator[Token]:
        """Generate all tokens from the source (EOF excluded)."""
        while True:
            token = self.next_token()
            if token.type == TokenType.EOF:
                break
            yield token

    def __iter__(self) -> Iterator[Token]:
        return self.tokenize()


def tokenize(source: str) -> list[Token]:
    """Convenience function to tokenize an expression."""
    return list(Lexer(source))
