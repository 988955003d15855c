"""
Flattener for entry point expressions.

Turns the lexer's tokens into a FlatConfig: a mapping from canonical key
(lower-cased, dots replaced by underscores) to the raw string value.
"""

from ..const import CANONICAL_SEPARATOR, PATH_SEPARATOR, TLS_ACME_KEY, TLS_ACME_VALUE, TLS_MARKER
from ..logging import get_logger
from .lexer import Lexer, Token, TokenType


logger = get_logger("config.parser")


def canonicalize_key(key: str) -> str:
    """
    Canonical form of a dotted key path.

        Redirect.EntryPoint -> redirect_entrypoint
        REDIRECT.ENTRYPOINT -> redirect_entrypoint
    """
    return key.lower().replace(PATH_SEPARATOR, CANONICAL_SEPARATOR)


class FlatConfig(dict[str, str]):
    """
    Canonical key -> raw value mapping produced from one expression.

    Compares equal to a plain dict with the same items.
    """

    def __init__(self, *args, expression: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.expression = expression

    def get_value(self, key: str, default: str | None = None) -> str | None:
        """Get raw value for a canonical key."""
        return self.get(key, default)

    def has_prefix(self, prefix: str) -> bool:
        """Check if any canonical key starts with ``prefix``."""
        return any(key.startswith(prefix) for key in self)


class ExpressionParser:
    """
    Builds a FlatConfig from a single expression.

    Grammar:
        expr    := token (WS token)*
        token   := bare_key | key ':' value
    """

    def __init__(self, source: str):
        self.source = source
        self.lexer = Lexer(source)

    def _entry(self, token: Token) -> tuple[str, str]:
        """Canonical key and value stored for a token."""
        if token.type == TokenType.KEY_VALUE:
            return canonicalize_key(token.key), token.value or ""

        canonical = canonicalize_key(token.key)
        if canonical == TLS_MARKER:
            return TLS_ACME_KEY, TLS_ACME_VALUE
        return canonical, ""

    def parse(self) -> FlatConfig:
        """Parse the entire expression."""
        flat = FlatConfig(expression=self.source)

        for token in self.lexer.tokenize():
            key, value = self._entry(token)
            if key in flat:
                logger.debug(f"Key '{key}' repeated at offset {token.position}, last value wins")
            flat[key] = value

        return flat


def flatten(expression: str) -> FlatConfig:
    """
    Convenience function to flatten an expression.

    Args:
        expression: Entry point expression

    Returns:
        FlatConfig with canonical keys
    """
    return ExpressionParser(expression).parse()

