"""
Entry point expression parsing and schema mapping.
"""

from .lexer import Lexer, Token, TokenType
from .loader import ConfigError, ConfigLoader
from .parser import ExpressionParser, FlatConfig, flatten
from .schema import EntryPoints, ListenerConfig, ListenerKey, MissingFieldError, build_entrypoint, is_true

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "ExpressionParser",
    "FlatConfig",
    "flatten",
    "ListenerKey",
    "ListenerConfig",
    "EntryPoints",
    "MissingFieldError",
    "build_entrypoint",
    "is_true",
    "ConfigError",
    "ConfigLoader",
]
