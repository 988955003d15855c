"""
Tests for the expression lexer.
"""

from entrypoint_config.config.lexer import Lexer, Token, TokenType, tokenize


def test_key_value_and_marker_tokens() -> None:
    tokens = tokenize("Name:foo Address::8000 TLS")

    assert [t.type for t in tokens] == [TokenType.KEY_VALUE, TokenType.KEY_VALUE, TokenType.MARKER]
    assert (tokens[0].key, tokens[0].value) == ("Name", "foo")
    assert (tokens[1].key, tokens[1].value) == ("Address", ":8000")
    assert tokens[2].key == "TLS"
    assert tokens[2].value is None


def test_value_keeps_every_colon_after_the_first() -> None:
    (token,) = tokenize("Auth.Forward.Address:https://authserver.com/auth")

    assert token.key == "Auth.Forward.Address"
    assert token.value == "https://authserver.com/auth"
    assert token.raw == "Auth.Forward.Address:https://authserver.com/auth"


def test_empty_value() -> None:
    (token,) = tokenize("Address:")

    assert token.type == TokenType.KEY_VALUE
    assert token.value == ""


def test_whitespace_only_yields_no_tokens() -> None:
    assert tokenize("") == []
    assert tokenize(" \t\n  ") == []


def test_positions_skip_any_whitespace() -> None:
    tokens = tokenize("  Name:foo\tTLS\n")

    assert [t.position for t in tokens] == [2, 11]


def test_lexer_is_iterable() -> None:
    keys = [token.key for token in Lexer("a:1 b:2 c")]

    assert keys == ["a", "b", "c"]


def test_next_token_returns_eof_at_end() -> None:
    lexer = Lexer("Name:foo")

    assert lexer.next_token().type == TokenType.KEY_VALUE
    assert lexer.next_token().type == TokenType.EOF
    assert lexer.next_token().type == TokenType.EOF


def test_repr() -> None:
    assert repr(Token(TokenType.KEY_VALUE, "Name", "foo", 0)) == "Token(KEY_VALUE, 'Name'='foo', @0)"
    assert repr(Token(TokenType.MARKER, "TLS", None, 9)) == "Token(MARKER, 'TLS', @9)"
