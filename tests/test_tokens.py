"""Tests for the Lox scanner."""

import pytest

from lox import LexError, tokenize
from lox.tokens import (
    BANG_EQUAL,
    CLASS,
    DOT,
    EOF,
    EQUAL,
    EQUAL_EQUAL,
    IDENTIFIER,
    LESS,
    LESS_EQUAL,
    NUMBER,
    SEMICOLON,
    STRING,
)


def _types(source: str) -> list[str]:
    return [t.type for t in tokenize(source)]


def test_single_characters_keep_their_lexemes():
    source = "=+(){},;"
    tokens = tokenize(source)
    assert [t.lexeme for t in tokens[:-1]] == list(source)
    assert tokens[-1].type == EOF


def test_two_character_operators_win():
    assert _types("!= == <= <") == [BANG_EQUAL, EQUAL_EQUAL, LESS_EQUAL, LESS, EOF]
    assert _types("= =") == [EQUAL, EQUAL, EOF]


def test_number_literals_are_floats():
    tok = tokenize("45.67")[0]
    assert tok.type == NUMBER
    assert tok.literal == 45.67
    assert isinstance(tokenize("12")[0].literal, float)


def test_trailing_dot_is_not_part_of_number():
    tokens = tokenize("123.")
    assert [t.type for t in tokens] == [NUMBER, DOT, EOF]
    assert tokens[0].lexeme == "123"


def test_string_literal_drops_quotes():
    tok = tokenize('"hello world"')[0]
    assert tok.type == STRING
    assert tok.lexeme == '"hello world"'
    assert tok.literal == "hello world"


def test_multiline_string_takes_start_line():
    tokens = tokenize('"a\nb"; x')
    assert tokens[0].line == 1
    assert tokens[0].literal == "a\nb"
    assert tokens[2].line == 2


def test_keywords_and_identifiers():
    tokens = tokenize("class classy _under")
    assert [t.type for t in tokens] == [CLASS, IDENTIFIER, IDENTIFIER, EOF]


def test_comments_are_skipped_and_lines_counted():
    tokens = tokenize("// line\n/* block\n\n */ x;")
    assert [t.type for t in tokens] == [IDENTIFIER, SEMICOLON, EOF]
    assert tokens[0].line == 4


def test_block_comments_do_not_nest():
    tokens = tokenize("/* outer /* inner */ x")
    assert tokens[0].type == IDENTIFIER


def test_every_bad_character_is_reported():
    errors = []
    tokens = tokenize("@ x\n#", errors)
    assert [e.msg for e in errors] == ["Unexpected character.", "Unexpected character."]
    assert [e.line for e in errors] == [1, 2]
    assert [t.type for t in tokens] == [IDENTIFIER, EOF]


def test_unterminated_string_reports_last_line():
    errors = []
    tokens = tokenize('"open\nstill open', errors)
    assert len(errors) == 1
    assert errors[0].msg == "Unterminated string."
    assert errors[0].line == 2
    assert tokens[-1].type == EOF


def test_unterminated_comment():
    errors = []
    tokenize("/* forever", errors)
    assert errors[0].msg == "Unterminated comment."


def test_without_error_list_first_error_raises():
    with pytest.raises(LexError) as exc:
        tokenize("var a = ~;")
    assert exc.value.format() == "[line 1] Error: Unexpected character."


def test_tokens_are_read_only():
    tok = tokenize("var")[0]
    with pytest.raises(AttributeError):
        tok.line = 2
    with pytest.raises(AttributeError):
        tok.lexeme = "val"
    assert tok.lexeme == "var"
    assert tok.line == 1
