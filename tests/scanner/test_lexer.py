# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the namelist lexical scanner."""

import pytest

from nmlkit.errors import LexerError
from nmlkit.scanner.lexer import Lexer, tokenize
from nmlkit.scanner.token import Token, TokenType

# ###############
# Test Helpers
# ###############


def _significant(source: str) -> list[Token]:
    """Return all tokens except whitespace and the terminal EOF."""
    result = tokenize(source)
    assert result[-1].type == TokenType.EOF
    return [tok for tok in result[:-1] if tok.type != TokenType.WHITESPACE]


def _types(source: str) -> list[TokenType]:
    return [tok.type for tok in _significant(source)]


def _values(source: str) -> list[str]:
    return [tok.value for tok in _significant(source)]


def _single(source: str) -> Token:
    """Lex a source expected to hold exactly one significant token."""
    tokens = _significant(source)
    assert len(tokens) == 1, tokens
    return tokens[0]


# ###############
# EOF and Trivia
# ###############


class TestEofAndTrivia:
    def test_empty_string_produces_only_eof(self) -> None:
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert tokens[0].value == ""
        assert (tokens[0].line, tokens[0].column) == (1, 1)

    def test_whitespace_run_is_a_single_token(self) -> None:
        tokens = tokenize("  \t\n  ")
        assert [tok.type for tok in tokens] == [TokenType.WHITESPACE, TokenType.EOF]
        assert tokens[0].value == "  \t\n  "

    def test_joined_token_values_reproduce_input(self) -> None:
        source = "&nml  ! header\n    x = 1,  2 ! tail\n    s = 'it''s'\n/\n"
        assert "".join(tok.value for tok in tokenize(source)) == source

    def test_comment_runs_to_end_of_line_without_newline(self) -> None:
        tokens = tokenize("! hello\nx")
        assert tokens[0].type == TokenType.COMMENT
        assert tokens[0].value == "! hello"
        assert tokens[1].type == TokenType.WHITESPACE
        assert tokens[1].value == "\n"

    def test_comment_stops_before_windows_line_break(self) -> None:
        tokens = tokenize("! hello\r\nx")
        assert tokens[0].value == "! hello"
        assert tokens[1].type == TokenType.WHITESPACE
        assert tokens[1].value == "\r\n"

    def test_hash_starts_a_comment_by_default(self) -> None:
        assert _types("# note") == [TokenType.COMMENT]

    def test_comment_characters_are_configurable(self) -> None:
        tokens = Lexer("# not a comment", comment_chars="!").tokenize()
        assert TokenType.COMMENT not in [tok.type for tok in tokens]
        assert tokens[0].type == TokenType.INVALID

    def test_trivia_flag(self) -> None:
        tokens = tokenize(" ! c\nx")
        assert tokens[0].is_trivia
        assert tokens[1].is_trivia
        assert not tokens[3].is_trivia


# ###############
# Punctuation
# ###############


class TestPunctuation:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("&", TokenType.GROUP_START),
            ("$", TokenType.GROUP_START_ALT),
            ("/", TokenType.GROUP_END),
            ("=", TokenType.ASSIGN),
            (",", TokenType.COMMA),
            ("(", TokenType.LPAREN),
            (")", TokenType.RPAREN),
            (":", TokenType.COLON),
            ("%", TokenType.PERCENT),
            ("*", TokenType.STAR),
            ("+", TokenType.PLUS),
            ("-", TokenType.MINUS),
        ],
    )
    def test_single_character_tokens(self, source: str, expected: TokenType) -> None:
        assert _single(source).type == expected

    def test_group_header(self) -> None:
        assert _types("&data_nml") == [TokenType.GROUP_START, TokenType.IDENTIFIER]
        assert _values("$data_nml") == ["$", "data_nml"]

    def test_group_open_flag(self) -> None:
        assert _single("&").is_group_open
        assert _single("$").is_group_open
        assert not _single("/").is_group_open

    def test_unknown_character_is_invalid_not_an_error(self) -> None:
        token = _single("@")
        assert token.type == TokenType.INVALID
        assert token.value == "@"


# ###############
# Numbers
# ###############


class TestNumbers:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("42", TokenType.INTEGER),
            ("-7", TokenType.INTEGER),
            ("+3", TokenType.INTEGER),
            ("1.5", TokenType.REAL),
            ("1.", TokenType.REAL),
            (".5", TokenType.REAL),
            ("-.5", TokenType.REAL),
            ("1e10", TokenType.REAL),
            ("1.0E-3", TokenType.REAL),
            ("1d-5", TokenType.REAL),
            ("2.5D+3", TokenType.REAL),
            ("1.0_8", TokenType.REAL),
            ("2_real64", TokenType.REAL),
        ],
    )
    def test_number_classification(self, source: str, expected: TokenType) -> None:
        token = _single(source)
        assert token.type == expected
        assert token.value == source

    def test_sign_before_digit_is_part_of_number(self) -> None:
        assert _values("x=-12") == ["x", "=", "-12"]

    def test_lone_sign_is_an_operator(self) -> None:
        assert _types("- ") == [TokenType.MINUS]

    def test_signed_word_is_one_identifier(self) -> None:
        token = _single("-inf")
        assert token.type == TokenType.IDENTIFIER
        assert token.value == "-inf"

    def test_digits_followed_by_dotted_logical(self) -> None:
        assert _values("1.and.") == ["1", ".and."]

    def test_missing_exponent_digits_raise(self) -> None:
        with pytest.raises(LexerError, match="Invalid exponent in number"):
            tokenize("1.0e+")

    def test_exponent_error_carries_position(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            tokenize("x = 1e")
        assert exc_info.value.line == 1
        assert exc_info.value.column == 6


# ###############
# Words and Logicals
# ###############


class TestWords:
    @pytest.mark.parametrize("source", [".true.", ".false.", ".T.", ".f.", ".TRUE.", "t", "F", "true", "False"])
    def test_logical_literals(self, source: str) -> None:
        token = _single(source)
        assert token.type == TokenType.LOGICAL
        assert token.value == source

    def test_identifier_with_underscore_and_digits(self) -> None:
        token = _single("_var_2")
        assert token.type == TokenType.IDENTIFIER
        assert token.value == "_var_2"

    def test_dotted_word_that_is_not_logical(self) -> None:
        token = _single(".eq.")
        assert token.type == TokenType.IDENTIFIER

    def test_lone_dot_is_invalid(self) -> None:
        assert _types(". ") == [TokenType.INVALID]

    def test_bare_logical_word_is_still_a_name(self) -> None:
        assert _single("t").is_name()
        assert not _single(".t.").is_name()
        assert _single("temp").is_name()
        assert not _single("42").is_name()


# ###############
# Strings
# ###############


class TestStrings:
    def test_single_quoted(self) -> None:
        token = _single("'hello'")
        assert token.type == TokenType.STRING
        assert token.value == "'hello'"

    def test_double_quoted_with_other_quote_inside(self) -> None:
        assert _single('"it\'s"').value == '"it\'s"'

    def test_doubled_quote_is_an_escape(self) -> None:
        assert _single("'it''s'").value == "'it''s'"

    def test_comment_character_inside_string(self) -> None:
        assert _types("'a ! b'") == [TokenType.STRING]

    def test_unterminated_at_newline_raises(self) -> None:
        with pytest.raises(LexerError, match="Unterminated string literal"):
            tokenize("s = 'abc\n'")

    def test_unterminated_at_end_of_input_raises(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            tokenize("\n  s = 'abc")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 7


# ###############
# Positions
# ###############


class TestPositions:
    def test_line_and_column_tracking(self) -> None:
        tokens = _significant("&nml\n  x = 1\n/")
        positions = [(tok.value, tok.line, tok.column) for tok in tokens]
        assert positions == [
            ("&", 1, 1),
            ("nml", 1, 2),
            ("x", 2, 3),
            ("=", 2, 5),
            ("1", 2, 7),
            ("/", 3, 1),
        ]

    def test_next_token_keeps_returning_eof(self) -> None:
        lexer = Lexer("x")
        assert lexer.next_token().type == TokenType.IDENTIFIER
        assert lexer.at_end
        assert lexer.next_token().type == TokenType.EOF
        assert lexer.next_token().type == TokenType.EOF
