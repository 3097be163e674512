# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for namelist files.

Converts raw source text into tokens one at a time. Whitespace runs and
comments are emitted as tokens of their own so that both the structural
parser and the format-preserving patcher can be built from the same lexer.
"""

from collections.abc import Callable

from nmlkit.errors import LexerError
from nmlkit.scanner.token import Token, TokenType

# ###############
# Public Interface
# ###############

DEFAULT_COMMENT_CHARS = "!#"


class Lexer:
    """Cursor over the full input text producing one token per call.

    Args:
        source: The complete namelist text.
        comment_chars: Characters that start a comment running to end of line.
    """

    def __init__(self, source: str, comment_chars: str = DEFAULT_COMMENT_CHARS) -> None:
        self._source = source
        self._comment_chars = comment_chars
        self._pos = 0
        self._line = 1
        self._column = 1

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._source)

    def next_token(self) -> Token:
        """Scan and return the next token.

        Once the input is exhausted every call returns an EOF token.

        Raises:
            LexerError: On an unterminated string literal or a number whose
                exponent marker is not followed by digits.
        """
        if self.at_end:
            return Token(TokenType.EOF, "", self._line, self._column)

        ch = self._current()
        line = self._line
        col = self._column

        if ch.isspace():
            return self._scan_whitespace(line, col)
        if ch in self._comment_chars:
            return self._scan_comment(line, col)
        if ch in _SINGLE_CHAR_TOKENS:
            self._advance()
            return Token(_SINGLE_CHAR_TOKENS[ch], ch, line, col)
        if ch in "+-":
            return self._scan_sign(line, col)
        if ch == ".":
            return self._scan_dot(line, col)
        if ch.isdigit():
            start = self._pos
            is_real = self._scan_number_body()
            return self._number_token(start, is_real, line, col)
        if ch.isalpha() or ch == "_":
            return self._scan_identifier(line, col)
        if ch in "'\"":
            return self._scan_string(line, col)

        self._advance()
        return Token(TokenType.INVALID, ch, line, col)

    def tokenize(self) -> list[Token]:
        """Scan the remaining input and return every token including the terminal EOF."""
        tokens: list[Token] = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                return tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character ``offset`` positions ahead, or '' past the end."""
        if self._pos + offset < len(self._source):
            return self._source[self._pos + offset]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _consume_while(self, predicate: Callable[[str], bool]) -> None:
        while self._pos < len(self._source) and predicate(self._source[self._pos]):
            self._advance()

    # ------------------------------------------------------------------
    # Trivia
    # ------------------------------------------------------------------

    def _scan_whitespace(self, line: int, col: int) -> Token:
        start = self._pos
        self._consume_while(str.isspace)
        return Token(TokenType.WHITESPACE, self._source[start : self._pos], line, col)

    def _scan_comment(self, line: int, col: int) -> Token:
        """Consume from the comment character through end of line, line break excluded."""
        start = self._pos
        self._consume_while(lambda ch: ch not in "\r\n")
        return Token(TokenType.COMMENT, self._source[start : self._pos], line, col)

    # ------------------------------------------------------------------
    # Numbers, signs and dotted words
    # ------------------------------------------------------------------

    def _scan_sign(self, line: int, col: int) -> Token:
        """Scan a signed number, a signed word such as ``-inf``, or a lone operator."""
        start = self._pos
        sign = self._current()
        nxt = self._peek()
        if nxt.isdigit():
            self._advance()
            is_real = self._scan_number_body()
            return self._number_token(start, is_real, line, col)
        if nxt == "." and self._peek(2).isdigit():
            self._advance()
            self._scan_fraction_body()
            return Token(TokenType.REAL, self._source[start : self._pos], line, col)
        if nxt.isalpha():
            self._advance()
            self._consume_while(_is_word_char)
            return Token(TokenType.IDENTIFIER, self._source[start : self._pos], line, col)
        self._advance()
        return Token(TokenType.PLUS if sign == "+" else TokenType.MINUS, sign, line, col)

    def _scan_dot(self, line: int, col: int) -> Token:
        """Scan a real starting with '.', a dotted logical, or a dotted word."""
        start = self._pos
        nxt = self._peek()
        if nxt.isdigit():
            self._scan_fraction_body()
            return Token(TokenType.REAL, self._source[start : self._pos], line, col)
        if nxt.isalpha():
            self._advance()  # .
            self._consume_while(_is_word_char)
            if self._current() == ".":
                self._advance()
            value = self._source[start : self._pos]
            lowered = value.lower()
            if lowered.startswith(".t") or lowered.startswith(".f"):
                return Token(TokenType.LOGICAL, value, line, col)
            return Token(TokenType.IDENTIFIER, value, line, col)
        self._advance()
        return Token(TokenType.INVALID, ".", line, col)

    def _scan_number_body(self) -> bool:
        """Consume digits, an optional fraction, exponent and kind suffix.

        Returns:
            True if the literal is a real (fraction, exponent or kind suffix seen).
        """
        is_real = False
        self._consume_while(str.isdigit)
        if self._current() == "." and self._dot_starts_fraction():
            self._advance()
            self._consume_while(str.isdigit)
            is_real = True
        if self._scan_exponent():
            is_real = True
        if self._scan_kind_suffix():
            is_real = True
        return is_real

    def _scan_fraction_body(self) -> None:
        """Consume '.', digits, then an optional exponent and kind suffix."""
        self._advance()  # .
        self._consume_while(str.isdigit)
        self._scan_exponent()
        self._scan_kind_suffix()

    def _dot_starts_fraction(self) -> bool:
        """A '.' after digits is a decimal point unless it opens a dotted word."""
        nxt = self._peek()
        return not nxt.isalpha() or nxt in _EXPONENT_MARKERS

    def _scan_exponent(self) -> bool:
        if self._current() == "" or self._current() not in _EXPONENT_MARKERS:
            return False
        line = self._line
        col = self._column
        self._advance()
        if self._current() != "" and self._current() in "+-":
            self._advance()
        if not self._current().isdigit():
            raise LexerError("Invalid exponent in number", line, col)
        self._consume_while(str.isdigit)
        return True

    def _scan_kind_suffix(self) -> bool:
        if self._current() != "_" or not _is_word_char(self._peek()):
            return False
        self._advance()  # _
        self._consume_while(_is_word_char)
        return True

    def _number_token(self, start: int, is_real: bool, line: int, col: int) -> Token:
        token_type = TokenType.REAL if is_real else TokenType.INTEGER
        return Token(token_type, self._source[start : self._pos], line, col)

    # ------------------------------------------------------------------
    # Identifiers and strings
    # ------------------------------------------------------------------

    def _scan_identifier(self, line: int, col: int) -> Token:
        """Scan an identifier; bare ``t``/``f``/``true``/``false`` become logicals."""
        start = self._pos
        self._consume_while(_is_word_char)
        value = self._source[start : self._pos]
        if value.lower() in _LOGICAL_WORDS:
            return Token(TokenType.LOGICAL, value, line, col)
        return Token(TokenType.IDENTIFIER, value, line, col)

    def _scan_string(self, line: int, col: int) -> Token:
        """Scan a quoted string; a doubled quote character is an escaped quote."""
        start = self._pos
        quote = self._advance()
        while True:
            if self.at_end or self._current() == "\n":
                raise LexerError("Unterminated string literal", line, col)
            ch = self._advance()
            if ch == quote:
                if self._current() == quote:
                    self._advance()
                    continue
                return Token(TokenType.STRING, self._source[start : self._pos], line, col)


def tokenize(source: str, comment_chars: str = DEFAULT_COMMENT_CHARS) -> list[Token]:
    """Tokenize namelist text, keeping whitespace and comment tokens.

    Args:
        source: The full text of a namelist file.
        comment_chars: Characters that start a comment.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: On unterminated strings or invalid exponents.
    """
    return Lexer(source, comment_chars).tokenize()


# ################
# Implementation
# ################

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "&": TokenType.GROUP_START,
    "$": TokenType.GROUP_START_ALT,
    "/": TokenType.GROUP_END,
    "=": TokenType.ASSIGN,
    ",": TokenType.COMMA,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ":": TokenType.COLON,
    "%": TokenType.PERCENT,
    "*": TokenType.STAR,
}

_LOGICAL_WORDS = frozenset({"t", "f", "true", "false"})

_EXPONENT_MARKERS = "eEdD"


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"
