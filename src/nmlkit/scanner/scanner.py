# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Whole-input scanning on top of the lexer.

Two views of the same token stream are offered: a structural view with
whitespace removed, and a full-fidelity view that keeps every byte of the
input so that it can be written back unchanged.
"""

from collections.abc import Iterator

from nmlkit.scanner.lexer import DEFAULT_COMMENT_CHARS, Lexer
from nmlkit.scanner.token import Token, TokenType

# ###############
# Public Interface
# ###############


class Scanner:
    """Run the lexer over an in-memory input.

    Args:
        source: The complete namelist text.
        comment_chars: Characters that start a comment.
    """

    def __init__(self, source: str, comment_chars: str = DEFAULT_COMMENT_CHARS) -> None:
        self._source = source
        self._comment_chars = comment_chars

    @property
    def source(self) -> str:
        return self._source

    def __iter__(self) -> Iterator[Token]:
        """Yield every token, whitespace included, ending with EOF."""
        lexer = Lexer(self._source, self._comment_chars)
        while True:
            token = lexer.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def scan_all(self) -> list[Token]:
        """Return all tokens except whitespace. Comments and the final EOF are kept."""
        return [token for token in self if token.type != TokenType.WHITESPACE]

    def scan_all_including_whitespace(self) -> list[Token]:
        """Return every token so that joining their values reproduces the input."""
        return list(self)


def scan(source: str, comment_chars: str = DEFAULT_COMMENT_CHARS) -> list[Token]:
    """Scan text into tokens with whitespace removed.

    Raises:
        LexerError: On unterminated strings or invalid exponents.
    """
    return Scanner(source, comment_chars).scan_all()


def scan_with_whitespace(source: str, comment_chars: str = DEFAULT_COMMENT_CHARS) -> list[Token]:
    """Scan text into the complete token list, whitespace and comments included.

    Raises:
        LexerError: On unterminated strings or invalid exponents.
    """
    return Scanner(source, comment_chars).scan_all_including_whitespace()
