# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Token types produced by the namelist lexer."""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the namelist lexer."""

    # Group delimiters
    GROUP_START = "&"
    GROUP_START_ALT = "$"
    GROUP_END = "/"

    # Symbols and operators
    ASSIGN = "="
    COMMA = ","
    LPAREN = "("
    RPAREN = ")"
    COLON = ":"
    PERCENT = "%"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"

    # Literals
    IDENTIFIER = "IDENTIFIER"
    INTEGER = "INTEGER"
    REAL = "REAL"
    COMPLEX = "COMPLEX"
    LOGICAL = "LOGICAL"
    STRING = "STRING"

    # Trivia
    COMMENT = "COMMENT"
    WHITESPACE = "WHITESPACE"

    # End of input and unrecognized characters
    EOF = "EOF"
    INVALID = "INVALID"


GROUP_OPEN_TYPES: frozenset[TokenType] = frozenset({TokenType.GROUP_START, TokenType.GROUP_START_ALT})


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw lexeme exactly as it appears in the source, quotes included.
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
    """

    type: TokenType
    value: str
    line: int
    column: int

    @property
    def is_trivia(self) -> bool:
        """True for whitespace and comments, which carry no structure."""
        return self.type in (TokenType.WHITESPACE, TokenType.COMMENT)

    @property
    def is_group_open(self) -> bool:
        return self.type in GROUP_OPEN_TYPES

    def is_name(self) -> bool:
        """Return True if the token can serve as a group, variable or field name.

        Bare ``t``/``f``/``true``/``false`` lex as logicals but are legal names.
        """
        if self.type == TokenType.IDENTIFIER:
            return self.value[:1].isalpha() or self.value[:1] == "_"
        return self.type == TokenType.LOGICAL and self.value.isalpha()
