# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer and scanner for namelist text."""

from nmlkit.scanner.lexer import DEFAULT_COMMENT_CHARS, Lexer, tokenize
from nmlkit.scanner.scanner import Scanner, scan, scan_with_whitespace
from nmlkit.scanner.token import Token, TokenType

__all__ = [
    "DEFAULT_COMMENT_CHARS",
    "Lexer",
    "Scanner",
    "Token",
    "TokenType",
    "scan",
    "scan_with_whitespace",
    "tokenize",
]
