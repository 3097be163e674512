# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural parsing and format-preserving patching of namelist text."""

from nmlkit.parser.streaming import StreamingParser, parse, parse_and_patch

__all__ = ["StreamingParser", "parse", "parse_and_patch"]
