# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reading, writing, merging and format-preserving patching of Fortran namelists."""

from nmlkit.api import (
    patch,
    patch_file,
    patch_to_writer,
    patch_with_template,
    patches,
    read,
    reads,
    write,
    write_to_writer,
    writes,
)
from nmlkit.errors import (
    ConfigError,
    DimensionMismatchError,
    DuplicateNameError,
    ErrorContext,
    FileAlreadyExistsError,
    GroupNotFoundError,
    IncompatiblePatchError,
    InvalidIndexError,
    InvalidValueError,
    LexerError,
    MissingTemplateInfoError,
    NamelistError,
    NamelistIOError,
    ParseError,
    Severity,
    TypeConversionError,
    UnexpectedEofError,
    VariableNotFoundError,
)
from nmlkit.namelist import Group, MergeStrategy, Namelist, WriteOptions
from nmlkit.parser import StreamingParser
from nmlkit.values import FormatOptions, Value, parse_value, to_value

__all__ = [
    # File API
    "read",
    "reads",
    "write",
    "writes",
    "write_to_writer",
    "patch",
    "patch_file",
    "patch_to_writer",
    "patches",
    "patch_with_template",
    # Document model
    "Group",
    "MergeStrategy",
    "Namelist",
    "StreamingParser",
    "WriteOptions",
    "FormatOptions",
    "Value",
    "parse_value",
    "to_value",
    # Errors
    "ConfigError",
    "DimensionMismatchError",
    "DuplicateNameError",
    "ErrorContext",
    "FileAlreadyExistsError",
    "GroupNotFoundError",
    "IncompatiblePatchError",
    "InvalidIndexError",
    "InvalidValueError",
    "LexerError",
    "MissingTemplateInfoError",
    "NamelistError",
    "NamelistIOError",
    "ParseError",
    "Severity",
    "TypeConversionError",
    "UnexpectedEofError",
    "VariableNotFoundError",
]
