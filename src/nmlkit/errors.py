# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error hierarchy shared by every nmlkit component.

Each error carries a category, a severity and a recoverability flag so that
callers can decide whether to abort, retry with different input, or fall
back to a default. Errors raised while scanning carry a line and column;
errors raised by document operations carry a group and variable name.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class Severity(enum.Enum):
    """How serious an error is for the current operation."""

    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


@dataclass(frozen=True)
class ErrorContext:
    """Location information attached to an error.

    Attributes:
        line: 1-based line number, when the error comes from scanning.
        column: 1-based column number, when the error comes from scanning.
        group: Group name, when the error comes from a document operation.
        variable: Variable name, when the error comes from a document operation.
    """

    line: int | None = None
    column: int | None = None
    group: str | None = None
    variable: str | None = None

    def describe(self) -> str:
        """Return a short human-readable location, or '' if nothing is known."""
        parts: list[str] = []
        if self.line is not None:
            parts.append(f"line {self.line}")
        if self.column is not None:
            parts.append(f"column {self.column}")
        if self.group is not None:
            parts.append(f"group '{self.group}'")
        if self.variable is not None:
            parts.append(f"variable '{self.variable}'")
        return ", ".join(parts)


class NamelistError(Exception):
    """Base class for all errors raised by nmlkit."""

    category: str = "custom"
    recoverable: bool = True
    severity: Severity = Severity.ERROR

    def context(self) -> ErrorContext:
        """Return the location information known for this error."""
        return ErrorContext(
            line=getattr(self, "line", None),
            column=getattr(self, "column", None),
            group=getattr(self, "group", None),
            variable=getattr(self, "variable", None),
        )

    def detailed_report(self) -> str:
        """Return a multi-line report describing the error."""
        lines = [
            f"Error category: {self.category}",
            f"Severity: {self.severity.value}",
            f"Message: {self}",
        ]
        location = self.context().describe()
        if location:
            lines.append(f"Location: {location}")
        lines.append(f"Recoverable: {'yes' if self.recoverable else 'no'}")
        return "\n".join(lines)


# -- I/O and configuration ----------------------------------------------


class NamelistIOError(NamelistError):
    """Raised when a namelist file cannot be read or written."""

    category = "io"
    recoverable = False


class FileAlreadyExistsError(NamelistError):
    """Raised when writing would overwrite an existing file without ``force``."""

    category = "io"
    severity = Severity.WARNING

    def __init__(self, path: object) -> None:
        super().__init__(f"File already exists: {path}")
        self.path = path


class ConfigError(NamelistError):
    """Raised when a write-options config file cannot be read or is invalid."""

    category = "config"
    recoverable = False


# -- Lexical and syntactic ----------------------------------------------


class LexerError(NamelistError):
    """Raised when the lexer meets an unterminated string or a malformed number.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    category = "lexical"
    recoverable = False

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.message = message
        self.line = line
        self.column = column


class ParseError(NamelistError):
    """Raised when the parser meets a token that does not fit the grammar.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    category = "syntax"
    recoverable = False

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.message = message
        self.line = line
        self.column = column


class UnexpectedEofError(ParseError):
    """Raised when the input ends inside a group or an assignment."""

    severity = Severity.FATAL


# -- Value-level ---------------------------------------------------------


class InvalidValueError(NamelistError):
    """Raised when text is not a valid literal of the requested type."""

    category = "value"

    def __init__(
        self,
        value: str,
        expected_type: str,
        variable: str | None = None,
        group: str | None = None,
    ) -> None:
        target = f" for variable '{variable}'" if variable else ""
        super().__init__(f"Invalid value{target}: '{value}' (expected {expected_type})")
        self.value = value
        self.expected_type = expected_type
        self.variable = variable
        self.group = group


class TypeConversionError(NamelistError):
    """Raised when a value cannot be converted to another value type."""

    category = "value"

    def __init__(self, from_type: str, to_type: str, value: str) -> None:
        super().__init__(f"Cannot convert {from_type} to {to_type}: {value}")
        self.from_type = from_type
        self.to_type = to_type
        self.value = value


class InvalidIndexError(NamelistError):
    """Raised for malformed index expressions and out-of-bounds coordinates."""

    category = "value"

    def __init__(self, index: str, message: str, variable: str | None = None) -> None:
        target = f" for variable '{variable}'" if variable else ""
        super().__init__(f"Invalid index '{index}'{target}: {message}")
        self.index = index
        self.variable = variable


class DimensionMismatchError(NamelistError):
    """Raised when a multi-dimensional array's element count does not fit its shape."""

    category = "value"

    def __init__(self, variable: str, expected: str, actual: str) -> None:
        super().__init__(f"Dimension mismatch for '{variable}': expected {expected}, got {actual}")
        self.variable = variable
        self.expected = expected
        self.actual = actual


# -- Structural ----------------------------------------------------------


class DuplicateNameError(NamelistError):
    """Raised when adding a group or variable whose name is already taken."""

    category = "structural"
    severity = Severity.WARNING

    def __init__(self, name: str, item_type: str, group: str | None = None) -> None:
        super().__init__(f"Duplicate {item_type}: '{name}'")
        self.name = name
        self.item_type = item_type
        self.group = group
        if item_type == "variable":
            self.variable = name


class VariableNotFoundError(NamelistError):
    """Raised when a variable is required but absent from its group."""

    category = "structural"
    severity = Severity.WARNING

    def __init__(self, variable: str, group: str) -> None:
        super().__init__(f"Variable '{variable}' not found in group '{group}'")
        self.variable = variable
        self.group = group


class GroupNotFoundError(NamelistError):
    """Raised when a group is required but absent from the namelist."""

    category = "structural"
    severity = Severity.WARNING

    def __init__(self, group: str) -> None:
        super().__init__(f"Group '{group}' not found")
        self.group = group


# -- Patch-specific ------------------------------------------------------


class IncompatiblePatchError(NamelistError):
    """Raised by strict patching when the incoming type cannot replace the existing one."""

    category = "patch"

    def __init__(self, variable: str, original_type: str, patch_type: str, group: str | None = None) -> None:
        super().__init__(f"Cannot patch {original_type} variable '{variable}' with {patch_type} value")
        self.variable = variable
        self.original_type = original_type
        self.patch_type = patch_type
        self.group = group


class MissingTemplateInfoError(NamelistError):
    """Raised when a format-preserving operation has no original text to work from."""

    category = "patch"
    recoverable = False
    severity = Severity.FATAL

    def __init__(self, operation: str) -> None:
        super().__init__(f"Missing template information for operation: {operation}")
        self.operation = operation
