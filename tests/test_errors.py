# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the error hierarchy."""

import pytest

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

# ###############
# Classification
# ###############


@pytest.mark.parametrize(
    ("error", "category", "recoverable", "severity"),
    [
        (NamelistIOError("io"), "io", False, Severity.ERROR),
        (FileAlreadyExistsError("out.nml"), "io", True, Severity.WARNING),
        (ConfigError("bad"), "config", False, Severity.ERROR),
        (LexerError("bad", 1, 2), "lexical", False, Severity.ERROR),
        (ParseError("bad", 1, 2), "syntax", False, Severity.ERROR),
        (UnexpectedEofError("eof", 1, 2), "syntax", False, Severity.FATAL),
        (InvalidValueError("x", "integer"), "value", True, Severity.ERROR),
        (TypeConversionError("real", "integer", "1.5"), "value", True, Severity.ERROR),
        (InvalidIndexError("0", "below origin"), "value", True, Severity.ERROR),
        (DimensionMismatchError("m", "6", "5"), "value", True, Severity.ERROR),
        (DuplicateNameError("g", "group"), "structural", True, Severity.WARNING),
        (VariableNotFoundError("x", "g"), "structural", True, Severity.WARNING),
        (GroupNotFoundError("g"), "structural", True, Severity.WARNING),
        (IncompatiblePatchError("x", "integer", "character"), "patch", True, Severity.ERROR),
        (MissingTemplateInfoError("parse_and_patch"), "patch", False, Severity.FATAL),
    ],
)
def test_error_classification(error, category, recoverable, severity):
    """Every error reports its category, recoverability and severity."""
    assert isinstance(error, NamelistError)
    assert error.category == category
    assert error.recoverable is recoverable
    assert error.severity == severity


def test_unexpected_eof_is_a_parse_error():
    """Callers catching ParseError also catch end-of-input errors."""
    assert issubclass(UnexpectedEofError, ParseError)


def test_base_error_defaults():
    """A bare NamelistError is a recoverable custom error."""
    error = NamelistError("something")
    assert error.category == "custom"
    assert error.recoverable
    assert error.context() == ErrorContext()


# ###############
# Context and Reports
# ###############


def test_scan_error_context():
    """Lexer and parser errors carry a line and column."""
    error = ParseError("Expected '='", 3, 5)

    assert str(error) == "Line 3, column 5: Expected '='"
    assert error.message == "Expected '='"
    assert error.context() == ErrorContext(line=3, column=5)


def test_document_error_context():
    """Document errors carry a group and variable."""
    context = VariableNotFoundError("x", "g").context()

    assert context.group == "g"
    assert context.variable == "x"
    assert context.line is None
    assert context.describe() == "group 'g', variable 'x'"


def test_duplicate_variable_records_variable_name():
    """Only duplicate variables set a variable name in the context."""
    assert DuplicateNameError("x", "variable", "g").context().variable == "x"
    assert DuplicateNameError("g", "group").context().variable is None


def test_empty_context_describes_nothing():
    """An empty context describes as an empty string."""
    assert ErrorContext().describe() == ""


def test_detailed_report_with_location():
    """The report lists category, severity, message, location and recoverability."""
    report = ParseError("boom", 3, 5).detailed_report()

    assert report == (
        "Error category: syntax\n"
        "Severity: error\n"
        "Message: Line 3, column 5: boom\n"
        "Location: line 3, column 5\n"
        "Recoverable: no"
    )


def test_detailed_report_without_location():
    """Errors without location information omit the location line."""
    report = ConfigError("bad file").detailed_report()

    assert "Location" not in report
    assert report.endswith("Recoverable: no")


def test_messages_name_the_variable():
    """Value errors mention the variable they concern."""
    assert "for variable 'n'" in str(InvalidValueError("abc", "integer", "n", "run"))
    assert str(GroupNotFoundError("run")) == "Group 'run' not found"
    assert str(FileAlreadyExistsError("out.nml")) == "File already exists: out.nml"
