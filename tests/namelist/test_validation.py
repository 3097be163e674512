# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for collecting structural problems across a document."""

from nmlkit.errors import DimensionMismatchError, InvalidValueError
from nmlkit.namelist.document import Namelist
from nmlkit.namelist.validation import ValidationResult, check_namelist, check_value
from nmlkit.values.value import ArrayValue, DerivedTypeArrayValue, DerivedTypeValue, MultiArrayValue


def test_clean_document_has_no_errors():
    """A document with homogeneous arrays passes."""
    namelist = Namelist()
    namelist.insert_group("g").insert("a", [1, 2, 3]).insert("s", "x")
    result = check_namelist(namelist)
    assert isinstance(result, ValidationResult)
    assert not result.has_errors


def test_all_problems_are_collected():
    """Every offending variable is reported, not just the first."""
    namelist = Namelist()
    namelist.insert_group("g").insert("a", [1, "x"]).insert("m", MultiArrayValue([1, 2, 3], [2, 2]))
    namelist.insert_group("h").insert("b", [True, 1.0])
    result = check_namelist(namelist)
    assert len(result.errors) == 3
    assert isinstance(result.errors[1], DimensionMismatchError)
    assert result.errors[1].group == "g"


def test_type_reference_is_first_non_null_element():
    """Leading nulls do not decide the expected element type."""
    problems = check_value(ArrayValue([None, 1, "x"]), "g", "a")
    assert len(problems) == 1
    assert isinstance(problems[0], InvalidValueError)
    assert problems[0].expected_type == "integer"
    assert problems[0].variable == "g%a"


def test_all_null_array_is_valid():
    """An array of nulls is a valid sparse array."""
    assert check_value(ArrayValue([None, None]), "g", "a") == []


def test_derived_type_fields_are_checked():
    """Problems inside derived-type fields name the field path."""
    value = DerivedTypeValue({"inner": [1, "x"]})
    problems = check_value(value, "g", "t")
    assert len(problems) == 1
    assert problems[0].variable == "g%t%inner"


def test_derived_type_array_elements_are_checked():
    """Problems inside derived-type array elements name the element."""
    value = DerivedTypeArrayValue([{"a": 1}, {"a": [1, 2.0]}])
    problems = check_value(value, "g", "t")
    assert len(problems) == 1
    assert problems[0].variable == "g%t(2)%a"
