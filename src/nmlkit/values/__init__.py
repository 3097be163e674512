# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Namelist value model: variants, parsing and formatting."""

from nmlkit.values.value import (
    TYPE_NAMES,
    ArrayValue,
    BaseValue,
    CharacterValue,
    ComplexValue,
    DerivedTypeArrayValue,
    DerivedTypeValue,
    IntegerValue,
    LogicalValue,
    MultiArrayValue,
    NullValue,
    RealValue,
    Value,
    to_value,
)
from nmlkit.values.formatting import (
    ComplexFormat,
    FormatOptions,
    QuoteStyle,
    format_array,
    format_array_with_repeats,
    format_element,
    format_real,
    format_value,
    quote_string,
    with_repeat_count,
)
from nmlkit.values.parsing import (
    ValueConstraints,
    infer_type,
    looks_like_integer,
    looks_like_real,
    parse_character,
    parse_complex,
    parse_integer,
    parse_logical,
    parse_real,
    parse_repeat_expression,
    parse_value,
    parse_value_list,
    validate_parsed_value,
)

__all__ = [
    "TYPE_NAMES",
    "ArrayValue",
    "BaseValue",
    "CharacterValue",
    "ComplexFormat",
    "ComplexValue",
    "DerivedTypeArrayValue",
    "DerivedTypeValue",
    "FormatOptions",
    "IntegerValue",
    "LogicalValue",
    "MultiArrayValue",
    "NullValue",
    "QuoteStyle",
    "RealValue",
    "Value",
    "ValueConstraints",
    "format_array",
    "format_array_with_repeats",
    "format_element",
    "format_real",
    "format_value",
    "infer_type",
    "looks_like_integer",
    "looks_like_real",
    "parse_character",
    "parse_complex",
    "parse_integer",
    "parse_logical",
    "parse_real",
    "parse_repeat_expression",
    "parse_value",
    "parse_value_list",
    "quote_string",
    "to_value",
    "validate_parsed_value",
    "with_repeat_count",
]
