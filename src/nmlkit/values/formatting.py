# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Formatting of namelist values as Fortran literal text."""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict

from nmlkit.errors import TypeConversionError
from nmlkit.values.value import (
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
)

# ###############
# Public Interface
# ###############


class ComplexFormat(Enum):
    """How complex numbers are written."""

    PARENTHESES = "parentheses"
    MATHEMATICAL = "mathematical"


class QuoteStyle(Enum):
    """Quote character used for character values. PRESERVE falls back to single quotes."""

    SINGLE = "single"
    DOUBLE = "double"
    PRESERVE = "preserve"


class FormatOptions(BaseModel):
    """Options controlling how individual values are written.

    Attributes:
        uppercase: Write logicals as ``.TRUE.``/``.FALSE.``.
        float_precision: Fixed number of digits after the decimal point.
        exponential_threshold: ``(min, max)`` magnitudes; nonzero reals outside
            this range are written in exponential form.
        complex_format: ``(re, im)`` or ``re+im*i``.
        quote_style: Quote character for strings.
        use_fortran_double: Use ``d`` instead of ``e`` as the exponent marker.
        array_element_width: Break array text onto a new line every N elements.
    """

    model_config = ConfigDict(extra="forbid")

    uppercase: bool = False
    float_precision: int | None = None
    exponential_threshold: tuple[float, float] | None = None
    complex_format: ComplexFormat = ComplexFormat.PARENTHESES
    quote_style: QuoteStyle = QuoteStyle.SINGLE
    use_fortran_double: bool = False
    array_element_width: int | None = None


DEFAULT_FORMAT_OPTIONS = FormatOptions()


def format_value(value: BaseValue, options: FormatOptions | None = None) -> str:
    """Format a single value as namelist literal text.

    Derived types have no single-literal form and format as placeholders;
    the group formatter expands them into per-field assignments. Inside an
    array there is nothing to expand them into, so a derived type element
    raises instead; see :func:`format_element`.
    """
    opts = options or DEFAULT_FORMAT_OPTIONS
    if isinstance(value, IntegerValue):
        return str(value.value)
    if isinstance(value, RealValue):
        return format_real(value.value, opts)
    if isinstance(value, ComplexValue):
        return _format_complex(value, opts)
    if isinstance(value, LogicalValue):
        text = ".true." if value.value else ".false."
        return text.upper() if opts.uppercase else text
    if isinstance(value, CharacterValue):
        return quote_string(value.value, opts.quote_style)
    if isinstance(value, (ArrayValue, MultiArrayValue)):
        return format_array(value.values, opts)
    if isinstance(value, DerivedTypeValue):
        return "<derived_type>"
    if isinstance(value, DerivedTypeArrayValue):
        return "<derived_type_array>"
    if isinstance(value, NullValue):
        return ""
    raise TypeError(f"Unknown value type: {type(value).__name__}")


def format_real(number: float, options: FormatOptions | None = None) -> str:
    """Format a float so that it always reads back as a real."""
    opts = options or DEFAULT_FORMAT_OPTIONS
    if math.isnan(number):
        return "nan"
    if math.isinf(number):
        return "+inf" if number > 0 else "-inf"

    if opts.exponential_threshold is not None and number != 0.0:
        low, high = opts.exponential_threshold
        magnitude = abs(number)
        if magnitude < low or magnitude > high:
            return _format_exponential(number, opts)

    if opts.float_precision is not None:
        text = f"{number:.{opts.float_precision}f}"
        return text if "." in text else text + "."

    text = repr(number)
    if "e" in text:
        return _format_exponential(number, opts)
    if "." not in text:
        text += ".0"
    return text


def quote_string(text: str, style: QuoteStyle = QuoteStyle.SINGLE) -> str:
    """Quote a string, doubling any embedded quote character."""
    quote = '"' if style == QuoteStyle.DOUBLE else "'"
    return quote + text.replace(quote, quote * 2) + quote


def format_element(item: BaseValue, options: FormatOptions | None = None) -> str:
    """Format one array element.

    Raises:
        TypeConversionError: If the element is a derived type, which has no
            literal form inside a value list.
    """
    if isinstance(item, (DerivedTypeValue, DerivedTypeArrayValue)):
        raise TypeConversionError(item.kind, "array element", item.summary())
    return format_value(item, options)


def format_array(values: Sequence[BaseValue], options: FormatOptions | None = None) -> str:
    """Join array elements with ``", "``, optionally wrapping every N elements.

    A trailing null gets its own comma, since a single trailing comma reads
    back as nothing.
    """
    opts = options or DEFAULT_FORMAT_OPTIONS
    parts = [format_element(item, opts) for item in values]
    width = opts.array_element_width
    if not width or width <= 0:
        text = ", ".join(parts)
    else:
        rows = [", ".join(parts[i : i + width]) for i in range(0, len(parts), width)]
        text = ",\n    ".join(rows)
    if values and isinstance(values[-1], NullValue):
        text += ","
    return text


def format_array_with_repeats(values: Sequence[BaseValue], options: FormatOptions | None = None) -> str:
    """Format array elements, collapsing runs of identical elements into ``n*value``.

    The result is for presentation: reading it back yields the expanded array,
    but null runs format as ``n*`` which only round-trips inside a value list.

    Example:
        ``[1, 2, 2, 2, 3]`` formats as ``"1, 3*2, 3"``.
    """
    opts = options or DEFAULT_FORMAT_OPTIONS
    parts: list[str] = []
    index = 0
    while index < len(values):
        current = values[index]
        run = 1
        while index + run < len(values) and values[index + run] == current:
            run += 1
        parts.append(with_repeat_count(format_element(current, opts), run))
        index += run
    return ", ".join(parts)


def with_repeat_count(text: str, count: int) -> str:
    """Prefix formatted value text with a repeat count when ``count > 1``."""
    if count <= 1:
        return text
    return f"{count}*{text}"


# ################
# Implementation
# ################


def _format_exponential(number: float, opts: FormatOptions) -> str:
    """Exponential form with a compact exponent, e.g. ``1.5e-7`` or ``1.5d-7``."""
    if opts.float_precision is not None:
        text = f"{number:.{opts.float_precision}e}"
    else:
        text = f"{Decimal(repr(number)):e}"
    mantissa, exponent = text.split("e")
    if "." not in mantissa:
        mantissa += ".0"
    marker = "d" if opts.use_fortran_double else "e"
    return f"{mantissa}{marker}{int(exponent)}"


def _format_complex(value: ComplexValue, opts: FormatOptions) -> str:
    real = format_real(value.real, opts)
    imag = format_real(value.imag, opts)
    if opts.complex_format == ComplexFormat.MATHEMATICAL:
        sign = "" if imag.startswith(("-", "+")) else "+"
        return f"{real}{sign}{imag}*i"
    return f"({real}, {imag})"
