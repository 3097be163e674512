# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parsing of raw literal text into namelist values.

Without a type hint, :func:`parse_value` tries each parser in a fixed order:
logical, complex, real, integer, and finally character. The order matters.
Abbreviated logicals (``t``, ``f``) must be claimed before anything else,
and reals must be tried before integers so that ``1d5`` is not read as an
integer followed by noise. The real and integer parsers are disjoint: the
real parser rejects text that looks like an integer.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass

from nmlkit.errors import InvalidValueError
from nmlkit.values.value import (
    I64_MAX,
    I64_MIN,
    ArrayValue,
    BaseValue,
    CharacterValue,
    ComplexValue,
    IntegerValue,
    LogicalValue,
    MultiArrayValue,
    NullValue,
    RealValue,
    Value,
)

# ###############
# Public Interface
# ###############


def parse_value(text: str, type_hint: str | None = None) -> Value:
    """Parse literal text into a value.

    Args:
        text: Raw literal text, e.g. ``"1.5d0"``, ``".true."`` or ``"'abc'"``.
        type_hint: One of ``"integer"``, ``"real"``, ``"complex"``,
            ``"logical"`` or ``"character"`` to skip detection. Any other hint
            falls back to detection.

    Returns:
        The parsed value. Empty or blank text yields a null value.

    Raises:
        InvalidValueError: If a type hint is given and the text is not a
            valid literal of that type.
    """
    stripped = text.strip()
    if not stripped:
        return NullValue()

    if type_hint is not None:
        parser = _HINTED_PARSERS.get(type_hint.lower())
        if parser is not None:
            return parser(stripped)

    for parser in _DETECTION_ORDER:
        try:
            return parser(stripped)
        except InvalidValueError:
            continue
    return parse_character(stripped)


def parse_integer(text: str) -> IntegerValue:
    """Parse an integer literal, discarding any ``_kind`` suffix.

    Raises:
        InvalidValueError: If the text is not an integer or exceeds 64 bits.
    """
    body = _strip_kind(text.strip())
    if not _INTEGER_RE.fullmatch(body):
        raise InvalidValueError(text, "integer")
    number = int(body)
    if not I64_MIN <= number <= I64_MAX:
        raise InvalidValueError(text, "integer")
    return IntegerValue(number)


def parse_real(text: str) -> RealValue:
    """Parse a real literal.

    Accepts Fortran ``d``/``D`` exponents, a ``_kind`` suffix, and the special
    words ``inf``, ``infinity`` and ``nan`` with an optional sign.

    Raises:
        InvalidValueError: If the text is not a real literal, including when
            it looks like an integer.
    """
    stripped = text.strip()
    if not stripped or looks_like_integer(stripped):
        raise InvalidValueError(text, "real")

    body = _strip_kind(stripped)
    special = _SPECIAL_REALS.get(body.lower())
    if special is not None:
        return RealValue(special)

    normalized = _DOUBLE_MARKER_RE.sub("e", body, count=1)
    if not _REAL_RE.fullmatch(normalized):
        raise InvalidValueError(text, "real")
    return RealValue(float(normalized))


def parse_complex(text: str) -> ComplexValue:
    """Parse a complex literal of the exact form ``(re, im)``.

    Each part may be written as a real or an integer.

    Raises:
        InvalidValueError: On missing parentheses, a missing comma, extra
            components or invalid parts.
    """
    stripped = text.strip()
    if not (stripped.startswith("(") and stripped.endswith(")")):
        raise InvalidValueError(text, "complex")
    parts = stripped[1:-1].split(",")
    if len(parts) != 2:
        raise InvalidValueError(text, "complex")
    try:
        real, imag = (_parse_complex_part(part) for part in parts)
    except InvalidValueError as exc:
        raise InvalidValueError(text, "complex") from exc
    return ComplexValue(real, imag)


def parse_logical(text: str) -> LogicalValue:
    """Parse a logical literal such as ``.true.``, ``.F.``, ``t`` or ``false``.

    Text starting with ``.t`` or ``.f`` is accepted as true or false.

    Raises:
        InvalidValueError: If the text is not a logical literal.
    """
    lowered = text.strip().lower()
    if lowered in _TRUE_WORDS:
        return LogicalValue(True)
    if lowered in _FALSE_WORDS:
        return LogicalValue(False)
    if lowered.startswith(".t"):
        return LogicalValue(True)
    if lowered.startswith(".f"):
        return LogicalValue(False)
    raise InvalidValueError(text, "logical")


def parse_character(text: str) -> CharacterValue:
    """Parse a character literal.

    Quoted text loses its quotes and has doubled quote characters collapsed.
    Unquoted text is kept as is.
    """
    stripped = text.strip()
    if len(stripped) >= 2 and stripped[0] in "'\"" and stripped[-1] == stripped[0]:
        quote = stripped[0]
        return CharacterValue(stripped[1:-1].replace(quote * 2, quote))
    return CharacterValue(stripped)


def looks_like_integer(text: str) -> bool:
    """True for an optional sign followed by digits, ignoring a ``_kind`` suffix."""
    return bool(_INTEGER_RE.fullmatch(_strip_kind(text.strip())))


def looks_like_real(text: str) -> bool:
    try:
        parse_real(text)
    except InvalidValueError:
        return False
    return True


def infer_type(text: str) -> str:
    """Return the type name that detection assigns to ``text``."""
    return parse_value(text).type_name


def parse_repeat_expression(text: str) -> tuple[int, Value]:
    """Parse ``count*value`` repeat notation.

    An empty value (``"3*"``) repeats a null value.

    Raises:
        InvalidValueError: If the text is not a repeat expression or the count is zero.
    """
    split = _split_repeat(text.strip())
    if split is None:
        raise InvalidValueError(text, "repeat expression")
    count, rest = split
    return count, parse_value(rest)


def parse_value_list(text: str, type_hint: str | None = None) -> list[Value]:
    """Parse a comma-separated list of literals.

    Commas inside quotes or parentheses do not split. Empty items and a
    trailing comma produce null values. Repeat expressions are expanded.
    """
    if not text.strip():
        return []
    result: list[Value] = []
    for item in _split_top_level(text):
        stripped = item.strip()
        split = _split_repeat(stripped)
        if split is not None:
            count, rest = split
            result.extend(parse_value(rest, type_hint) for _ in range(count))
        else:
            result.append(parse_value(stripped, type_hint))
    return result


@dataclass(frozen=True)
class ValueConstraints:
    """Optional limits checked by :func:`validate_parsed_value`.

    Attributes:
        integer_range: Inclusive ``(min, max)`` for integers.
        real_range: Inclusive ``(min, max)`` for reals.
        max_string_length: Maximum length of character values.
        max_array_length: Maximum number of array elements.
    """

    integer_range: tuple[int, int] | None = None
    real_range: tuple[float, float] | None = None
    max_string_length: int | None = None
    max_array_length: int | None = None


def validate_parsed_value(value: BaseValue, constraints: ValueConstraints, variable: str | None = None) -> None:
    """Check a value, and every element of an array value, against constraints.

    Raises:
        InvalidValueError: On the first violated constraint.
    """
    if isinstance(value, IntegerValue) and constraints.integer_range is not None:
        low, high = constraints.integer_range
        if not low <= value.value <= high:
            raise InvalidValueError(str(value.value), f"integer in [{low}, {high}]", variable)
    elif isinstance(value, RealValue) and constraints.real_range is not None:
        low, high = constraints.real_range
        if math.isnan(value.value) or not low <= value.value <= high:
            raise InvalidValueError(str(value.value), f"real in [{low}, {high}]", variable)
    elif isinstance(value, CharacterValue) and constraints.max_string_length is not None:
        if len(value.value) > constraints.max_string_length:
            raise InvalidValueError(
                value.summary(), f"character of at most {constraints.max_string_length} characters", variable
            )
    elif isinstance(value, (ArrayValue, MultiArrayValue)):
        if constraints.max_array_length is not None and len(value.values) > constraints.max_array_length:
            raise InvalidValueError(
                value.summary(), f"array of at most {constraints.max_array_length} elements", variable
            )
        for item in value.values:
            validate_parsed_value(item, constraints, variable)


# ################
# Implementation
# ################

_INTEGER_RE = re.compile(r"[+-]?\d+")
_REAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_DOUBLE_MARKER_RE = re.compile(r"[dD]")
_REPEAT_RE = re.compile(r"(\d+)\*(.*)", re.DOTALL)

_TRUE_WORDS = frozenset({".true.", ".t.", "true", "t"})
_FALSE_WORDS = frozenset({".false.", ".f.", "false", "f"})

_SPECIAL_REALS: dict[str, float] = {
    "inf": math.inf,
    "+inf": math.inf,
    "infinity": math.inf,
    "+infinity": math.inf,
    "-inf": -math.inf,
    "-infinity": -math.inf,
    "nan": math.nan,
    "+nan": math.nan,
    "-nan": math.nan,
}


def _strip_kind(text: str) -> str:
    """Drop a trailing ``_kind`` suffix from a numeric literal."""
    head, _, _ = text.partition("_")
    return head


def _parse_complex_part(part: str) -> float:
    stripped = part.strip()
    if looks_like_integer(stripped):
        return float(int(_strip_kind(stripped)))
    return parse_real(stripped).value


def _split_repeat(text: str) -> tuple[int, str] | None:
    match = _REPEAT_RE.fullmatch(text)
    if match is None:
        return None
    count = int(match.group(1))
    if count == 0:
        raise InvalidValueError(text, "repeat count greater than zero")
    return count, match.group(2)


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are outside quotes and parentheses."""
    items: list[str] = []
    current: list[str] = []
    quote: str | None = None
    depth = 0
    for ch in text:
        if quote is not None:
            current.append(ch)
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
            current.append(ch)
        elif ch == "(":
            depth += 1
            current.append(ch)
        elif ch == ")":
            depth = max(0, depth - 1)
            current.append(ch)
        elif ch == "," and depth == 0:
            items.append("".join(current))
            current = []
        else:
            current.append(ch)
    items.append("".join(current))
    return items


_HINTED_PARSERS: dict[str, Callable[[str], Value]] = {
    "integer": parse_integer,
    "real": parse_real,
    "complex": parse_complex,
    "logical": parse_logical,
    "character": parse_character,
}

_DETECTION_ORDER: tuple[Callable[[str], Value], ...] = (
    parse_logical,
    parse_complex,
    parse_real,
    parse_integer,
)
