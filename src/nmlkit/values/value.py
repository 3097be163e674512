# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Dynamically-typed namelist values.

A namelist value is one of a closed set of variants, modelled as pydantic
models tagged by a ``kind`` discriminator. Conversions between variants are
explicit and fallible; ``can_convert_to`` answers the same question without
performing the conversion.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

from nmlkit.errors import DimensionMismatchError, TypeConversionError
from nmlkit.indexing.findex import DEFAULT_ORIGIN, FIndex, IndexBound, linear_index

if TYPE_CHECKING:
    from nmlkit.values.formatting import FormatOptions

# ###############
# Public Interface
# ###############

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

TYPE_NAMES: tuple[str, ...] = (
    "integer",
    "real",
    "complex",
    "logical",
    "character",
    "array",
    "multi_array",
    "derived_type",
    "derived_type_array",
    "null",
)


class BaseValue(BaseModel):
    """Behaviour shared by every value variant.

    Conversions raise :class:`TypeConversionError` unless the variant
    overrides them with a supported conversion.
    """

    kind: str

    @property
    def type_name(self) -> str:
        """Stable lowercase name of the variant, e.g. ``"integer"`` or ``"multi_array"``."""
        return self.kind

    @property
    def is_numeric(self) -> bool:
        return self.kind in ("integer", "real", "complex")

    @property
    def is_array(self) -> bool:
        return self.kind in ("array", "multi_array", "derived_type_array")

    @property
    def is_null(self) -> bool:
        return self.kind == "null"

    def array_len(self) -> int | None:
        """Number of elements for array-like values, None for scalars."""
        return None

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def as_integer(self) -> int:
        raise self._conversion_error("integer")

    def as_real(self) -> float:
        raise self._conversion_error("real")

    def as_complex(self) -> complex:
        raise self._conversion_error("complex")

    def as_logical(self) -> bool:
        raise self._conversion_error("logical")

    def as_character(self) -> str:
        raise self._conversion_error("character")

    def as_array(self) -> list[Value]:
        raise self._conversion_error("array")

    def can_convert_to(self, target: str) -> bool:
        """Return True if converting to ``target`` (a type name) would succeed."""
        return target == self.kind

    def _conversion_error(self, target: str) -> TypeConversionError:
        return TypeConversionError(self.kind, target, self.summary())

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def summary(self) -> str:
        """Short diagnostic description such as ``integer(1)`` or ``array[3]``."""
        return self.kind

    def to_python(self) -> Any:
        """Return the equivalent plain Python object."""
        raise NotImplementedError

    def to_fortran_string(self, options: FormatOptions | None = None) -> str:
        """Format the value as namelist text."""
        from nmlkit.values.formatting import format_value

        return format_value(self, options)

    def copy_value(self) -> Value:
        """Return an independent deep copy."""
        return self.model_copy(deep=True)  # type: ignore[return-value]

    def __str__(self) -> str:
        return self.to_fortran_string()


class IntegerValue(BaseValue):
    """A 64-bit signed integer."""

    kind: Literal["integer"] = "integer"
    value: int = _Field(ge=I64_MIN, le=I64_MAX)

    def __init__(self, value: int, **data: Any) -> None:
        super().__init__(value=value, **data)

    def as_integer(self) -> int:
        return self.value

    def as_real(self) -> float:
        return float(self.value)

    def as_complex(self) -> complex:
        return complex(self.value, 0.0)

    def can_convert_to(self, target: str) -> bool:
        return target in ("integer", "real", "complex")

    def summary(self) -> str:
        return f"integer({self.value})"

    def to_python(self) -> int:
        return self.value


class RealValue(BaseValue):
    """A 64-bit float. Infinities and NaN are allowed."""

    kind: Literal["real"] = "real"
    value: float

    def __init__(self, value: float, **data: Any) -> None:
        super().__init__(value=value, **data)

    def as_integer(self) -> int:
        if not _is_integral(self.value):
            raise self._conversion_error("integer")
        return int(self.value)

    def as_real(self) -> float:
        return self.value

    def as_complex(self) -> complex:
        return complex(self.value, 0.0)

    def can_convert_to(self, target: str) -> bool:
        if target in ("real", "complex"):
            return True
        return target == "integer" and _is_integral(self.value)

    def summary(self) -> str:
        return f"real({self.value:.6f})"

    def to_python(self) -> float:
        return self.value


class ComplexValue(BaseValue):
    """A complex number stored as two floats."""

    kind: Literal["complex"] = "complex"
    real: float
    imag: float

    def __init__(self, real: float, imag: float, **data: Any) -> None:
        super().__init__(real=real, imag=imag, **data)

    @property
    def value(self) -> complex:
        return complex(self.real, self.imag)

    def as_complex(self) -> complex:
        return self.value

    def summary(self) -> str:
        return f"complex({self.real:.6f}, {self.imag:.6f})"

    def to_python(self) -> complex:
        return self.value


class LogicalValue(BaseValue):
    """A boolean."""

    kind: Literal["logical"] = "logical"
    value: bool

    def __init__(self, value: bool, **data: Any) -> None:
        super().__init__(value=value, **data)

    def as_logical(self) -> bool:
        return self.value

    def summary(self) -> str:
        return f"logical({'true' if self.value else 'false'})"

    def to_python(self) -> bool:
        return self.value


class CharacterValue(BaseValue):
    """A character string, stored unquoted."""

    kind: Literal["character"] = "character"
    value: str

    def __init__(self, value: str, **data: Any) -> None:
        super().__init__(value=value, **data)

    def as_character(self) -> str:
        return self.value

    def summary(self) -> str:
        text = self.value if len(self.value) <= 20 else self.value[:17] + "..."
        return f'character("{text}")'

    def to_python(self) -> str:
        return self.value


class ArrayValue(BaseValue):
    """An ordered sequence of values.

    Elements are expected to share a type, but this is only checked by
    validation. Null elements mark gaps in sparse arrays.
    """

    kind: Literal["array"] = "array"
    values: list[Value] = _Field(default_factory=list)

    def __init__(self, values: Sequence[Any] = (), **data: Any) -> None:
        super().__init__(values=[to_value(item) for item in values], **data)

    def array_len(self) -> int:
        return len(self.values)

    def as_array(self) -> list[Value]:
        return list(self.values)

    def summary(self) -> str:
        return f"array[{len(self.values)}]"

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.values]


class MultiArrayValue(BaseValue):
    """A multi-dimensional array stored flat in column-major order.

    The flat element count should equal the product of ``dimensions``;
    this is checked by :meth:`validate_shape`, not at construction.
    """

    kind: Literal["multi_array"] = "multi_array"
    values: list[Value] = _Field(default_factory=list)
    dimensions: list[int]
    start_indices: list[int]

    def __init__(
        self,
        values: Sequence[Any],
        dimensions: Sequence[int],
        start_indices: Sequence[int] | None = None,
        **data: Any,
    ) -> None:
        if start_indices is None:
            start_indices = [DEFAULT_ORIGIN] * len(dimensions)
        super().__init__(
            values=[to_value(item) for item in values],
            dimensions=list(dimensions),
            start_indices=list(start_indices),
            **data,
        )

    @property
    def rank(self) -> int:
        return len(self.dimensions)

    @property
    def expected_len(self) -> int:
        return math.prod(self.dimensions)

    def array_len(self) -> int:
        return len(self.values)

    def as_array(self) -> list[Value]:
        return list(self.values)

    def element_at(self, *indices: int) -> Value:
        """Return the element at a Fortran index tuple.

        Raises:
            InvalidIndexError: If the tuple has the wrong rank or lies out of bounds.
        """
        return self.values[linear_index(indices, self.dimensions, self.start_indices)]

    def set_element(self, indices: Sequence[int], value: Any) -> None:
        """Replace the element at a Fortran index tuple.

        Raises:
            InvalidIndexError: If the tuple has the wrong rank or lies out of bounds.
        """
        self.values[linear_index(indices, self.dimensions, self.start_indices)] = to_value(value)

    def iter_indexed(self) -> Iterator[tuple[tuple[int, ...], Value]]:
        """Yield ``(index_tuple, element)`` pairs in column-major order."""
        bounds = [
            IndexBound.range(origin, origin + extent - 1) for origin, extent in zip(self.start_indices, self.dimensions)
        ]
        return zip(FIndex(bounds), self.values)

    def validate_shape(self, variable: str = "") -> None:
        """Raise if the flat element count does not match the dimensions.

        Raises:
            DimensionMismatchError: On a size mismatch or a start-index rank mismatch.
        """
        if len(self.start_indices) != len(self.dimensions):
            raise DimensionMismatchError(
                variable, f"{len(self.dimensions)} start indices", f"{len(self.start_indices)}"
            )
        if self.expected_len != len(self.values):
            raise DimensionMismatchError(
                variable, f"{self.expected_len} elements ({self._shape_text()})", f"{len(self.values)}"
            )

    def summary(self) -> str:
        return f"multi_array[{self._shape_text()}]"

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.values]

    def _shape_text(self) -> str:
        return "x".join(str(extent) for extent in self.dimensions)


class DerivedTypeValue(BaseValue):
    """A derived-type instance: a mapping of field names to values."""

    kind: Literal["derived_type"] = "derived_type"
    fields: dict[str, Value] = _Field(default_factory=dict)

    def __init__(self, fields: Mapping[str, Any] | None = None, **data: Any) -> None:
        converted = {name.lower(): to_value(item) for name, item in (fields or {}).items()}
        super().__init__(fields=converted, **data)

    def get_field(self, name: str) -> Value | None:
        return self.fields.get(name.lower())

    def set_field(self, name: str, value: Any) -> None:
        self.fields[name.lower()] = to_value(value)

    def summary(self) -> str:
        return f"derived_type{{{len(self.fields)} fields}}"

    def to_python(self) -> dict[str, Any]:
        return {name: item.to_python() for name, item in self.fields.items()}


class DerivedTypeArrayValue(BaseValue):
    """An array of derived-type instances, each a field mapping."""

    kind: Literal["derived_type_array"] = "derived_type_array"
    elements: list[dict[str, Value]] = _Field(default_factory=list)

    def __init__(self, elements: Sequence[Mapping[str, Any]] = (), **data: Any) -> None:
        converted = [{name.lower(): to_value(item) for name, item in element.items()} for element in elements]
        super().__init__(elements=converted, **data)

    def array_len(self) -> int:
        return len(self.elements)

    def summary(self) -> str:
        return f"derived_type_array[{len(self.elements)}]"

    def to_python(self) -> list[dict[str, Any]]:
        return [{name: item.to_python() for name, item in element.items()} for element in self.elements]


class NullValue(BaseValue):
    """Absence of a value, distinct from zero or an empty string."""

    kind: Literal["null"] = "null"

    def summary(self) -> str:
        return "null"

    def to_python(self) -> None:
        return None


# A namelist value: one of the variants above, discriminated by `kind`.
Value = Annotated[
    IntegerValue
    | RealValue
    | ComplexValue
    | LogicalValue
    | CharacterValue
    | ArrayValue
    | MultiArrayValue
    | DerivedTypeValue
    | DerivedTypeArrayValue
    | NullValue,
    _Field(discriminator="kind"),
]


def to_value(obj: Any) -> Value:
    """Convert a plain Python object to a namelist value.

    ``bool`` maps to logical, ``int`` to integer, ``float`` to real,
    ``complex`` to complex, ``str`` to character, ``None`` to null, lists and
    tuples to arrays and mappings to derived types. Values pass through.

    Raises:
        TypeConversionError: If the object has no namelist equivalent.
    """
    if isinstance(obj, BaseValue):
        return obj  # type: ignore[return-value]
    if isinstance(obj, bool):
        return LogicalValue(obj)
    if isinstance(obj, int):
        if not I64_MIN <= obj <= I64_MAX:
            raise TypeConversionError("int", "integer", str(obj))
        return IntegerValue(obj)
    if isinstance(obj, float):
        return RealValue(obj)
    if isinstance(obj, complex):
        return ComplexValue(obj.real, obj.imag)
    if isinstance(obj, str):
        return CharacterValue(obj)
    if obj is None:
        return NullValue()
    if isinstance(obj, Mapping):
        return DerivedTypeValue(obj)
    if isinstance(obj, (list, tuple)):
        return ArrayValue(obj)
    raise TypeConversionError(type(obj).__name__, "value", repr(obj))


# ################
# Implementation
# ################


def _is_integral(value: float) -> bool:
    """True if a float has no fractional part and fits in 64 bits."""
    return math.isfinite(value) and value.is_integer() and I64_MIN <= value <= I64_MAX


ArrayValue.model_rebuild()
MultiArrayValue.model_rebuild()
DerivedTypeValue.model_rebuild()
DerivedTypeArrayValue.model_rebuild()
