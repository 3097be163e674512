# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Combining two values when one document is applied onto another.

The functions here are pure: they return the value to store and never
mutate their arguments. They are not associative, so applying the same
patches under different strategies in a different order can give different
results.
"""

from __future__ import annotations

from enum import Enum

from nmlkit.errors import IncompatiblePatchError
from nmlkit.values.value import (
    ArrayValue,
    BaseValue,
    DerivedTypeValue,
    MultiArrayValue,
    Value,
)

# ###############
# Public Interface
# ###############


class MergeStrategy(Enum):
    """How a variable present on both sides of a merge is combined.

    REPLACE and UPDATE overwrite unconditionally. APPEND concatenates arrays
    and promotes scalars into arrays. SKIP_EXISTING keeps the existing value
    and only fills in names that are absent.
    """

    REPLACE = "replace"
    UPDATE = "update"
    APPEND = "append"
    SKIP_EXISTING = "skip_existing"


def merge_values(existing: Value, incoming: Value) -> Value:
    """Default merge used when applying a patch.

    - Derived type onto derived type: field-wise union, incoming fields win.
    - Incoming scalar: replaces the existing value.
    - Array onto array: the incoming array replaces the existing one.
    - Scalar onto which an array is merged: the scalar becomes the first
      element, followed by the incoming elements.
    - Anything else: the incoming value replaces the existing one.
    """
    if isinstance(existing, DerivedTypeValue) and isinstance(incoming, DerivedTypeValue):
        fields = dict(existing.fields)
        fields.update(incoming.fields)
        return DerivedTypeValue(fields)
    if not isinstance(incoming, (ArrayValue, MultiArrayValue)):
        return incoming
    if isinstance(existing, (ArrayValue, MultiArrayValue)):
        return incoming
    if isinstance(incoming, ArrayValue) and is_scalar(existing):
        return ArrayValue([existing, *incoming.values])
    return incoming


def append_values(existing: Value, incoming: Value) -> Value:
    """Merge used by the APPEND strategy.

    - Array + array: concatenation.
    - Array + scalar: the scalar is pushed onto the array.
    - Scalar + scalar: a two-element array.
    - Scalar + array: the scalar followed by the incoming elements.
    - Anything else: the incoming value replaces the existing one.
    """
    if isinstance(existing, ArrayValue):
        if isinstance(incoming, ArrayValue):
            return ArrayValue([*existing.values, *incoming.values])
        if is_scalar(incoming):
            return ArrayValue([*existing.values, incoming])
        return incoming
    if is_scalar(existing):
        if isinstance(incoming, ArrayValue):
            return ArrayValue([existing, *incoming.values])
        if is_scalar(incoming):
            return ArrayValue([existing, incoming])
    return incoming


def merge_value(existing: Value | None, incoming: Value, strategy: MergeStrategy) -> Value:
    """Combine an optional existing value with an incoming one under ``strategy``."""
    if existing is None:
        return incoming
    if strategy == MergeStrategy.APPEND:
        return append_values(existing, incoming)
    if strategy == MergeStrategy.SKIP_EXISTING:
        return existing
    return incoming


def is_scalar(value: BaseValue) -> bool:
    """True for integer, real, complex, logical and character values."""
    return value.type_name in _SCALAR_TYPES


def check_patch_compatibility(
    existing: Value,
    incoming: Value,
    variable: str,
    group: str | None = None,
) -> None:
    """Raise if ``incoming`` cannot sensibly be patched over ``existing``.

    A patch is compatible when the types match, when the incoming value
    converts to the existing type, when either side is null, when both are
    array-like, or when every element of an incoming array converts to the
    type of an existing scalar.

    Raises:
        IncompatiblePatchError: If none of the rules above hold.
    """
    if existing.is_null or incoming.is_null:
        return
    if existing.type_name == incoming.type_name or incoming.can_convert_to(existing.type_name):
        return
    if existing.is_array and incoming.is_array:
        return
    if is_scalar(existing) and isinstance(incoming, ArrayValue):
        if all(item.is_null or item.can_convert_to(existing.type_name) for item in incoming.values):
            return
    raise IncompatiblePatchError(variable, existing.type_name, incoming.type_name, group)


# ################
# Implementation
# ################

_SCALAR_TYPES = frozenset({"integer", "real", "complex", "logical", "character"})
