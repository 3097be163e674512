# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural checks on namelist documents.

The checks do not interpret what a variable means. They only look for
arrays whose elements disagree in type and multi-dimensional arrays whose
element count does not match their dimensions.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nmlkit.errors import DimensionMismatchError, InvalidValueError, NamelistError
from nmlkit.values.value import (
    ArrayValue,
    BaseValue,
    DerivedTypeArrayValue,
    DerivedTypeValue,
    MultiArrayValue,
)

if TYPE_CHECKING:
    from nmlkit.namelist.document import Namelist

# ###############
# Public Interface
# ###############


@dataclass
class ValidationResult:
    """Result of running structural checks over a whole document.

    Attributes:
        errors: Every problem found, in document order.
    """

    errors: list[NamelistError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any problems were found."""
        return len(self.errors) > 0


def check_namelist(namelist: Namelist) -> ValidationResult:
    """Run every check on every variable of every group.

    Unlike :meth:`Namelist.validate`, this collects all problems instead
    of raising the first one.
    """
    errors: list[NamelistError] = []
    for group_name, group in namelist.groups():
        for name, value in group.variables():
            errors.extend(check_value(value, group_name, name))
    return ValidationResult(errors=errors)


def check_value(value: BaseValue, group: str, variable: str) -> list[NamelistError]:
    """Return the problems found in one variable's value.

    Arrays must not mix element types, except that null elements are
    allowed anywhere. Multi-arrays must hold exactly as many elements as
    their dimensions imply. Derived-type fields are checked recursively.
    """
    path = f"{group}%{variable}"
    if isinstance(value, ArrayValue):
        return _check_array_types(value, path, group)
    if isinstance(value, MultiArrayValue):
        problems = _check_array_types(value, path, group)
        try:
            value.validate_shape(path)
        except DimensionMismatchError as exc:
            exc.group = group
            problems.append(exc)
        return problems
    if isinstance(value, DerivedTypeValue):
        return _check_fields(value.fields, group, variable)
    if isinstance(value, DerivedTypeArrayValue):
        element_problems: list[NamelistError] = []
        for position, element in enumerate(value.elements, start=1):
            element_problems.extend(_check_fields(element, group, f"{variable}({position})"))
        return element_problems
    return []


# ################
# Implementation
# ################


def _check_array_types(value: ArrayValue | MultiArrayValue, path: str, group: str) -> list[NamelistError]:
    problems: list[NamelistError] = []
    present = [item for item in value.values if not item.is_null]
    if not present:
        return problems
    first_type = present[0].type_name
    for item in present[1:]:
        if item.type_name != first_type:
            problems.append(InvalidValueError(item.summary(), first_type, path, group))
    return problems


def _check_fields(fields: Mapping[str, BaseValue], group: str, variable: str) -> list[NamelistError]:
    problems: list[NamelistError] = []
    for field_name, field_value in fields.items():
        problems.extend(check_value(field_value, group, f"{variable}%{field_name}"))
    return problems
