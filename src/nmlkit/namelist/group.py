# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""A single namelist group: an ordered collection of variable assignments."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from operator import methodcaller
from typing import Any, TypeVar

from nmlkit.errors import DuplicateNameError, TypeConversionError, VariableNotFoundError
from nmlkit.namelist.merge import MergeStrategy, check_patch_compatibility, merge_value, merge_values
from nmlkit.namelist.options import WriteOptions
from nmlkit.namelist.validation import check_value
from nmlkit.values.formatting import format_element
from nmlkit.values.value import (
    ArrayValue,
    BaseValue,
    DerivedTypeArrayValue,
    DerivedTypeValue,
    MultiArrayValue,
    Value,
    to_value,
)

# ###############
# Public Interface
# ###############


class Group:
    """A named, ordered collection of variables.

    Group and variable names are case-insensitive and stored in lowercase.
    Insertion order is the output order. Re-inserting an existing name
    replaces its value in place without moving it.

    Besides values, a group keeps two kinds of per-variable metadata: the
    start indices of arrays whose origin is not the default, and inline
    comments.
    """

    def __init__(self, name: str = "") -> None:
        self._name = name.lower()
        self._order: list[str] = []
        self._variables: dict[str, Value] = {}
        self._start_indices: dict[str, list[int]] = {}
        self._comments: dict[str, str] = {}

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value.lower()

    # ------------------------------------------------------------------
    # Variable access
    # ------------------------------------------------------------------

    def insert(self, name: str, value: Any) -> Group:
        """Set a variable, converting plain Python objects to values.

        Returns the group so that calls can be chained.
        """
        key = name.lower()
        if key not in self._variables:
            self._order.append(key)
        self._variables[key] = to_value(value)
        return self

    def insert_with_comment(self, name: str, value: Any, comment: str) -> Group:
        self.insert(name, value)
        self.set_comment(name, comment)
        return self

    def add(self, name: str, value: Any) -> Group:
        """Insert a variable that must not exist yet.

        Raises:
            DuplicateNameError: If the variable already exists.
        """
        if self.has_variable(name):
            raise DuplicateNameError(name.lower(), "variable", self._name)
        return self.insert(name, value)

    def get(self, name: str) -> Value | None:
        return self._variables.get(name.lower())

    def require(self, name: str) -> Value:
        """Return a variable's value.

        Raises:
            VariableNotFoundError: If the variable does not exist.
        """
        value = self.get(name)
        if value is None:
            raise VariableNotFoundError(name.lower(), self._name)
        return value

    def has_variable(self, name: str) -> bool:
        return name.lower() in self._variables

    def remove(self, name: str) -> Value | None:
        """Remove a variable together with its metadata and return its value."""
        key = name.lower()
        value = self._variables.pop(key, None)
        if value is not None:
            self._order.remove(key)
            self._start_indices.pop(key, None)
            self._comments.pop(key, None)
        return value

    def variable_names(self) -> list[str]:
        return list(self._order)

    def variables(self) -> Iterator[tuple[str, Value]]:
        """Yield ``(name, value)`` pairs in insertion order."""
        for name in self._order:
            yield name, self._variables[name]

    def is_empty(self) -> bool:
        return not self._order

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_variable(name)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._order))

    def __getitem__(self, name: str) -> Value:
        return self.require(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.insert(name, value)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def set_start_indices(self, name: str, indices: Sequence[int]) -> None:
        self._start_indices[name.lower()] = list(indices)

    def get_start_indices(self, name: str) -> list[int] | None:
        indices = self._start_indices.get(name.lower())
        return list(indices) if indices is not None else None

    def set_comment(self, name: str, comment: str) -> None:
        self._comments[name.lower()] = comment

    def get_comment(self, name: str) -> str | None:
        return self._comments.get(name.lower())

    # ------------------------------------------------------------------
    # Typed getters
    # ------------------------------------------------------------------

    def get_integer(self, name: str) -> int | None:
        """Return the variable as an int, or None if missing or not convertible."""
        return self._get_converted(name, methodcaller("as_integer"))

    def get_real(self, name: str) -> float | None:
        return self._get_converted(name, methodcaller("as_real"))

    def get_complex(self, name: str) -> complex | None:
        return self._get_converted(name, methodcaller("as_complex"))

    def get_logical(self, name: str) -> bool | None:
        return self._get_converted(name, methodcaller("as_logical"))

    def get_character(self, name: str) -> str | None:
        return self._get_converted(name, methodcaller("as_character"))

    def get_array(self, name: str) -> list[Value] | None:
        return self._get_converted(name, methodcaller("as_array"))

    def _get_converted(self, name: str, convert: Callable[[BaseValue], _T]) -> _T | None:
        value = self.get(name)
        if value is None:
            return None
        try:
            return convert(value)
        except TypeConversionError:
            return None

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------

    def apply_patch(self, patch: Group, strict: bool = False) -> None:
        """Merge every variable of ``patch`` into this group with the default merge.

        New variables are appended. Start indices and comments present in the
        patch replace those of this group. The operation is not transactional:
        if strict checking fails part way through, earlier variables have
        already been updated.

        Raises:
            IncompatiblePatchError: If ``strict`` and a patch value's type
                cannot replace the existing value's type.
        """
        for name, incoming in patch.variables():
            incoming = incoming.copy_value()
            existing = self.get(name)
            if existing is None:
                self.insert(name, incoming)
            else:
                if strict:
                    check_patch_compatibility(existing, incoming, name, self._name)
                self._variables[name] = merge_values(existing, incoming)
            self._copy_metadata_from(patch, name)

    def merge_with_strategy(self, other: Group, strategy: MergeStrategy) -> None:
        """Merge every variable of ``other`` into this group under ``strategy``.

        With SKIP_EXISTING, existing variables keep their values and metadata.
        """
        for name, incoming in other.variables():
            existing = self.get(name)
            if strategy == MergeStrategy.SKIP_EXISTING and existing is not None:
                continue
            self.insert(name, merge_value(existing, incoming.copy_value(), strategy))
            self._copy_metadata_from(other, name)

    def create_patch_from(self, other: Group) -> Group:
        """Return the variables of ``other`` that are new or differ from this group.

        Applying the result to this group reproduces the scalar values of ``other``.
        """
        patch = Group(self._name)
        for name, other_value in other.variables():
            if self.get(name) != other_value:
                patch.insert(name, other_value.copy_value())
                patch._copy_metadata_from(other, name)
        return patch

    def _copy_metadata_from(self, other: Group, name: str) -> None:
        indices = other.get_start_indices(name)
        if indices is not None:
            self.set_start_indices(name, indices)
        comment = other.get_comment(name)
        if comment is not None:
            self.set_comment(name, comment)

    # ------------------------------------------------------------------
    # Validation, formatting and copying
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check every array for mixed element types and every multi-array for its shape.

        Raises:
            InvalidValueError: If an array mixes element types.
            DimensionMismatchError: If a multi-array's size does not match its dimensions.
        """
        for name, value in self.variables():
            problems = check_value(value, self._name, name)
            if problems:
                raise problems[0]

    def to_fortran_string(self, options: WriteOptions | None = None) -> str:
        """Return the group body (assignments only, no ``&name``/``/`` delimiters)."""
        return "".join(line + "\n" for line in self.format_lines(options))

    def format_lines(self, options: WriteOptions | None = None) -> list[str]:
        """Return one or more formatted lines per variable."""
        opts = options or WriteOptions()
        names = sorted(self._order) if opts.sort_variables else self._order
        lines: list[str] = []
        for name in names:
            lines.extend(
                format_assignment(
                    name,
                    self._variables[name],
                    opts,
                    start_indices=self._start_indices.get(name),
                    comment=self._comments.get(name),
                )
            )
        return lines

    def copy(self) -> Group:
        """Return a deep copy of the group, values and metadata included."""
        clone = Group(self._name)
        clone._order = list(self._order)
        clone._variables = {name: value.copy_value() for name, value in self._variables.items()}
        clone._start_indices = {name: list(indices) for name, indices in self._start_indices.items()}
        clone._comments = dict(self._comments)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Group):
            return NotImplemented
        return (
            self._name == other._name
            and self._order == other._order
            and self._variables == other._variables
            and self._start_indices == other._start_indices
            and self._comments == other._comments
        )

    def __repr__(self) -> str:
        return f"Group(name={self._name!r}, variables={self._order!r})"


def format_assignment(
    name: str,
    value: BaseValue,
    options: WriteOptions | None = None,
    start_indices: Sequence[int] | None = None,
    comment: str | None = None,
    array_bounds: bool = True,
) -> list[str]:
    """Format one variable assignment as one or more indented lines.

    Arrays are written as ``name(start:end) = v1, v2, ...`` and wrapped at
    ``options.column_width``; with ``array_bounds`` false they are written as
    plain ``name = v1, v2, ...``. Derived types expand into one
    ``name%field = value`` line per field.
    """
    opts = options or WriteOptions()
    fmt = opts.format_options()
    target = name.upper() if opts.uppercase else name

    if isinstance(value, DerivedTypeValue):
        lines: list[str] = []
        for field, field_value in value.fields.items():
            lines.extend(format_assignment(f"{name}%{field}", field_value, opts, array_bounds=array_bounds))
    elif isinstance(value, DerivedTypeArrayValue):
        lines = []
        for position, element in enumerate(value.elements):
            index = opts.default_start_index + position
            for field, field_value in element.items():
                lines.extend(
                    format_assignment(f"{name}({index})%{field}", field_value, opts, array_bounds=array_bounds)
                )
    elif isinstance(value, MultiArrayValue) and array_bounds:
        spec = ", ".join(
            f"{start}:{start + extent - 1}" for start, extent in zip(value.start_indices, value.dimensions)
        )
        parts = [format_element(item, fmt) for item in value.values]
        lines = _wrap_values(f"{opts.indent}{target}({spec}) = ", parts, opts.column_width)
    elif isinstance(value, ArrayValue) and array_bounds:
        if not value.values:
            lines = [f"{opts.indent}{target} ="]
        else:
            start = start_indices[0] if start_indices else opts.default_start_index
            parts = [format_element(item, fmt) for item in value.values]
            header = f"{opts.indent}{target}({start}:{start + len(parts) - 1}) = "
            lines = _wrap_values(header, parts, opts.column_width)
    else:
        index = ""
        if start_indices and not value.is_array:
            index = "(" + ", ".join(str(i) for i in start_indices) + ")"
        lines = [f"{opts.indent}{target}{index} = {value.to_fortran_string(fmt)}".rstrip()]

    if not lines:
        return lines
    # An array ending in a null already ends with a comma.
    expands = isinstance(value, (DerivedTypeValue, DerivedTypeArrayValue))
    if opts.end_comma and not expands and not lines[-1].endswith(","):
        lines[-1] += ","
    if comment:
        lines[-1] += "  " + _comment_text(comment)
    return lines


# ################
# Implementation
# ################

_T = TypeVar("_T")


def _wrap_values(prefix: str, parts: Sequence[str], column_width: int) -> list[str]:
    """Lay out comma-separated parts after ``prefix``, wrapping at ``column_width``.

    Continuation lines are aligned under the first value. An empty part is
    a null and always keeps its comma, so that a trailing null survives.
    """
    continuation = " " * len(prefix)
    lines: list[str] = []
    current = prefix
    first_on_line = True
    for position, part in enumerate(parts):
        piece = part + ("," if position < len(parts) - 1 or not part else "")
        if first_on_line:
            current += piece
        elif len(current) + 1 + len(piece) > column_width:
            lines.append(current)
            current = continuation + piece
        else:
            current += " " + piece
        first_on_line = False
    lines.append(current.rstrip())
    return lines


def _comment_text(comment: str) -> str:
    if comment.startswith(("!", "#")):
        return comment
    return f"! {comment}"
