# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""The namelist document: an ordered collection of groups."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from nmlkit.errors import DuplicateNameError, GroupNotFoundError
from nmlkit.namelist.group import Group
from nmlkit.namelist.merge import MergeStrategy
from nmlkit.namelist.options import WriteOptions
from nmlkit.namelist.validation import check_namelist
from nmlkit.values.value import Value

# ###############
# Public Interface
# ###############


class Namelist:
    """An ordered collection of named groups.

    Group names are case-insensitive and stored in lowercase. Groups are
    written in first-insertion order unless ``sort_groups`` is requested.
    """

    def __init__(self) -> None:
        self._order: list[str] = []
        self._groups: dict[str, Group] = {}

    # ------------------------------------------------------------------
    # Group access
    # ------------------------------------------------------------------

    def insert_group(self, name: str) -> Group:
        """Return the group called ``name``, creating an empty one if needed."""
        key = name.lower()
        group = self._groups.get(key)
        if group is None:
            group = Group(key)
            self._groups[key] = group
            self._order.append(key)
        return group

    def insert_group_object(self, name: str, group: Group) -> Group:
        """Store ``group`` under ``name``, replacing any group of that name in place."""
        key = name.lower()
        group.name = key
        if key not in self._groups:
            self._order.append(key)
        self._groups[key] = group
        return group

    def add_group(self, name: str, group: Group | None = None) -> Group:
        """Add a group that must not exist yet.

        Raises:
            DuplicateNameError: If a group with that name already exists.
        """
        if self.has_group(name):
            raise DuplicateNameError(name.lower(), "group")
        return self.insert_group_object(name, group if group is not None else Group(name))

    def get_group(self, name: str) -> Group | None:
        return self._groups.get(name.lower())

    def require_group(self, name: str) -> Group:
        """Return the group called ``name``.

        Raises:
            GroupNotFoundError: If there is no such group.
        """
        group = self.get_group(name)
        if group is None:
            raise GroupNotFoundError(name.lower())
        return group

    def has_group(self, name: str) -> bool:
        return name.lower() in self._groups

    def remove_group(self, name: str) -> Group | None:
        key = name.lower()
        group = self._groups.pop(key, None)
        if group is not None:
            self._order.remove(key)
        return group

    def group_names(self) -> list[str]:
        return list(self._order)

    def groups(self) -> Iterator[tuple[str, Group]]:
        """Yield ``(name, group)`` pairs in insertion order."""
        for name in self._order:
            yield name, self._groups[name]

    def get_variable(self, group: str, variable: str) -> Value:
        """Return a variable's value.

        Raises:
            GroupNotFoundError: If the group does not exist.
            VariableNotFoundError: If the variable does not exist in the group.
        """
        return self.require_group(group).require(variable)

    def is_empty(self) -> bool:
        return not self._order

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_group(name)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._order))

    def __getitem__(self, name: str) -> Group:
        return self.require_group(name)

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------

    def apply_patch(self, patch: Namelist, strict: bool = False) -> None:
        """Apply ``patch`` onto this document with the default value merge.

        Groups present on both sides are merged variable by variable; groups
        only in the patch are appended as copies. Not transactional.

        Raises:
            IncompatiblePatchError: If ``strict`` and a patch value's type
                cannot replace the existing value's type.
        """
        self.apply_selective_patch(patch, strict=strict)

    def apply_selective_patch(
        self,
        patch: Namelist,
        include_groups: Iterable[str] | None = None,
        exclude_groups: Iterable[str] | None = None,
        strict: bool = False,
    ) -> None:
        """Apply only the patch groups passing the include/exclude filters.

        Filters compare group names case-insensitively. A group must be in
        ``include_groups`` (when given) and not in ``exclude_groups``.
        """
        include = {name.lower() for name in include_groups} if include_groups is not None else None
        exclude = {name.lower() for name in exclude_groups} if exclude_groups is not None else set()
        for name, patch_group in patch.groups():
            if include is not None and name not in include:
                continue
            if name in exclude:
                continue
            existing = self.get_group(name)
            if existing is None:
                self.insert_group_object(name, patch_group.copy())
            else:
                existing.apply_patch(patch_group, strict=strict)

    def merge_with_strategy(self, other: Namelist, strategy: MergeStrategy) -> None:
        """Merge every group of ``other`` into this document under ``strategy``.

        Groups absent from this document are added as copies for every
        strategy, SKIP_EXISTING included.
        """
        for name, other_group in other.groups():
            existing = self.get_group(name)
            if existing is None:
                self.insert_group_object(name, other_group.copy())
            else:
                existing.merge_with_strategy(other_group, strategy)

    def create_patch_from(self, other: Namelist) -> Namelist:
        """Return a patch holding what ``other`` adds to or changes in this document."""
        patch = Namelist()
        for name, other_group in other.groups():
            existing = self.get_group(name)
            if existing is None:
                patch.insert_group_object(name, other_group.copy())
                continue
            group_patch = existing.create_patch_from(other_group)
            if not group_patch.is_empty():
                patch.insert_group_object(name, group_patch)
        return patch

    # ------------------------------------------------------------------
    # Validation, formatting and copying
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Raise the first structural problem found in the document.

        Raises:
            InvalidValueError: If an array mixes element types.
            DimensionMismatchError: If a multi-array's size does not match its dimensions.
        """
        result = check_namelist(self)
        if result.has_errors:
            raise result.errors[0]

    def to_fortran_string(self, options: WriteOptions | None = None) -> str:
        """Return the canonical text of the document.

        Each group is written as ``&name``, its assignments and a closing
        ``/``; groups are separated by a blank line.
        """
        opts = options or WriteOptions()
        names = sorted(self._order) if opts.sort_groups else self._order
        blocks: list[str] = []
        for name in names:
            header = name.upper() if opts.uppercase else name
            blocks.append(f"&{header}\n{self._groups[name].to_fortran_string(opts)}/\n")
        return "\n".join(blocks)

    def copy(self) -> Namelist:
        """Return a deep copy of the document."""
        clone = Namelist()
        for name, group in self.groups():
            clone.insert_group_object(name, group.copy())
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Namelist):
            return NotImplemented
        return self._order == other._order and self._groups == other._groups

    def __str__(self) -> str:
        return self.to_fortran_string()

    def __repr__(self) -> str:
        return f"Namelist(groups={self._order!r})"
