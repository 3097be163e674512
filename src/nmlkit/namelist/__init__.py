# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Namelist document model: groups, documents, merging and validation."""

from nmlkit.namelist.document import Namelist
from nmlkit.namelist.group import Group, format_assignment
from nmlkit.namelist.merge import MergeStrategy, append_values, merge_value, merge_values
from nmlkit.namelist.options import WriteOptions
from nmlkit.namelist.validation import ValidationResult, check_namelist

__all__ = [
    "Group",
    "MergeStrategy",
    "Namelist",
    "ValidationResult",
    "WriteOptions",
    "append_values",
    "check_namelist",
    "format_assignment",
    "merge_value",
    "merge_values",
]
