# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Column-major index utilities for multi-dimensional arrays."""

from nmlkit.indexing.findex import (
    DEFAULT_ORIGIN,
    FIndex,
    IndexBound,
    coordinates,
    linear_index,
    parse_index_spec,
    parse_index_string,
)

__all__ = [
    "DEFAULT_ORIGIN",
    "FIndex",
    "IndexBound",
    "coordinates",
    "linear_index",
    "parse_index_spec",
    "parse_index_string",
]
