# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Column-major multi-dimensional index enumeration.

Fortran stores arrays column-major: the leftmost index varies fastest. The
iterator here enumerates index tuples in that order and converts between
index tuples and flat positions in the same order.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from nmlkit.errors import InvalidIndexError

# ###############
# Public Interface
# ###############

DEFAULT_ORIGIN = 1


@dataclass(frozen=True)
class IndexBound:
    """One dimension of an index expression ``start:end:stride``.

    Any component may be omitted. A missing start or stride is filled in by
    the consumer; a missing end means the extent is unknown.
    """

    start: int | None = None
    end: int | None = None
    stride: int | None = None

    @classmethod
    def range(cls, start: int, end: int, stride: int | None = None) -> IndexBound:
        return cls(start, end, stride)

    @classmethod
    def single(cls, index: int) -> IndexBound:
        return cls(index, index, None)

    @classmethod
    def implicit(cls) -> IndexBound:
        return cls()

    @property
    def is_single(self) -> bool:
        return self.start is not None and self.start == self.end and self.stride is None

    def effective_start(self, default: int = DEFAULT_ORIGIN) -> int:
        return self.start if self.start is not None else default

    def effective_stride(self) -> int:
        return self.stride if self.stride is not None else 1

    def size(self, default_start: int = DEFAULT_ORIGIN) -> int | None:
        """Return the number of indices in this dimension, or None if the end is open."""
        if self.end is None:
            return None
        start = self.effective_start(default_start)
        stride = self.effective_stride()
        if stride == 0:
            return None
        if stride > 0:
            return max(0, (self.end - start) // stride + 1)
        return max(0, (start - self.end) // -stride + 1)

    def __str__(self) -> str:
        if self.is_single:
            return str(self.start)
        text = f"{'' if self.start is None else self.start}:{'' if self.end is None else self.end}"
        if self.stride is not None:
            text += f":{self.stride}"
        return text


class FIndex:
    """Iterator over index tuples in column-major order.

    Args:
        bounds: One bound per dimension.
        global_start: Origin used for dimensions without an explicit start.
            When given, it also lowers the origin used for linear index
            conversion in dimensions that start above it.

    Example:
        >>> list(FIndex([IndexBound.range(1, 2), IndexBound.range(1, 3)]))
        [(1, 1), (2, 1), (1, 2), (2, 2), (1, 3), (2, 3)]
    """

    def __init__(self, bounds: Sequence[IndexBound], global_start: int | None = None) -> None:
        default = global_start if global_start is not None else DEFAULT_ORIGIN
        self._bounds = list(bounds)
        self._starts = [bound.effective_start(default) for bound in self._bounds]
        self._ends = [bound.end if bound.end is not None else start for bound, start in zip(self._bounds, self._starts)]
        self._strides = [bound.effective_stride() for bound in self._bounds]
        if global_start is not None:
            self._first = [min(start, global_start) for start in self._starts]
        else:
            self._first = list(self._starts)
        self._current: list[int] = []
        self._exhausted = False
        self.reset()

    @property
    def rank(self) -> int:
        return len(self._bounds)

    @property
    def bounds(self) -> list[IndexBound]:
        return list(self._bounds)

    @property
    def current(self) -> tuple[int, ...] | None:
        """The index tuple the next call to ``next()`` will return, or None when exhausted."""
        if self._exhausted:
            return None
        return tuple(self._current)

    @property
    def start_indices(self) -> tuple[int, ...]:
        """Per-dimension origin used for linear index conversion."""
        return tuple(self._first)

    def reset(self) -> None:
        """Rewind the iterator to the first index tuple."""
        self._current = list(self._starts)
        self._exhausted = any(
            (stride > 0 and start > end) or (stride < 0 and start < end)
            for start, end, stride in zip(self._starts, self._ends, self._strides)
        )

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        return self

    def __next__(self) -> tuple[int, ...]:
        if self._exhausted:
            raise StopIteration
        result = tuple(self._current)
        self._advance()
        return result

    def to_linear_index(self, indices: Sequence[int], dimensions: Sequence[int]) -> int:
        """Convert an index tuple to its 0-based column-major position.

        Raises:
            InvalidIndexError: If the rank does not match or an index is out of bounds.
        """
        if len(dimensions) != self.rank:
            raise InvalidIndexError(_format_tuple(indices), f"expected {self.rank} dimension(s), got {len(dimensions)}")
        return linear_index(indices, dimensions, self._first)

    def from_linear_index(self, linear: int, dimensions: Sequence[int]) -> tuple[int, ...]:
        """Convert a 0-based column-major position back to an index tuple.

        Raises:
            InvalidIndexError: If the rank does not match or the position is out of range.
        """
        if len(dimensions) != self.rank:
            raise InvalidIndexError(str(linear), f"expected {self.rank} dimension(s), got {len(dimensions)}")
        return coordinates(linear, dimensions, self._first)

    def _advance(self) -> None:
        """Step to the next tuple: the first dimension moves fastest and carries rightward."""
        for dim in range(self.rank):
            stride = self._strides[dim]
            candidate = self._current[dim] + stride
            if (stride > 0 and candidate <= self._ends[dim]) or (stride < 0 and candidate >= self._ends[dim]):
                self._current[dim] = candidate
                return
            self._current[dim] = self._starts[dim]
        self._exhausted = True

    @classmethod
    def simple_1d(cls, start: int, end: int) -> FIndex:
        return cls([IndexBound.range(start, end)])

    @classmethod
    def implicit(cls, dimensions: Sequence[int], origin: int = DEFAULT_ORIGIN) -> FIndex:
        """Build an iterator covering a full array of the given extents."""
        return cls([IndexBound.range(origin, origin + extent - 1) for extent in dimensions])


def linear_index(indices: Sequence[int], dimensions: Sequence[int], origins: Sequence[int]) -> int:
    """Column-major flat position of ``indices`` for an array with the given extents and origins.

    Raises:
        InvalidIndexError: If the ranks differ or any index lies outside
            ``[origin, origin + extent)``.
    """
    if not (len(indices) == len(dimensions) == len(origins)):
        raise InvalidIndexError(
            _format_tuple(indices),
            f"rank mismatch: {len(indices)} index(es) for {len(dimensions)} dimension(s)",
        )
    linear = 0
    multiplier = 1
    for index, extent, origin in zip(indices, dimensions, origins):
        offset = index - origin
        if offset < 0 or offset >= extent:
            raise InvalidIndexError(
                _format_tuple(indices),
                f"index {index} out of bounds [{origin}, {origin + extent})",
            )
        linear += offset * multiplier
        multiplier *= extent
    return linear


def coordinates(linear: int, dimensions: Sequence[int], origins: Sequence[int]) -> tuple[int, ...]:
    """Index tuple at column-major flat position ``linear``.

    Raises:
        InvalidIndexError: If ``linear`` is outside the array or the ranks differ.
    """
    if len(dimensions) != len(origins):
        raise InvalidIndexError(str(linear), "rank mismatch between dimensions and origins")
    total = 1
    for extent in dimensions:
        total *= extent
    if linear < 0 or linear >= total:
        raise InvalidIndexError(str(linear), f"linear index out of range [0, {total})")
    result: list[int] = []
    remainder = linear
    for extent, origin in zip(dimensions, origins):
        result.append(origin + remainder % extent)
        remainder //= extent
    return tuple(result)


def parse_index_string(text: str) -> IndexBound:
    """Parse one dimension of an index expression.

    Accepts ``"5"``, ``"1:10"``, ``"1:10:2"``, ``":"``, ``"::2"`` and similar.

    Raises:
        InvalidIndexError: On empty input, non-integer components, a zero
            stride, or more than two colons.
    """
    stripped = text.strip()
    if not stripped:
        raise InvalidIndexError(text, "empty index")
    parts = stripped.split(":")
    if len(parts) > 3:
        raise InvalidIndexError(text, "too many ':' separators")
    if len(parts) == 1:
        return IndexBound.single(_parse_component(parts[0], text))

    start = _parse_optional_component(parts[0], text)
    end = _parse_optional_component(parts[1], text)
    stride = _parse_optional_component(parts[2], text) if len(parts) == 3 else None
    if stride == 0:
        raise InvalidIndexError(text, "stride cannot be zero")
    return IndexBound(start, end, stride)


def parse_index_spec(text: str) -> list[IndexBound]:
    """Parse a comma-separated multi-dimensional index expression such as ``"1:3, 2"``.

    Raises:
        InvalidIndexError: If any dimension is malformed.
    """
    return [parse_index_string(part) for part in text.split(",")]


# ################
# Implementation
# ################

_INTEGER_RE = re.compile(r"[+-]?\d+")


def _parse_component(part: str, text: str) -> int:
    stripped = part.strip()
    if not _INTEGER_RE.fullmatch(stripped):
        raise InvalidIndexError(text, f"'{stripped}' is not an integer")
    return int(stripped)


def _parse_optional_component(part: str, text: str) -> int | None:
    if not part.strip():
        return None
    return _parse_component(part, text)


def _format_tuple(indices: Sequence[int]) -> str:
    return "(" + ", ".join(str(index) for index in indices) + ")"

