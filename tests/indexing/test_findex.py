# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for column-major index enumeration and conversion."""

import pytest

from nmlkit.errors import InvalidIndexError
from nmlkit.indexing.findex import (
    FIndex,
    IndexBound,
    coordinates,
    linear_index,
    parse_index_spec,
    parse_index_string,
)

# ###############
# Enumeration
# ###############


class TestEnumeration:
    def test_two_dimensions_first_index_fastest(self) -> None:
        index = FIndex([IndexBound.range(1, 2), IndexBound.range(1, 3)])
        assert list(index) == [(1, 1), (2, 1), (1, 2), (2, 2), (1, 3), (2, 3)]

    def test_one_dimension(self) -> None:
        assert list(FIndex.simple_1d(3, 5)) == [(3,), (4,), (5,)]

    def test_stride(self) -> None:
        assert list(FIndex([IndexBound.range(1, 7, 3)])) == [(1,), (4,), (7,)]

    def test_negative_stride(self) -> None:
        assert list(FIndex([IndexBound.range(5, 1, -2)])) == [(5,), (3,), (1,)]

    def test_three_dimensions(self) -> None:
        index = FIndex.implicit([2, 1, 2])
        assert list(index) == [(1, 1, 1), (2, 1, 1), (1, 1, 2), (2, 1, 2)]

    def test_implicit_dimension_uses_global_start(self) -> None:
        index = FIndex([IndexBound(None, 1), IndexBound.range(1, 2)], global_start=0)
        assert list(index) == [(0, 1), (1, 1), (0, 2), (1, 2)]

    def test_empty_range_yields_nothing(self) -> None:
        assert list(FIndex([IndexBound.range(3, 1)])) == []

    def test_reset_restarts_enumeration(self) -> None:
        index = FIndex.simple_1d(1, 2)
        assert list(index) == [(1,), (2,)]
        assert index.current is None
        index.reset()
        assert index.current == (1,)
        assert next(index) == (1,)

    def test_rank_and_start_indices(self) -> None:
        index = FIndex([IndexBound.range(0, 1), IndexBound.range(2, 4)])
        assert index.rank == 2
        assert index.start_indices == (0, 2)


# ###############
# Linear Conversion
# ###############


class TestLinearConversion:
    def test_linear_index_column_major(self) -> None:
        dims = [2, 3]
        origins = [1, 1]
        assert linear_index((1, 1), dims, origins) == 0
        assert linear_index((2, 1), dims, origins) == 1
        assert linear_index((1, 2), dims, origins) == 2
        assert linear_index((2, 3), dims, origins) == 5

    def test_coordinates_inverse_of_linear_index(self) -> None:
        dims = [2, 3]
        origins = [0, 5]
        for position in range(6):
            assert linear_index(coordinates(position, dims, origins), dims, origins) == position

    def test_enumeration_order_matches_linear_order(self) -> None:
        index = FIndex.implicit([3, 2])
        positions = [index.to_linear_index(indices, [3, 2]) for indices in FIndex.implicit([3, 2])]
        assert positions == list(range(6))

    def test_from_linear_index(self) -> None:
        index = FIndex.implicit([2, 2])
        assert index.from_linear_index(3, [2, 2]) == (2, 2)

    @pytest.mark.parametrize("indices", [(0, 1), (3, 1), (1, 4)])
    def test_out_of_bounds_coordinate_raises(self, indices: tuple[int, int]) -> None:
        with pytest.raises(InvalidIndexError, match="out of bounds"):
            linear_index(indices, [2, 3], [1, 1])

    def test_rank_mismatch_raises(self) -> None:
        with pytest.raises(InvalidIndexError):
            linear_index((1,), [2, 3], [1, 1])
        with pytest.raises(InvalidIndexError):
            FIndex.implicit([2]).to_linear_index((1, 1), [2, 2])

    def test_linear_out_of_range_raises(self) -> None:
        with pytest.raises(InvalidIndexError):
            coordinates(6, [2, 3], [1, 1])


# ###############
# Index Strings
# ###############


class TestIndexStrings:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("5", IndexBound(5, 5, None)),
            ("1:10", IndexBound(1, 10, None)),
            ("1:10:2", IndexBound(1, 10, 2)),
            (":", IndexBound(None, None, None)),
            ("::2", IndexBound(None, None, 2)),
            (" -1 : 3 ", IndexBound(-1, 3, None)),
        ],
    )
    def test_parse_index_string(self, text: str, expected: IndexBound) -> None:
        assert parse_index_string(text) == expected

    @pytest.mark.parametrize("text", ["", "a", "1:2:3:4", "1:10:0", "1.5"])
    def test_invalid_index_strings(self, text: str) -> None:
        with pytest.raises(InvalidIndexError):
            parse_index_string(text)

    def test_parse_index_spec(self) -> None:
        assert parse_index_spec("1:3, 2") == [IndexBound(1, 3, None), IndexBound(2, 2, None)]

    def test_bound_helpers(self) -> None:
        assert IndexBound.single(4).is_single
        assert not IndexBound.range(1, 4).is_single
        assert IndexBound.range(1, 10, 3).size() == 4
        assert IndexBound.implicit().size() is None
        assert str(IndexBound.range(1, 10, 2)) == "1:10:2"
        assert str(IndexBound.single(7)) == "7"
