"""Tests for Span construction, iteration, containment and congruency.

Run with: pytest tests/test_span.py -v
"""

import numpy as np
import pytest

from ndspan import ALL, Interval, RangeError, ShapeError, Span, congruent
from ndspan.span import dimensions_congruent


class TestSpanConstruction:
    """Tests for the Span constructors and derived attributes."""

    def test_zero_to(self) -> None:
        span = Span.zero_to((2, 3, 4))
        assert span.rank == 3
        assert span.dimensions == (2, 3, 4)
        assert span.count == 24
        assert span.start_index == (0, 0, 0)
        assert span.end_index == (2, 3, 4)

    def test_from_start_length(self) -> None:
        span = Span.from_start_length((1, 2), (2, 3))
        assert span.ranges == (range(1, 3), range(2, 5))

    def test_pairs_and_ranges(self) -> None:
        assert Span([(1, 3), range(0, 2)]) == Span([range(1, 3), range(0, 2)])

    def test_empty_range_rejected(self) -> None:
        with pytest.raises(RangeError):
            Span([range(2, 2)])

    def test_stepped_range_rejected(self) -> None:
        with pytest.raises(ValueError):
            Span([range(0, 4, 2)])

    def test_from_dimensions(self) -> None:
        span = Span.from_dimensions((5, 5, 5), (3, Interval(2, 4), ALL))
        assert span.ranges == (range(3, 4), range(2, 4), range(0, 5))

    def test_from_dimensions_wrong_count(self) -> None:
        with pytest.raises(ShapeError):
            Span.from_dimensions((5, 5), (ALL,))

    def test_from_base_uses_absolute_coordinates(self) -> None:
        base = Span([range(2, 6), range(0, 3)])
        assert Span.from_base(base, (Interval(3, 5), ALL)).ranges == (range(3, 5), range(0, 3))
        with pytest.raises(RangeError):
            Span.from_base(base, (Interval(0, 2), ALL))

    def test_getitem_returns_axis_range(self) -> None:
        span = Span([range(1, 3), range(4, 7)])
        assert span[1] == range(4, 7)

    def test_hashable_value_equality(self) -> None:
        assert hash(Span.zero_to((2, 2))) == hash(Span([(0, 2), (0, 2)]))
        assert len({Span.zero_to((2, 2)), Span([(0, 2), (0, 2)])}) == 1

    def test_repr(self) -> None:
        assert repr(Span([(0, 2), (1, 3)])) == "Span[0:2, 1:3]"


class TestSpanIteration:
    """Tests for row-major iteration over the multi-indices of a Span."""

    def test_row_major_order(self) -> None:
        assert list(Span.zero_to((2, 2))) == [(0, 0), (0, 1), (1, 0), (1, 1)]

    def test_offset_span_order(self) -> None:
        span = Span([range(1, 3), range(5, 7)])
        assert list(span) == [(1, 5), (1, 6), (2, 5), (2, 6)]

    def test_count_matches_distinct_in_bounds_indices(self) -> None:
        dimensions = (3, 1, 4, 2)
        indices = list(Span.zero_to(dimensions))
        assert len(indices) == Span.zero_to(dimensions).count == 24
        assert len(set(indices)) == 24
        assert all(all(0 <= i < d for i, d in zip(index, dimensions)) for index in indices)

    def test_order_matches_numpy_ravel(self) -> None:
        dimensions = (2, 3, 2)
        expected = [np.unravel_index(k, dimensions) for k in range(12)]
        assert list(Span.zero_to(dimensions)) == [tuple(int(i) for i in e) for e in expected]

    def test_iteration_is_restartable(self) -> None:
        span = Span.zero_to((2, 3))
        assert list(span) == list(span)
        assert len(span) == 6

    def test_rank_zero_yields_one_empty_index(self) -> None:
        span = Span([])
        assert span.count == 1
        assert list(span) == [()]

    def test_exhausted_iterator_stays_exhausted(self) -> None:
        iterator = iter(Span.zero_to((1,)))
        assert next(iterator) == (0,)
        with pytest.raises(StopIteration):
            next(iterator)
        with pytest.raises(StopIteration):
            next(iterator)


class TestContainment:
    """Tests for Span.contains and Span.contains_index."""

    def test_contains_span(self) -> None:
        outer = Span.zero_to((5, 5))
        assert outer.contains(Span([(1, 3), (0, 5)]))
        assert not outer.contains(Span([(1, 6), (0, 5)]))

    def test_contains_span_rank_mismatch(self) -> None:
        with pytest.raises(ShapeError):
            Span.zero_to((5, 5)).contains(Span.zero_to((5,)))

    def test_contains_intervals(self) -> None:
        span = Span([(2, 6), (0, 3)])
        assert span.contains((Interval(2, 4), ALL))
        assert not span.contains((Interval(0, 4), ALL))

    def test_contains_index(self) -> None:
        span = Span([(2, 6), (0, 3)])
        assert span.contains_index((5, 2))
        assert not span.contains_index((6, 2))
        assert not span.contains_index((5,))


class TestCongruency:
    """Tests for the dimensional congruency predicate."""

    def test_leading_unit_axes_are_stripped(self) -> None:
        assert congruent(Span.zero_to((1, 2, 2)), Span.zero_to((2, 2)))
        assert Span.zero_to((2, 2)).is_congruent(Span.zero_to((1, 1, 2, 2)))

    def test_non_unit_leading_axis_is_not_congruent(self) -> None:
        assert not congruent(Span.zero_to((3, 2, 2)), Span.zero_to((2, 2)))

    def test_inner_unit_axes_are_not_broadcast(self) -> None:
        assert not dimensions_congruent((2, 1), (2,))
        assert not dimensions_congruent((2, 1, 2), (2, 2))

    @pytest.mark.parametrize(
        "lhs, rhs",
        [((2, 3), (2, 3)), ((1, 4), (4,)), ((1, 1, 1), (1,)), ((5,), (2,))],
    )
    def test_reflexive_and_symmetric(self, lhs: tuple, rhs: tuple) -> None:
        assert dimensions_congruent(lhs, lhs)
        assert dimensions_congruent(lhs, rhs) == dimensions_congruent(rhs, lhs)

    def test_accepts_arrays_and_sequences(self) -> None:
        assert congruent(np.zeros((1, 3)), (3,))
