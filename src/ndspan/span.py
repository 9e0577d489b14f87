"""
Span: an immutable hyper-rectangle of integer indices.

A Span holds one half-open `range` per dimension. Iterating a Span yields every multi-index it covers in
row-major (odometer) order, the same order the owning Tensor lays its elements out in memory.
"""
import math
from collections.abc import Iterable, Sequence
from typing import Any, Iterator, Tuple

from ndspan.errors import RangeError, ShapeError
from ndspan.interval import Interval, as_interval

Index = Tuple[int, ...]


def _as_range(value: Any) -> range:
    if isinstance(value, range):
        r = value
    elif isinstance(value, Sequence) and len(value) == 2:
        r = range(int(value[0]), int(value[1]))
    else:
        raise TypeError(f"Span ranges must be ranges or (start, stop) pairs, got {value!r}")
    if r.step != 1:
        raise ValueError(f"Span ranges must have unit step, got {r}")
    if len(r) == 0:
        raise RangeError(f"Span ranges must be non-empty, got [{r.start}:{r.stop}]")
    return r


class Span:
    """
    Ordered collection of per-dimension index ranges.

    `span[axis]` returns the range of one dimension while `len(span)` and iteration cover the multi-indices
    inside the span, so `len(span) == span.count == len(list(span))`.

    Attributes:
        ranges (Tuple[range, ...]): The resolved range of each dimension.
    """

    __slots__ = ("_ranges",)

    def __init__(self, ranges: Iterable[range | Tuple[int, int]]):
        self._ranges: Tuple[range, ...] = tuple(_as_range(r) for r in ranges)

    @classmethod
    def from_base(cls, base: "Span", intervals: Sequence[Any]) -> "Span":
        """
        Narrow `base` by one interval per dimension, given in the base's (absolute) coordinates.

        Raises:
            ShapeError: If the number of intervals differs from the rank of `base`.
            RangeError: If an interval reaches outside `base`.
        """
        intervals = [as_interval(i) for i in intervals]
        if len(intervals) != base.rank:
            raise ShapeError(f"Expected {base.rank} intervals for {base}, got {len(intervals)}")
        return cls(interval.resolve_within(bounds) for interval, bounds in zip(intervals, base.ranges))

    @classmethod
    def from_dimensions(cls, dimensions: Sequence[int], intervals: Sequence[Any]) -> "Span":
        """
        Resolve one interval per dimension against [0, dimension).

        Raises:
            ShapeError: If the number of intervals differs from the number of dimensions.
            RangeError: If an interval reaches outside its dimension.
        """
        intervals = [as_interval(i) for i in intervals]
        if len(intervals) != len(dimensions):
            raise ShapeError(f"Expected {len(dimensions)} intervals for dimensions {tuple(dimensions)}, got {len(intervals)}")
        return cls(interval.resolve(int(d)) for interval, d in zip(intervals, dimensions))

    @classmethod
    def zero_to(cls, dimensions: Sequence[int]) -> "Span":
        return cls.from_start_end([0] * len(dimensions), dimensions)

    @classmethod
    def from_start_end(cls, start: Sequence[int], end: Sequence[int]) -> "Span":
        if len(start) != len(end):
            raise ShapeError(f"start and end have different ranks: {len(start)} != {len(end)}")
        return cls(range(int(s), int(e)) for s, e in zip(start, end))

    @classmethod
    def from_start_length(cls, start: Sequence[int], length: Sequence[int]) -> "Span":
        if len(start) != len(length):
            raise ShapeError(f"start and length have different ranks: {len(start)} != {len(length)}")
        return cls.from_start_end(start, [s + n for s, n in zip(start, length)])

    @property
    def ranges(self) -> Tuple[range, ...]:
        return self._ranges

    @property
    def start_index(self) -> Index:
        return tuple(r.start for r in self._ranges)

    @property
    def end_index(self) -> Index:
        return tuple(r.stop for r in self._ranges)

    @property
    def rank(self) -> int:
        return len(self._ranges)

    @property
    def dimensions(self) -> Tuple[int, ...]:
        return tuple(len(r) for r in self._ranges)

    @property
    def count(self) -> int:
        return math.prod(self.dimensions)

    def __getitem__(self, axis: int | slice) -> range | Tuple[range, ...]:
        return self._ranges[axis]

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> "SpanIterator":
        return SpanIterator(self)

    def contains(self, other: "Span | Sequence[Any]") -> bool:
        """
        Whether every dimension of `other` lies inside the matching dimension of this span.

        `other` is either a Span or a sequence of intervals; open interval ends take this span's own bounds.

        Raises:
            ShapeError: If `other` does not have one entry per dimension.
        """
        if isinstance(other, Span):
            if other.rank != self.rank:
                raise ShapeError(f"Cannot compare containment of rank {other.rank} in rank {self.rank}")
            return all(
                mine.start <= theirs.start and theirs.stop <= mine.stop
                for mine, theirs in zip(self._ranges, other.ranges)
            )

        intervals = [as_interval(i) for i in other]
        if len(intervals) != self.rank:
            raise ShapeError(f"Expected {self.rank} intervals, got {len(intervals)}")
        for interval, bounds in zip(intervals, self._ranges):
            try:
                interval.resolve_within(bounds)
            except RangeError:
                return False
        return True

    def contains_index(self, index: Sequence[int]) -> bool:
        if len(index) != self.rank:
            return False
        return all(i in r for i, r in zip(index, self._ranges))

    def is_congruent(self, other: Any) -> bool:
        return congruent(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Span):
            return NotImplemented
        return self._ranges == other._ranges

    def __hash__(self) -> int:
        return hash(self._ranges)

    def __repr__(self) -> str:
        dims = ", ".join(f"{r.start}:{r.stop}" for r in self._ranges)
        return f"{type(self).__qualname__}[{dims}]"


class SpanIterator(Iterator[Index]):
    """
    Odometer over the multi-indices of a Span.

    The last axis increments fastest. When an axis passes its upper bound it resets to its lower bound and
    carries into the axis to its left; iteration ends once the leftmost axis carries out.
    """

    def __init__(self, span: Span):
        self._ranges = span.ranges
        self._current = list(span.start_index)
        self._started = False
        self._done = False

    def __iter__(self) -> "SpanIterator":
        return self

    def __next__(self) -> Index:
        if self._done:
            raise StopIteration
        if not self._started:
            self._started = True
            return tuple(self._current)

        axis = len(self._current) - 1
        while axis >= 0:
            if self._current[axis] + 1 < self._ranges[axis].stop:
                self._current[axis] += 1
                return tuple(self._current)
            self._current[axis] = self._ranges[axis].start
            axis -= 1

        self._done = True
        raise StopIteration


def _dimensions_of(value: Any) -> Tuple[int, ...]:
    if hasattr(value, "dimensions"):
        return tuple(value.dimensions)
    if hasattr(value, "shape"):
        return tuple(int(d) for d in value.shape)
    return tuple(int(d) for d in value)


def dimensions_congruent(lhs: Sequence[int], rhs: Sequence[int]) -> bool:
    lhs, rhs = tuple(lhs), tuple(rhs)
    if lhs == rhs:
        return True

    longer, shorter = (lhs, rhs) if len(lhs) > len(rhs) else (rhs, lhs)
    diff = len(longer) - len(shorter)
    return all(d == 1 for d in longer[:diff]) and longer[diff:] == shorter


def congruent(lhs: Any, rhs: Any) -> bool:
    """
    Dimensional congruency between two shapes.

    Shapes are congruent when their dimensions are equal, or when dropping the leading size-1 dimensions of
    the higher-rank one leaves exactly the dimensions of the other, so (1, 2, 2) is congruent with (2, 2)
    while (3, 2, 2) is not. Accepts Spans, anything with `dimensions` or `shape`, or dimension sequences.
    """
    return dimensions_congruent(_dimensions_of(lhs), _dimensions_of(rhs))


__all__ = ["Span", "SpanIterator", "Index", "congruent", "dimensions_congruent"]
