from numbers import Integral
from typing import Any, Optional, Tuple

from ndindex import ndindex as _ndindex

from ndspan.interval import ALL, Interval, as_interval
from ndspan.span import Span

Entry = int | Interval


def _entry(value: Any) -> Entry:
    if isinstance(value, Interval):
        return value
    if isinstance(value, range):
        return as_interval(value)
    if isinstance(value, bool):
        raise TypeError("bool is not a valid index entry")

    try:
        raw = _ndindex(value).raw
    except (IndexError, TypeError, ValueError) as e:
        raise TypeError(f"Unsupported index entry {value!r}") from e

    if isinstance(raw, Integral):
        return int(raw)
    if isinstance(raw, slice):
        return Interval.from_slice(raw)
    raise TypeError(f"Unsupported index entry {value!r}: only ints, unit-step slices, ranges and Intervals are supported")


class _Slicer:
    """
    Normalizes subscripts into per-dimension entries.

    `Slicer[3, 2:4, :]` gives (Interval[3:4], Interval[2:4], Interval[:]). With a known rank, an Ellipsis
    expands to full-range intervals and missing trailing dimensions are filled the same way. Negative values
    are kept as they are and rejected when resolved; nothing wraps around.
    """

    def __init__(self, rank: Optional[int] = None):
        self.rank: Optional[int] = rank

    def __getitem__(self, index: Any) -> Tuple[Interval, ...]:
        return self.normalize(index, self.rank)

    def for_rank(self, rank: int) -> "_Slicer":
        return _Slicer(rank=rank)

    def entries(self, index: Any, rank: Optional[int] = None) -> Tuple[Entry, ...]:
        if isinstance(index, Span):
            return tuple(Interval(r.start, r.stop) for r in index.ranges)
        if isinstance(index, list):
            index = tuple(index)
        if not isinstance(index, tuple):
            index = (index,)

        n_ellipsis = sum(1 for e in index if e is Ellipsis)
        if n_ellipsis > 1:
            raise IndexError("An index can only have a single ellipsis ('...')")

        entries = []
        for value in index:
            if value is Ellipsis:
                if rank is None:
                    raise TypeError("Ellipsis needs a known rank to expand")
                entries.extend([ALL] * (rank - (len(index) - 1)))
            else:
                entries.append(_entry(value))

        if rank is not None:
            if len(entries) > rank:
                raise IndexError(f"Too many indices: got {len(index)} for rank {rank}")
            entries.extend([ALL] * (rank - len(entries)))
        return tuple(entries)

    def normalize(self, index: Any, rank: Optional[int] = None) -> Tuple[Interval, ...]:
        return self.to_intervals(self.entries(index, rank))

    @staticmethod
    def is_element(entries: Tuple[Entry, ...]) -> bool:
        return all(isinstance(e, int) for e in entries)

    @staticmethod
    def to_intervals(entries: Tuple[Entry, ...]) -> Tuple[Interval, ...]:
        return tuple(as_interval(e) for e in entries)


Slicer = _Slicer()
