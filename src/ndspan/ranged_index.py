from typing import Any, Sequence, Tuple

from ndspan.errors import RangeError, ShapeError
from ndspan.interval import as_interval
from ndspan.span import Index, Span


class RangedIndex(Span):
    """
    The per-dimension ranges a TensorSlice addresses in its base.

    A RangedIndex is resolved against a concrete extent: either the full dimensions of a base tensor, or the
    local space of a parent slice (`compose`). In the latter case the relative intervals are validated
    against the parent's bounds only and then shifted into the parent's coordinates, so a slice of a slice
    always ends up addressing its root tensor directly.
    """

    @classmethod
    def full(cls, dimensions: Sequence[int]) -> "RangedIndex":
        return cls.zero_to(dimensions)

    @classmethod
    def resolve(cls, dimensions: Sequence[int], intervals: Sequence[Any]) -> "RangedIndex":
        """
        Resolve one interval per dimension against [0, dimension).

        Raises:
            ShapeError: If there is not exactly one interval per dimension.
            RangeError: If an interval reaches outside its dimension.
        """
        return cls.from_dimensions(dimensions, intervals)

    @classmethod
    def compose(cls, parent: Span, intervals: Sequence[Any]) -> "RangedIndex":
        """
        Resolve `intervals` relative to `parent` and return them in the parent's coordinates.

        Raises:
            ShapeError: If there is not exactly one interval per parent dimension.
            RangeError: If an interval reaches outside the parent's local bounds.
        """
        intervals = [as_interval(i) for i in intervals]
        if len(intervals) != parent.rank:
            raise ShapeError(f"Expected {parent.rank} intervals to narrow {parent}, got {len(intervals)}")
        local = [interval.resolve(extent) for interval, extent in zip(intervals, parent.dimensions)]
        return cls(range(base.start + r.start, base.start + r.stop) for base, r in zip(parent.ranges, local))

    def check_rank(self, rank: int) -> None:
        if self.rank != rank:
            raise ShapeError(f"{self} has rank {self.rank}, expected rank {rank}")

    def check_within(self, dimensions: Sequence[int]) -> None:
        """
        Raises:
            ShapeError: If the ranks differ.
            RangeError: If any range leaves [0, dimension).
        """
        self.check_rank(len(dimensions))
        for axis, (r, extent) in enumerate(zip(self.ranges, dimensions)):
            if r.start < 0 or r.stop > extent:
                raise RangeError(f"{self} exceeds dimension {axis} of extent {extent}")

    def shifted(self, offsets: Sequence[int]) -> "RangedIndex":
        if len(offsets) != self.rank:
            raise ShapeError(f"Expected {self.rank} offsets, got {len(offsets)}")
        return RangedIndex(range(r.start + o, r.stop + o) for r, o in zip(self.ranges, offsets))

    def local(self) -> "RangedIndex":
        """The zero-based index space with the same dimensions."""
        return RangedIndex.zero_to(self.dimensions)

    def to_base(self, local_index: Sequence[int]) -> Index:
        """
        Translate a local multi-index into this index's coordinates.

        Raises:
            IndexError: If the rank differs or a component is outside [0, dimension).
        """
        if len(local_index) != self.rank:
            raise IndexError(f"Index {tuple(local_index)} has rank {len(local_index)}, expected {self.rank}")
        base_index = []
        for axis, (i, r) in enumerate(zip(local_index, self.ranges)):
            if not 0 <= i < len(r):
                raise IndexError(f"Index {tuple(local_index)} out of bounds in dim={axis} with size {len(r)}")
            base_index.append(r.start + i)
        return tuple(base_index)

    def to_slices(self) -> Tuple[slice, ...]:
        return tuple(slice(r.start, r.stop) for r in self.ranges)


__all__ = ["RangedIndex"]
