from dataclasses import dataclass
from numbers import Integral
from typing import Any, Optional

from ndspan.errors import RangeError


def _check_bound(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"Interval {name} must be an int or None, got {type(value).__name__}")
    return int(value)


@dataclass(frozen=True)
class Interval:
    """
    One dimension's addressed sub-range, with optionally open ends.

    An open start means "from the natural lower bound" and an open end means "to the natural upper bound"
    (exclusive). `Interval()` (exported as `ALL`) addresses the whole extent of a dimension.

    Attributes:
        start (Optional[int]): First addressed position (inclusive), or None.
        end (Optional[int]): One past the last addressed position, or None.
    """
    start: Optional[int] = None
    end: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _check_bound(self.start, "start"))
        object.__setattr__(self, "end", _check_bound(self.end, "end"))

    @staticmethod
    def single(index: int) -> "Interval":
        """The interval holding exactly `index`."""
        index = _check_bound(index, "index")
        return Interval(index, index + 1)

    @staticmethod
    def closed(first: int, last: int) -> "Interval":
        """The interval from `first` to `last`, both inclusive."""
        last = _check_bound(last, "last")
        return Interval(first, last + 1)

    @staticmethod
    def from_slice(slc: slice) -> "Interval":
        if slc.step not in (None, 1):
            raise TypeError(f"Only unit steps are supported in range subscripts, got step={slc.step}")
        return Interval(slc.start, slc.stop)

    @property
    def is_all(self) -> bool:
        return self.start is None and self.end is None

    def resolve(self, extent: int) -> range:
        """
        Resolve against a dimension of length `extent`.

        Raises:
            RangeError: If the resolved pair violates 0 <= start <= end <= extent.
        """
        lo = self.start if self.start is not None else 0
        hi = self.end if self.end is not None else extent
        if not 0 <= lo <= hi <= extent:
            raise RangeError(f"Interval {self} resolves to [{lo}:{hi}], outside [0:{extent}]")
        return range(lo, hi)

    def resolve_within(self, bounds: range) -> range:
        """
        Resolve in absolute coordinates, with open ends defaulting to `bounds`.

        Raises:
            RangeError: If the resolved pair is not contained in `bounds`.
        """
        lo = self.start if self.start is not None else bounds.start
        hi = self.end if self.end is not None else bounds.stop
        if not bounds.start <= lo <= hi <= bounds.stop:
            raise RangeError(f"Interval {self} resolves to [{lo}:{hi}], outside [{bounds.start}:{bounds.stop}]")
        return range(lo, hi)

    def __str__(self) -> str:
        start = "" if self.start is None else self.start
        end = "" if self.end is None else self.end
        return f"[{start}:{end}]"


ALL = Interval()


def as_interval(value: Any) -> Interval:
    """
    Coerce an int, unit-step range or slice, or an Interval, to an Interval.

    Ints address a single position, like the int entries of a range subscript.
    """
    match value:
        case Interval():
            return value
        case bool():
            raise TypeError("bool is not a valid interval")
        case Integral():
            return Interval.single(int(value))
        case range():
            if value.step != 1:
                raise TypeError(f"Only unit-step ranges are supported, got {value}")
            return Interval(value.start, value.stop)
        case slice():
            return Interval.from_slice(value)
        case _:
            raise TypeError(f"Cannot interpret {type(value).__name__} as an interval")


__all__ = ["Interval", "ALL", "as_interval"]
