"""
One-dimensional, fixed-step views over contiguous memory.

LinearType is the building block for bulk one-dimensional operations: any owned buffer, or a single row or
column picked out of a tensor, exposes its bounds, its step and a scoped raw region so it can be handed to
vectorised routines without copying.
"""
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, NamedTuple, Optional

import numpy as np

from ndspan.config import get_settings
from ndspan.errors import RangeError
from ndspan.span import Span

logger = logging.getLogger(__name__)


class LinearDescriptor(NamedTuple):
    """
    Validated (buffer, start, count, step) handed to kernel code.

    Attributes:
        buffer: The backing 1-D numpy array.
        start: Buffer position of the first element.
        count: Number of elements.
        step: Distance between consecutive elements, in elements.
    """

    buffer: np.ndarray
    start: int
    count: int
    step: int


class LinearType(ABC):
    """
    A 1-D sequence stored at a fixed step inside a contiguous buffer.

    Positions passed to `at` are buffer positions: valid positions p satisfy start_index <= p < end_index and
    (p - start_index) % step == 0. `view[k]` addresses the k-th element instead, 0 <= k < count.
    """

    @property
    @abstractmethod
    def buffer(self) -> np.ndarray:
        ...

    @property
    @abstractmethod
    def start_index(self) -> int:
        ...

    @property
    @abstractmethod
    def end_index(self) -> int:
        ...

    @property
    @abstractmethod
    def step(self) -> int:
        ...

    @property
    def count(self) -> int:
        """Number of valid elements, taking the step into account."""
        return (self.end_index - self.start_index + self.step - 1) // self.step

    @property
    def dimensions(self) -> tuple[int]:
        return (self.count,)

    @property
    def span(self) -> Span:
        return Span.zero_to(self.dimensions)

    @property
    def dtype(self) -> np.dtype:
        return self.buffer.dtype

    def index_is_valid(self, position: int) -> bool:
        return self.start_index <= position < self.end_index and (position - self.start_index) % self.step == 0

    def _position(self, k: Any) -> int:
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
            raise TypeError(f"Index must be int, got {type(k).__name__}")
        if not 0 <= k < self.count:
            raise IndexError(f"Index out of range, got {k} for length {self.count}")
        return self.start_index + int(k) * self.step

    def _check_position(self, position: int) -> None:
        if not self.index_is_valid(position):
            raise IndexError(
                f"Position {position} is not a valid position of "
                f"[{self.start_index}:{self.end_index}:{self.step}]"
            )

    def at(self, position: int) -> Any:
        self._check_position(position)
        return self.buffer[position].item()

    def __len__(self) -> int:
        return self.count

    def __getitem__(self, k: int) -> Any:
        return self.buffer[self._position(k)].item()

    def __iter__(self) -> Iterator[Any]:
        for k in range(self.count):
            yield self[k]

    def _strided(self) -> np.ndarray:
        return self.buffer[self.start_index:self.end_index:self.step]

    @contextmanager
    def region(self) -> Iterator[memoryview]:
        """
        Borrow the raw strided region for a bulk operation.

        The memoryview is released when the block exits; any use of it afterwards raises ValueError. Arrays
        created from it with `np.asarray` must not outlive the block either.
        """
        view = memoryview(self._strided())
        logger.debug(f"Acquired region [{self.start_index}:{self.end_index}:{self.step}] of {type(self).__qualname__}")
        try:
            yield view
        finally:
            view.release()

    def to_numpy(self) -> np.ndarray:
        return self._strided().copy()

    def descriptor(self) -> LinearDescriptor:
        return LinearDescriptor(buffer=self.buffer, start=self.start_index, count=self.count, step=self.step)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinearType):
            return NotImplemented
        return self.count == other.count and all(a == b for a, b in zip(self, other))

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__qualname__}(start={self.start_index}, end={self.end_index}, "
            f"step={self.step}, count={self.count}, dtype={self.dtype})"
        )


class MutableLinearType(LinearType):
    def set_at(self, position: int, value: Any) -> None:
        self._check_position(position)
        self.buffer[position] = value

    def __setitem__(self, k: int, value: Any) -> None:
        self.buffer[self._position(k)] = value


class LinearBuffer(MutableLinearType):
    """An owned, contiguous, unit-step buffer."""

    def __init__(self, values: Any, dtype: Optional[Any] = None):
        dtype = get_settings().default_dtype if dtype is None and not isinstance(values, np.ndarray) else dtype
        data = np.array(values, dtype=dtype, copy=True)
        if data.ndim != 1:
            raise ValueError(f"LinearBuffer values must be one-dimensional, got shape {data.shape}")
        self._buffer: np.ndarray = np.ascontiguousarray(data)

    @staticmethod
    def zeros(count: int, dtype: Optional[Any] = None) -> "LinearBuffer":
        dtype = get_settings().default_dtype if dtype is None else dtype
        return LinearBuffer(np.zeros(count, dtype=dtype))

    @property
    def buffer(self) -> np.ndarray:
        return self._buffer

    @property
    def start_index(self) -> int:
        return 0

    @property
    def end_index(self) -> int:
        return len(self._buffer)

    @property
    def step(self) -> int:
        return 1


class StridedView(MutableLinearType):
    """
    A non-owning view of every `step`-th element of `buffer` in [start, end).

    The view is only valid while the owner keeps `buffer` alive and unresized.
    """

    def __init__(self, buffer: np.ndarray, start: int, end: int, step: int = 1):
        if not isinstance(buffer, np.ndarray) or buffer.ndim != 1:
            raise ValueError("StridedView requires a one-dimensional numpy buffer")
        if step < 1:
            raise ValueError(f"step must be >= 1, got {step}")
        if not 0 <= start <= end <= len(buffer):
            raise RangeError(f"Invalid view range [{start}:{end}] for buffer of length {len(buffer)}")
        self._buffer = buffer
        self._start = int(start)
        self._end = int(end)
        self._step = int(step)

    @property
    def buffer(self) -> np.ndarray:
        return self._buffer

    @property
    def start_index(self) -> int:
        return self._start

    @property
    def end_index(self) -> int:
        return self._end

    @property
    def step(self) -> int:
        return self._step


__all__ = ["LinearType", "MutableLinearType", "LinearBuffer", "StridedView", "LinearDescriptor"]
