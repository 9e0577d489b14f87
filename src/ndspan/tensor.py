"""
Tensor: an owned, contiguous, row-major n-dimensional array.

The elements live in a flat 1-D numpy buffer; a multi-index is turned into a buffer position with the
row-major strides of the tensor's dimensions. Subscripts that address a single element return the element,
every other subscript returns a TensorSlice sharing the tensor's storage.
"""
import logging
import math
from numbers import Integral
from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np
import torch

from ndspan.config import get_settings
from ndspan.errors import ShapeError
from ndspan.linear import StridedView
from ndspan.ranged_index import RangedIndex
from ndspan.span import Index, Span
from ndspan.tensor_slice import TensorSlice, ViewDescriptor
from ndspan.utils.printing import format_planes
from ndspan.utils.slicer import Slicer

logger = logging.getLogger(__name__)


def row_major_strides(dimensions: Sequence[int]) -> Tuple[int, ...]:
    """Stride of dimension i is the product of the dimensions after i."""
    strides = []
    stride = 1
    for d in reversed(dimensions):
        strides.append(stride)
        stride *= d
    return tuple(reversed(strides))


def _check_dimensions(dimensions: Iterable[Any]) -> Tuple[int, ...]:
    dimensions = tuple(dimensions)
    if len(dimensions) == 0:
        raise ShapeError("A tensor needs at least one dimension")
    for axis, d in enumerate(dimensions):
        if isinstance(d, bool) or not isinstance(d, Integral):
            raise TypeError(f"Dimension {axis} must be an int, got {type(d).__name__}")
        if d < 1:
            raise ShapeError(f"Dimension {axis} must be >= 1, got {d}")
    return tuple(int(d) for d in dimensions)


class Tensor:
    """
    An n-dimensional array owning a flat contiguous buffer.

    Args:
        dimensions: Length of each dimension. At least one dimension, all >= 1.
        repeated_value: Value every element starts out with.
        dtype: numpy dtype of the elements. Defaults to `Settings.default_dtype`.

    Raises:
        ShapeError: If `dimensions` is empty or holds a length < 1.
    """

    def __init__(self, dimensions: Sequence[int], repeated_value: Any = 0, dtype: Optional[Any] = None):
        dimensions = _check_dimensions(dimensions)
        dtype = get_settings().default_dtype if dtype is None else dtype
        buffer = np.full(math.prod(dimensions), repeated_value, dtype=dtype)
        self._init(buffer, dimensions)

    def _init(self, buffer: np.ndarray, dimensions: Tuple[int, ...]) -> None:
        self._buffer: np.ndarray = buffer
        self._dimensions: Tuple[int, ...] = dimensions
        self._strides: Tuple[int, ...] = row_major_strides(dimensions)
        logger.debug(f"Created {type(self).__qualname__} with dimensions {dimensions} and dtype {buffer.dtype}")

    @classmethod
    def _from_flat(cls, buffer: np.ndarray, dimensions: Tuple[int, ...]) -> "Tensor":
        tensor = cls.__new__(cls)
        tensor._init(buffer, dimensions)
        return tensor

    @classmethod
    def from_elements(cls, dimensions: Sequence[int], elements: Iterable[Any], dtype: Optional[Any] = None) -> "Tensor":
        """
        Build a tensor from its elements in row-major order.

        Raises:
            ShapeError: If the number of elements differs from the product of `dimensions`.
        """
        dimensions = _check_dimensions(dimensions)
        dtype = get_settings().default_dtype if dtype is None else dtype
        buffer = np.array(list(elements), dtype=dtype).ravel()
        if buffer.size != math.prod(dimensions):
            raise ShapeError(f"Got {buffer.size} elements for dimensions {dimensions} ({math.prod(dimensions)} elements)")
        return cls._from_flat(buffer, dimensions)

    @classmethod
    def from_numpy(cls, array: np.ndarray) -> "Tensor":
        """Copy a numpy array of rank >= 1 into a new tensor."""
        array = np.asarray(array)
        dimensions = _check_dimensions(array.shape)
        return cls._from_flat(np.array(array, copy=True, order="C").ravel(), dimensions)

    @classmethod
    def from_torch(cls, tensor: torch.Tensor) -> "Tensor":
        return cls.from_numpy(tensor.detach().cpu().numpy())

    @property
    def dimensions(self) -> Tuple[int, ...]:
        return self._dimensions

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._dimensions

    @property
    def rank(self) -> int:
        return len(self._dimensions)

    @property
    def count(self) -> int:
        return self._buffer.size

    @property
    def strides(self) -> Tuple[int, ...]:
        return self._strides

    @property
    def dtype(self) -> np.dtype:
        return self._buffer.dtype

    @property
    def span(self) -> Span:
        return Span.zero_to(self._dimensions)

    @property
    def buffer(self) -> np.ndarray:
        """The flat backing buffer, in row-major order."""
        return self._buffer

    def flat_index(self, index: Sequence[int]) -> int:
        """
        Row-major buffer position of a multi-index.

        Raises:
            TypeError: If a component is not an int.
            IndexError: If the rank differs or a component is outside [0, dimension).
        """
        index = tuple(index)
        if len(index) != self.rank:
            raise IndexError(f"Index {index} has rank {len(index)}, expected {self.rank}")
        position = 0
        for axis, (i, d, stride) in enumerate(zip(index, self._dimensions, self._strides)):
            if isinstance(i, bool) or not isinstance(i, Integral):
                raise TypeError(f"Index components must be ints, got {type(i).__name__} in dim={axis}")
            if not 0 <= i < d:
                raise IndexError(f"Index {index} out of bounds in dim={axis} with size {d}")
            position += int(i) * stride
        return position

    def index_is_valid(self, index: Sequence[int]) -> bool:
        index = tuple(index)
        return len(index) == self.rank and all(
            not isinstance(i, bool) and isinstance(i, Integral) and 0 <= i < d
            for i, d in zip(index, self._dimensions)
        )

    def get(self, index: Sequence[int]) -> Any:
        return self._buffer[self.flat_index(index)].item()

    def set(self, index: Sequence[int], value: Any) -> None:
        self._buffer[self.flat_index(index)] = value

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, Span):
            return TensorSlice(self, index)
        entries = Slicer.entries(index, rank=self.rank)
        if Slicer.is_element(entries):
            return self.get(entries)
        return TensorSlice(self, Slicer.to_intervals(entries))

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, Span):
            TensorSlice(self, index).assign(value)
            return
        entries = Slicer.entries(index, rank=self.rank)
        if Slicer.is_element(entries):
            self.set(entries, value)
        else:
            TensorSlice(self, Slicer.to_intervals(entries)).assign(value)

    def slice(self, *intervals: Any) -> TensorSlice:
        """A TensorSlice for `intervals`, even when every entry is a single int."""
        entries = Slicer.entries(intervals, rank=self.rank)
        return TensorSlice(self, Slicer.to_intervals(entries))

    def full_slice(self) -> TensorSlice:
        return TensorSlice(self, RangedIndex.full(self._dimensions))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TensorSlice):
            return other == self
        if isinstance(other, torch.Tensor):
            other = other.detach().cpu().numpy()
        if not isinstance(other, (Tensor, np.ndarray)):
            return NotImplemented
        other_array = other.numpy() if isinstance(other, Tensor) else other
        return tuple(other_array.shape) == self._dimensions and bool(np.array_equal(self.numpy(), other_array))

    __hash__ = None

    def numpy(self) -> np.ndarray:
        """A view of the buffer with the tensor's dimensions; writes to it go to the tensor."""
        return self._buffer.reshape(self._dimensions)

    def torch(self) -> torch.Tensor:
        return torch.from_numpy(self.numpy())

    def indices(self) -> Iterator[Index]:
        return iter(self.span)

    def values(self) -> Iterator[Any]:
        for value in self._buffer:
            yield value.item()

    def __iter__(self) -> Iterator[Any]:
        """Iterate over the elements in row-major order, like `values()`."""
        return self.values()

    def as_linear(self) -> StridedView:
        """The whole buffer as a unit-step linear view."""
        return StridedView(self._buffer, 0, self.count, 1)

    def axis_view(self, index: Sequence[int], axis: int) -> StridedView:
        """
        Linear view of the elements along `axis` through the multi-index `index`.

        The component of `index` at `axis` is ignored; the view covers the whole extent of that axis.

        Raises:
            ShapeError: If `axis` is not a dimension of the tensor.
            IndexError: If `index` is not a valid multi-index.
        """
        if not 0 <= axis < self.rank:
            raise ShapeError(f"Axis {axis} is out of range for rank {self.rank}")
        index = list(index)
        if len(index) != self.rank:
            raise IndexError(f"Index {tuple(index)} has rank {len(index)}, expected {self.rank}")
        index[axis] = 0
        start = self.flat_index(index)
        stride = self._strides[axis]
        end = start + (self._dimensions[axis] - 1) * stride + 1
        return StridedView(self._buffer, start, end, stride)

    def _check_matrix(self) -> None:
        if self.rank != 2:
            raise ShapeError(f"Rows and columns need a rank 2 tensor, got rank {self.rank}")

    def row(self, i: int) -> StridedView:
        self._check_matrix()
        return self.axis_view((i, 0), axis=1)

    def column(self, j: int) -> StridedView:
        self._check_matrix()
        return self.axis_view((0, j), axis=0)

    def extract_matrix(self, *index: Any) -> "Tensor":
        """
        Copy the region addressed by `index` into a rank 2 tensor.

        All but the last two dimensions of the region must have length 1, so `t.extract_matrix(1, 1, 0:2, 0:2)`
        on a rank 4 tensor gives a 2x2 matrix.

        Raises:
            ShapeError: If a leading dimension of the region is longer than 1.
        """
        region = self.slice(*index)
        dimensions = region.dimensions
        if len(dimensions) == 1:
            return Tensor.from_numpy(region.numpy().reshape(1, dimensions[0]))
        if any(d != 1 for d in dimensions[:-2]):
            raise ShapeError(f"Cannot extract a matrix from a region of dimensions {dimensions}")
        return Tensor.from_numpy(region.numpy().reshape(dimensions[-2:]))

    def descriptor(self) -> ViewDescriptor:
        return ViewDescriptor(buffer=self._buffer, offset=0, dimensions=self._dimensions, strides=self._strides)

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(dimensions={self._dimensions}, dtype={self.dtype})"

    def __str__(self) -> str:
        return format_planes(self)


__all__ = ["Tensor", "row_major_strides"]
