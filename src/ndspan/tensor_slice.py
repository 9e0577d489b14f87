import logging
from numbers import Number
from typing import TYPE_CHECKING, Any, Callable, Iterator, NamedTuple, Sequence, Tuple

import numpy as np
import torch

from ndspan.errors import ShapeError
from ndspan.ranged_index import RangedIndex
from ndspan.span import Index, Span, congruent
from ndspan.utils.printing import format_planes
from ndspan.utils.slicer import Slicer

if TYPE_CHECKING:
    from ndspan.tensor import Tensor

logger = logging.getLogger(__name__)


class ViewDescriptor(NamedTuple):
    """
    Validated view metadata handed to kernel code.

    Attributes:
        buffer: The flat backing numpy array of the root tensor.
        offset: Flat offset of the view's first element.
        dimensions: Length of each dimension of the view.
        strides: Row-major strides of the root tensor, in elements.
    """

    buffer: np.ndarray
    offset: int
    dimensions: Tuple[int, ...]
    strides: Tuple[int, ...]


def _is_viewlike(value: Any) -> bool:
    return isinstance(value, (np.ndarray, torch.Tensor)) or (hasattr(value, "dimensions") and hasattr(value, "get"))


def _as_source(value: Any, action: str) -> Any:
    """
    Bring a Tensor, TensorSlice, numpy array, torch tensor or nested list into a readable form.

    torch tensors and nested lists become numpy arrays; a CPU torch tensor keeps sharing its memory.

    Raises:
        TypeError: For any other kind of value.
    """
    if isinstance(value, torch.Tensor):
        return value.detach().cpu().numpy()
    if isinstance(value, (list, tuple)):
        return np.asarray(value)
    if _is_viewlike(value):
        return value
    raise TypeError(
        f"Cannot {action} {type(value).__name__}: expected a Tensor, TensorSlice, numpy array, torch tensor or nested list"
    )


def _dimensions_of(value: Any) -> Tuple[int, ...]:
    if isinstance(value, np.ndarray):
        return tuple(int(d) for d in value.shape)
    return tuple(value.dimensions)


def _reader(source: Any) -> Callable[[Index], Any]:
    if isinstance(source, np.ndarray):
        return lambda index: source[index].item()
    return source.get


def _flat_values(source: Any) -> Iterator[Any]:
    if isinstance(source, np.ndarray):
        return (v.item() for v in source.ravel())
    return source.values()


class TensorSlice:
    """
    A non-owning, bounds-checked view of a rectangular region of a Tensor.

    Every local index is translated into the base's coordinates by adding the slice's per-dimension start
    before it is delegated to the base, so reads and writes go straight to the base's storage. A TensorSlice
    of a TensorSlice is flattened: its offset is composed onto the parent's and it keeps a reference to the
    root tensor only.

    Slices alias freely. Several slices may cover overlapping regions of the same base and a write through
    any of them is visible through all the others and through the base itself.

    Attributes:
        base (Tensor): The root tensor owning the storage.
        offset (RangedIndex): The addressed region, in the base's coordinates.
        dimensions (Tuple[int, ...]): Length of each dimension of the slice.
    """

    def __init__(self, base: "Tensor | TensorSlice", offset: Span | Sequence[Any]):
        """
        Args:
            base: The tensor to view, or a parent slice. For a parent slice `offset` is relative to the
                parent's local index space.
            offset: A Span / RangedIndex or one interval per dimension.

        Raises:
            ShapeError: If the offset's rank differs from the base's rank.
            RangeError: If the offset reaches outside the base (or the parent slice).
        """
        if isinstance(base, TensorSlice):
            intervals = Slicer.normalize(offset) if isinstance(offset, Span) else offset
            offset = RangedIndex.compose(base.offset, intervals)
            base = base.base
        elif isinstance(offset, RangedIndex):
            offset.check_within(base.dimensions)
        elif isinstance(offset, Span):
            offset = RangedIndex(offset.ranges)
            offset.check_within(base.dimensions)
        else:
            offset = RangedIndex.resolve(base.dimensions, offset)

        self._base = base
        self._offset: RangedIndex = offset
        self._dimensions: Tuple[int, ...] = offset.dimensions
        logger.debug(f"Created {type(self).__qualname__} {offset} of base with dimensions {base.dimensions}")

    @property
    def base(self) -> "Tensor":
        return self._base

    @property
    def offset(self) -> RangedIndex:
        return self._offset

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
        return self._offset.count

    @property
    def start_index(self) -> Index:
        return self._offset.start_index

    @property
    def span(self) -> Span:
        """The local index space, starting at zero in every dimension."""
        return Span.zero_to(self._dimensions)

    @property
    def dtype(self) -> np.dtype:
        return self._base.dtype

    def to_base_index(self, index: Sequence[int]) -> Index:
        return self._offset.to_base(index)

    def get(self, index: Sequence[int]) -> Any:
        return self._base.get(self._offset.to_base(index))

    def set(self, index: Sequence[int], value: Any) -> None:
        self._base.set(self._offset.to_base(index), value)

    def __getitem__(self, index: Any) -> "Any | TensorSlice":
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

    def assign(self, source: Any) -> None:
        """
        Copy `source` into the viewed region, element by element.

        `source` is a scalar (filling the region) or a TensorSlice, Tensor, numpy array, torch tensor or
        nested list with exactly the same dimensions. Congruent shapes with different ranks are rejected.
        Sources sharing storage with the base are read completely before anything is written.

        Raises:
            ShapeError: If the dimensions of `source` differ from the slice's.
            TypeError: If `source` is none of the supported kinds.
        """
        if isinstance(source, (Number, np.generic)):
            logger.debug(f"Filling {self._offset} with {source}")
            for base_index in self._offset:
                self._base.set(base_index, source)
            return

        source = _as_source(source, "assign from")
        source_dimensions = _dimensions_of(source)
        if source_dimensions != self._dimensions:
            raise ShapeError(f"Cannot assign a source of dimensions {source_dimensions} to a slice of dimensions {self._dimensions}")

        read = _reader(source)
        local_indices = list(self.span)
        if self._aliases(source):
            values = [read(index) for index in local_indices]
        else:
            values = (read(index) for index in local_indices)

        logger.debug(f"Assigning {len(local_indices)} elements into {self._offset}")
        for index, value in zip(local_indices, values):
            self._base.set(self._offset.to_base(index), value)

    def _aliases(self, source: Any) -> bool:
        if isinstance(source, TensorSlice):
            return source.base is self._base
        if isinstance(source, np.ndarray):
            return np.may_share_memory(source, self._base.buffer)
        return source is self._base

    def indices(self) -> Iterator[Index]:
        return iter(self.span)

    def values(self) -> Iterator[Any]:
        for index in self._offset:
            yield self._base.get(index)

    def __iter__(self) -> Iterator[Any]:
        """Iterate over the elements in row-major order, like `values()`."""
        return self.values()

    def __eq__(self, other: object) -> bool:
        """
        Element-wise equality with another slice, a Tensor or an array of the same dimensions.

        Different dimensions compare unequal; see `matches` for comparing congruent shapes.
        """
        if not _is_viewlike(other):
            return NotImplemented
        other = _as_source(other, "compare with")
        if _dimensions_of(other) != self._dimensions:
            return False
        read = _reader(other)
        for index in self.span:
            if self.get(index) != read(index):
                return False
        return True

    __hash__ = None

    def matches(self, other: Any) -> bool:
        """
        Element-wise equality across congruent shapes, e.g. a (1, 2, 2) slice against a (2, 2) matrix.

        `other` is a Tensor, TensorSlice, numpy array, torch tensor or nested list of elements.

        Raises:
            ShapeError: If the shapes are not congruent.
            TypeError: If `other` is none of the supported kinds.
        """
        other = _as_source(other, "compare with")
        if not congruent(self._dimensions, _dimensions_of(other)):
            raise ShapeError(f"Dimensions {self._dimensions} and {_dimensions_of(other)} are not congruent")
        return all(a == b for a, b in zip(self.values(), _flat_values(other)))

    def numpy(self) -> np.ndarray:
        """A numpy view of the region; writes to it go to the base."""
        return self._base.numpy()[self._offset.to_slices()]

    def torch(self) -> torch.Tensor:
        return torch.from_numpy(self.numpy())

    def copy(self) -> "Tensor":
        """Materialize the region into a new Tensor that owns its storage."""
        return type(self._base).from_numpy(self.numpy())

    def descriptor(self) -> ViewDescriptor:
        return ViewDescriptor(
            buffer=self._base.buffer,
            offset=self._base.flat_index(self.start_index),
            dimensions=self._dimensions,
            strides=self._base.strides,
        )

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(offset={self._offset}, dimensions={self._dimensions}, base_dimensions={self._base.dimensions})"

    def __str__(self) -> str:
        return format_planes(self)


__all__ = ["TensorSlice", "ViewDescriptor"]
