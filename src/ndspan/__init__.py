"""
ndspan
"""
from ndspan.errors import RangeError, ShapeError
from ndspan.interval import ALL, Interval
from ndspan.span import Span, congruent
from ndspan.ranged_index import RangedIndex
from ndspan.linear import LinearBuffer, LinearType, MutableLinearType, StridedView
from ndspan.tensor import Tensor
from ndspan.tensor_slice import TensorSlice
from ndspan.utils import Slicer, print_tensor
from ndspan.config import configure_logging, get_settings, set_settings


__all__ = [
    "Tensor", "TensorSlice", "Span", "RangedIndex", "Interval", "ALL", "congruent",
    "LinearType", "MutableLinearType", "LinearBuffer", "StridedView",
    "RangeError", "ShapeError", "Slicer", "print_tensor",
    "configure_logging", "get_settings", "set_settings",
]
