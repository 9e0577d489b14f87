"""
Subscript normalisation and printing
"""

from ndspan.utils.slicer import Slicer
from ndspan.utils.printing import format_planes, print_tensor

__all__ = ["Slicer", "format_planes", "print_tensor"]
