"""
Errors raised by the indexing and view layer.

Out-of-bounds multi-indices and flat positions raise the builtin IndexError.
"""


class RangeError(IndexError):
    """An interval resolved outside the bounds of the dimension it addresses."""


class ShapeError(ValueError):
    """Rank or dimension mismatch between an index structure and its target."""


__all__ = ["RangeError", "ShapeError"]
