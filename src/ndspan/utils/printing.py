"""
Text and rich renderings of tensors and slices.

Rank 1 prints as a single row, rank 2 as a matrix and higher ranks as a sequence of 2-D planes, one per
index of the leading dimensions, in row-major order.
"""
import math
from numbers import Real
from typing import Any, Iterator, List, Optional, Tuple

from rich.console import Console
from rich.table import Table

from ndspan.config import get_settings
from ndspan.span import Span

_ELLIPSIS = "..."


def _format_value(value: Any) -> str:
    if isinstance(value, Real) and not isinstance(value, bool):
        return format(value, "g")
    return str(value)


def _positions(n: int, edge_items: int, elide: bool) -> List[Optional[int]]:
    """Positions to show along one axis; None marks the elided middle."""
    if not elide or n <= 2 * edge_items:
        return list(range(n))
    return [*range(edge_items), None, *range(n - edge_items, n)]


def _planes(dimensions: Tuple[int, ...]) -> Iterator[Tuple[int, ...]]:
    if len(dimensions) <= 2:
        yield ()
    else:
        yield from Span.zero_to(dimensions[:-2])


def _plane_rows(view: Any, plane: Tuple[int, ...], dimensions: Tuple[int, ...], edge_items: int, elide: bool) -> List[List[str]]:
    if len(dimensions) == 1:
        return [[_ELLIPSIS if j is None else _format_value(view[(j,)]) for j in _positions(dimensions[0], edge_items, elide)]]

    rows, columns = dimensions[-2:]
    column_positions = _positions(columns, edge_items, elide)
    lines = []
    for i in _positions(rows, edge_items, elide):
        if i is None:
            lines.append([_ELLIPSIS] * len(column_positions))
            continue
        lines.append([_ELLIPSIS if j is None else _format_value(view[(*plane, i, j)]) for j in column_positions])
    return lines


def _plane_label(plane: Tuple[int, ...]) -> str:
    return f"plane {', '.join(str(i) for i in plane)}"


def format_planes(view: Any) -> str:
    """
    Render a Tensor or TensorSlice (anything with `dimensions` and multi-index element access) as text.

    Views with more elements than the configured print threshold keep only `print_edge_items` entries at each
    edge of every axis.
    """
    settings = get_settings()
    dimensions = tuple(view.dimensions)
    elide = math.prod(dimensions) > settings.print_threshold
    edge_items = settings.print_edge_items

    blocks = []
    plane_keys: List[Optional[Tuple[int, ...]]] = list(_planes(dimensions))
    if elide and len(plane_keys) > 2 * edge_items:
        plane_keys = [*plane_keys[:edge_items], None, *plane_keys[-edge_items:]]

    for plane in plane_keys:
        if plane is None:
            blocks.append(_ELLIPSIS)
            continue
        rows = _plane_rows(view, plane, dimensions, edge_items, elide)
        text = "\n".join(f"[{', '.join(row)}]" for row in rows)
        if plane:
            text = f"{_plane_label(plane)}:\n{text}"
        blocks.append(text)
    return "\n\n".join(blocks)


def print_tensor(view: Any, console: Optional[Console] = None) -> None:
    """Print a Tensor or TensorSlice as one rich table per plane."""
    console = console if console is not None else Console()
    settings = get_settings()
    dimensions = tuple(view.dimensions)
    elide = math.prod(dimensions) > settings.print_threshold

    for plane in _planes(dimensions):
        title = _plane_label(plane) if plane else f"dimensions={dimensions}"
        table = Table(title=title, show_header=False)
        rows = _plane_rows(view, plane, dimensions, settings.print_edge_items, elide)
        for _ in rows[0]:
            table.add_column(justify="right")
        for row in rows:
            table.add_row(*row)
        console.print(table)


__all__ = ["format_planes", "print_tensor"]
