"""
Passages Module
===============

Line rasterization and circular-brush carving of connecting passages.
"""

import numpy as np
from typing import List

from ..errors import InvalidConfigError
from ..terrain import CellState, Coord, Grid


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def get_line(start: Coord, end: Coord) -> List[Coord]:
    """
    Integer incremental line from ``start`` towards ``end``.

    The axis with the larger delta is the major axis and advances one
    cell per step; the minor axis advances whenever the accumulated error
    reaches the major length. The start cell is included, the end cell is
    not, so the line holds exactly max(|dx|, |dy|) cells.
    """
    x, y = start
    dx = end[0] - x
    dy = end[1] - y

    inverted = False
    step = _sign(dx)
    gradient_step = _sign(dy)
    longest = abs(dx)
    shortest = abs(dy)

    if longest < shortest:
        inverted = True
        longest, shortest = shortest, longest
        step, gradient_step = gradient_step, step

    line = []
    gradient_accumulation = longest // 2
    for _ in range(longest):
        line.append((x, y))

        if inverted:
            y += step
        else:
            x += step

        gradient_accumulation += shortest
        if gradient_accumulation >= longest:
            if inverted:
                x += gradient_step
            else:
                y += gradient_step
            gradient_accumulation -= longest

    return line


def brush_offsets(radius: int) -> np.ndarray:
    """(k, 2) offsets of the filled disk dx^2 + dy^2 <= radius^2"""
    if radius < 0:
        raise InvalidConfigError(f"brush radius must be >= 0, got {radius}")
    span = np.arange(-radius, radius + 1)
    dx, dy = np.meshgrid(span, span, indexing='ij')
    inside = dx ** 2 + dy ** 2 <= radius ** 2
    return np.stack([dx[inside], dy[inside]], axis=1)


def paint_line(cells: np.ndarray, line: List[Coord], radius: int,
               state: CellState = CellState.OPEN) -> int:
    """
    Stamp the brush on every line cell, in place.

    Returns:
        Number of cells whose state changed
    """
    if not line:
        return 0
    points = np.asarray(line, dtype=np.int64)
    stamped = (points[:, None, :] + brush_offsets(radius)[None, :, :]).reshape(-1, 2)

    width, height = cells.shape
    inside = ((stamped[:, 0] >= 0) & (stamped[:, 0] < width) &
              (stamped[:, 1] >= 0) & (stamped[:, 1] < height))
    flat = np.unique(stamped[inside, 0] * height + stamped[inside, 1])
    xs, ys = flat // height, flat % height

    changed = int(np.count_nonzero(cells[xs, ys] != int(state)))
    cells[xs, ys] = int(state)
    return changed


def carve_passage(grid: Grid, start: Coord, end: Coord, radius: int) -> Grid:
    """Open a tunnel of width about 2r+1 from ``start`` to ``end`` on a copy of ``grid``"""
    result = grid.copy()
    paint_line(result.cells, get_line(start, end), radius)
    return result
