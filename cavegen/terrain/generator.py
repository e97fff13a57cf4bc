"""
Terrain Generator Module
========================

Noise fill and cellular-automaton smoothing of the raw cave grid.
Single Responsibility: only produces and relaxes wall/open noise.
"""

import numpy as np
from scipy.ndimage import convolve

from .grid import Grid
from .types import CellState
from ..errors import InvalidConfigError, InvalidDimensionsError
from ..config import get_logger


logger = get_logger(__name__)

# 8-neighbourhood, centre excluded
NEIGHBOUR_KERNEL = np.array([[1, 1, 1],
                             [1, 0, 1],
                             [1, 1, 1]], dtype=np.int16)

# Neighbour wall count above which a cell becomes wall (below: open, equal: kept)
WALL_THRESHOLD = 4


def random_fill(width: int, height: int, fill_percent: int,
                rng: np.random.Generator) -> Grid:
    """
    Generate the initial noisy grid.

    Border cells are always wall. Each interior cell rolls an integer in
    [0, 100) and becomes wall when the roll is below ``fill_percent``.
    Rolls are drawn in one call over the interior in row-major order, so
    a given generator state always yields the same grid.

    Args:
        width: Cells along x (> 3)
        height: Cells along y (> 3)
        fill_percent: 0-100 chance of an interior wall
        rng: Seeded numpy generator

    Returns:
        New Grid
    """
    if width <= 3 or height <= 3:
        raise InvalidDimensionsError(width, height)
    if not 0 <= fill_percent <= 100:
        raise InvalidConfigError(f"fill_percent must be within 0-100, got {fill_percent}")

    cells = np.full((width, height), int(CellState.WALL), dtype=np.int8)
    rolls = rng.integers(0, 100, size=(width - 2, height - 2))
    cells[1:-1, 1:-1] = np.where(rolls < fill_percent, CellState.WALL, CellState.OPEN)

    grid = Grid(cells)
    logger.debug(f"Random fill {width}x{height} at {fill_percent}%: "
                 f"{grid.count(CellState.WALL)} walls")
    return grid


def count_wall_neighbours(grid: Grid) -> np.ndarray:
    """
    Wall count over the 8 neighbours of every cell.

    Out-of-bounds neighbours count as wall (constant padding of 1).
    """
    walls = (grid.cells == CellState.WALL).astype(np.int16)
    return convolve(walls, NEIGHBOUR_KERNEL, mode='constant', cval=1)


def smooth_step(grid: Grid) -> Grid:
    """One automaton pass, every cell read from the same snapshot"""
    counts = count_wall_neighbours(grid)
    cells = grid.cells.copy()
    cells[counts > WALL_THRESHOLD] = CellState.WALL
    cells[counts < WALL_THRESHOLD] = CellState.OPEN
    return Grid(cells)


def smooth_grid(grid: Grid, iterations: int) -> Grid:
    """
    Apply ``iterations`` smoothing passes.

    The input grid is left untouched; zero iterations return a copy.
    """
    if iterations < 0:
        raise InvalidConfigError(f"iterations must be >= 0, got {iterations}")

    result = grid.copy()
    for i in range(iterations):
        result = smooth_step(result)
        logger.debug(f"Smoothing pass {i + 1}/{iterations}: "
                     f"{result.count(CellState.WALL)} walls")
    return result
