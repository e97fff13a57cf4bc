"""
Terrain Module
==============

Cell states, the grid container, noise fill and smoothing.
"""

from .types import CellState, Coord, GLYPHS
from .grid import Grid
from .generator import random_fill, smooth_grid, smooth_step, count_wall_neighbours

__all__ = [
    'CellState',
    'Coord',
    'GLYPHS',
    'Grid',
    'random_fill',
    'smooth_grid',
    'smooth_step',
    'count_wall_neighbours',
]
