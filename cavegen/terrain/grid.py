"""
Grid Module
===========

Cell-state grid owned by a single generation run.
"""

import numpy as np
from typing import Iterator, List, Sequence

from .types import CellState, Coord


ORTHOGONAL_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))


class Grid:
    """
    Width x height array of CellState values.

    Stored as an int8 numpy array indexed ``cells[x, y]``. Row-major order
    in this package is the array's C order (x outer, y inner), which is
    also the order ``numpy.argwhere`` reports cells in.
    """

    def __init__(self, cells: np.ndarray):
        if cells.ndim != 2:
            raise ValueError(f"Grid needs a 2-D array, got shape {cells.shape}")
        self._cells = np.ascontiguousarray(cells, dtype=np.int8)

    @classmethod
    def filled(cls, width: int, height: int, state: CellState = CellState.WALL) -> 'Grid':
        return cls(np.full((width, height), int(state), dtype=np.int8))

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> 'Grid':
        """
        Build a grid from glyph rows, one string per y.

        Inverse of ``to_rows``; mostly useful for hand-written fixtures.
        """
        if not rows:
            raise ValueError("Grid needs at least one row")
        width = len(rows[0])
        if any(len(r) != width for r in rows):
            raise ValueError("All grid rows must have the same length")
        cells = np.empty((width, len(rows)), dtype=np.int8)
        for y, row in enumerate(rows):
            for x, glyph in enumerate(row):
                cells[x, y] = CellState.from_glyph(glyph)
        return cls(cells)

    # ==================== Property Access ====================

    @property
    def cells(self) -> np.ndarray:
        """Underlying state array (x, y)"""
        return self._cells

    @property
    def width(self) -> int:
        return self._cells.shape[0]

    @property
    def height(self) -> int:
        return self._cells.shape[1]

    @property
    def size(self) -> int:
        return self._cells.size

    def copy(self) -> 'Grid':
        return Grid(self._cells.copy())

    # ==================== Cell Queries ====================

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if cell is within grid bounds"""
        return 0 <= x < self.width and 0 <= y < self.height

    def __getitem__(self, pos: Coord) -> CellState:
        x, y = pos
        return CellState(int(self._cells[x, y]))

    def __setitem__(self, pos: Coord, state: CellState):
        x, y = pos
        self._cells[x, y] = int(state)

    def is_walkable(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return self._cells[x, y] != CellState.WALL

    def mask(self, state: CellState) -> np.ndarray:
        return self._cells == int(state)

    def walkable_mask(self) -> np.ndarray:
        return self._cells != int(CellState.WALL)

    def count(self, state: CellState) -> int:
        return int(np.count_nonzero(self._cells == int(state)))

    def border_mask(self) -> np.ndarray:
        """True on every cell of the outer ring"""
        border = np.zeros(self._cells.shape, dtype=bool)
        border[0, :] = border[-1, :] = True
        border[:, 0] = border[:, -1] = True
        return border

    def neighbors4(self, x: int, y: int) -> List[Coord]:
        """In-bounds orthogonal neighbours"""
        neighbors = []
        for dx, dy in ORTHOGONAL_OFFSETS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                neighbors.append((nx, ny))
        return neighbors

    def iter_cells(self, state: CellState) -> Iterator[Coord]:
        """Cells of a given state in row-major order"""
        for x, y in np.argwhere(self._cells == int(state)):
            yield (int(x), int(y))

    # ==================== Export ====================

    def to_rows(self) -> List[str]:
        """One glyph string per y"""
        lookup = np.array([CellState(v).glyph for v in range(len(CellState))])
        return [''.join(lookup[self._cells[:, y]]) for y in range(self.height)]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return np.array_equal(self._cells, other._cells)

    def __repr__(self) -> str:
        return (f"Grid({self.width}x{self.height}, "
                f"walls={self.count(CellState.WALL)}, open={self.count(CellState.OPEN)})")
