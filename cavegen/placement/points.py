"""
Point Placement Module
======================

Entry and exit selection inside the connected open space.
"""

from collections import deque
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..config import get_logger
from ..errors import EmptyMapError, InvalidConfigError, NoWarpCandidateError
from ..terrain import CellState, Coord, Grid


@dataclass
class Placement:
    """Grid annotated with entry and exit"""
    grid: Grid
    entry: Coord
    exit: Coord
    reachable_cells: int
    attempts: int = 1

    @property
    def distance_sq(self) -> int:
        return (self.entry[0] - self.exit[0]) ** 2 + (self.entry[1] - self.exit[1]) ** 2


def find_reachable(grid: Grid) -> List[Coord]:
    """
    Open component of the first open cell in row-major order.

    Breadth-first over orthogonal open neighbours. When the connectivity
    phase succeeded this is every open cell of the grid.

    Raises:
        EmptyMapError: if the grid has no open cell
    """
    start = next(grid.iter_cells(CellState.OPEN), None)
    if start is None:
        raise EmptyMapError("Grid has no open cell to place points on")

    cells = grid.cells
    visited = np.zeros(cells.shape, dtype=bool)
    visited[start] = True
    queue = deque([start])
    reachable = []
    while queue:
        x, y = queue.popleft()
        reachable.append((x, y))
        for nx, ny in grid.neighbors4(x, y):
            if not visited[nx, ny] and cells[nx, ny] == CellState.OPEN:
                visited[nx, ny] = True
                queue.append((nx, ny))
    return reachable


class PointPlacer:
    """
    Picks the entry uniformly from the reachable set, then the exit
    uniformly from reachable cells at least ``exit_radius`` away.

    When a drawn entry has no valid exit, a new entry is drawn, up to
    ``max_entry_attempts`` times. The radius itself is never relaxed.
    """

    def __init__(self,
                 rng: np.random.Generator,
                 exit_radius_factor: float = 0.55,
                 max_entry_attempts: int = 10,
                 margin: float = 0.0):
        """
        Initialize placer.

        Args:
            rng: Seeded numpy generator (shared with the fill phase)
            exit_radius_factor: Exit radius as a fraction of max(width, height)
            max_entry_attempts: Entry draws before giving up
            margin: Fraction of each axis excluded at both ends (0 = none)
        """
        if max_entry_attempts < 1:
            raise InvalidConfigError("max_entry_attempts must be >= 1")
        if not 0.0 <= margin < 0.5:
            raise InvalidConfigError(f"margin must be within [0, 0.5), got {margin}")
        self.rng = rng
        self.exit_radius_factor = exit_radius_factor
        self.max_entry_attempts = max_entry_attempts
        self.margin = margin
        self.logger = get_logger(__name__)

    def exit_radius(self, grid: Grid) -> float:
        return self.exit_radius_factor * max(grid.width, grid.height)

    def _apply_margin(self, points: np.ndarray, grid: Grid) -> np.ndarray:
        if self.margin <= 0:
            return points
        mx = int(grid.width * self.margin)
        my = int(grid.height * self.margin)
        inside = ((points[:, 0] >= mx) & (points[:, 0] < grid.width - mx) &
                  (points[:, 1] >= my) & (points[:, 1] < grid.height - my))
        return points[inside]

    def place(self, grid: Grid) -> Placement:
        """
        Mark entry and exit on a copy of ``grid``.

        Raises:
            EmptyMapError: no open cell at all
            NoWarpCandidateError: no entry/exit pair found within the attempt budget
        """
        reachable = find_reachable(grid)
        pool = self._apply_margin(np.asarray(reachable, dtype=np.int64), grid)

        radius = self.exit_radius(grid)
        radius_sq = radius ** 2
        if len(pool) == 0:
            raise NoWarpCandidateError(None, radius, attempts=0)

        entry: Optional[Coord] = None
        exit_: Optional[Coord] = None
        attempt = 0
        for attempt in range(1, self.max_entry_attempts + 1):
            e = pool[self.rng.integers(len(pool))]
            entry = (int(e[0]), int(e[1]))

            d2 = np.sum((pool - e) ** 2, axis=1)
            candidates = pool[(d2 >= radius_sq) & (d2 > 0)]
            if len(candidates):
                c = candidates[self.rng.integers(len(candidates))]
                exit_ = (int(c[0]), int(c[1]))
                break

            self.logger.warning(f"No exit at distance >= {radius:.2f} from entry {entry} "
                                f"(attempt {attempt}/{self.max_entry_attempts})")

        if exit_ is None:
            raise NoWarpCandidateError(entry, radius, attempts=attempt)

        result = grid.copy()
        result[entry] = CellState.ENTRY
        result[exit_] = CellState.EXIT
        return Placement(
            grid=result,
            entry=entry,
            exit=exit_,
            reachable_cells=len(reachable),
            attempts=attempt
        )
