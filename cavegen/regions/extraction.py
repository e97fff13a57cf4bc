"""
Region Extraction Module
========================

Connected-component analysis and size-based pruning of the cave grid.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import List

import numpy as np

from ..config import get_logger
from ..terrain import CellState, Coord, Grid
from ..terrain.grid import ORTHOGONAL_OFFSETS


logger = get_logger(__name__)


@dataclass
class Region:
    """Maximal 4-connected set of same-state cells"""
    state: CellState
    tiles: List[Coord] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.tiles)

    def __len__(self) -> int:
        return len(self.tiles)


@dataclass
class PruneResult:
    """Grid after pruning plus the open regions that survived it"""
    grid: Grid
    rooms: List[Region]
    wall_regions_removed: int = 0
    room_regions_removed: int = 0


def _flood_collect(cells: np.ndarray, start: Coord, target: int,
                   visited: np.ndarray) -> List[Coord]:
    width, height = cells.shape
    queue = deque([start])
    visited[start] = True
    tiles = []
    while queue:
        x, y = queue.popleft()
        tiles.append((x, y))
        for dx, dy in ORTHOGONAL_OFFSETS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height \
                    and not visited[nx, ny] and cells[nx, ny] == target:
                visited[nx, ny] = True
                queue.append((nx, ny))
    return tiles


def extract_regions(grid: Grid, state: CellState) -> List[Region]:
    """
    Find every maximal 4-connected region of ``state``.

    Seeds are taken in row-major order and grown breadth-first through
    orthogonal neighbours only. Each matching cell lands in exactly one
    region.
    """
    cells = grid.cells
    target = int(state)
    visited = np.zeros(cells.shape, dtype=bool)
    regions = []
    for sx, sy in np.argwhere(cells == target):
        start = (int(sx), int(sy))
        if visited[start]:
            continue
        regions.append(Region(state, _flood_collect(cells, start, target, visited)))
    return regions


def _fill_region(cells: np.ndarray, region: Region, state: CellState):
    xs, ys = zip(*region.tiles)
    cells[list(xs), list(ys)] = int(state)


def prune_regions(grid: Grid, wall_threshold: int, room_threshold: int) -> PruneResult:
    """
    Reclassify undersized regions into the opposite state.

    Wall regions smaller than ``wall_threshold`` open up first; the open
    regions are then extracted from that updated grid and those smaller
    than ``room_threshold`` are walled in.

    Args:
        grid: Smoothed grid (left untouched)
        wall_threshold: Minimum wall region size
        room_threshold: Minimum open region size

    Returns:
        PruneResult with the new grid and the surviving open regions
    """
    result = grid.copy()
    cells = result.cells

    wall_removed = 0
    for region in extract_regions(result, CellState.WALL):
        if region.size < wall_threshold:
            _fill_region(cells, region, CellState.OPEN)
            wall_removed += 1

    room_removed = 0
    survivors = []
    for region in extract_regions(result, CellState.OPEN):
        if region.size < room_threshold:
            _fill_region(cells, region, CellState.WALL)
            room_removed += 1
        else:
            survivors.append(region)

    logger.debug(f"Pruning: {wall_removed} wall regions opened, "
                 f"{room_removed} open regions filled, {len(survivors)} rooms left")

    return PruneResult(
        grid=result,
        rooms=survivors,
        wall_regions_removed=wall_removed,
        room_regions_removed=room_removed
    )
