"""
Room Connector Module
=====================

Carves passages between rooms until every room is reachable from the
main room.

Two phases run in sequence:
- pairwise: every room without any connection is joined to its nearest
  room it is not already linked to
- main: the nearest (unreached, reached) room pair is joined, repeatedly,
  until no unreached room is left
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .passages import get_line, paint_line
from ..config import get_logger
from ..errors import CaveGenerationError, InvalidConfigError
from ..regions import Room, RoomGraph
from ..terrain import Coord, Grid


PHASE_PAIRWISE = 'pairwise'
PHASE_MAIN = 'main'


@dataclass
class Passage:
    """One carved connection between two rooms"""
    room_a: int
    room_b: int
    tile_a: Coord
    tile_b: Coord
    phase: str
    cells_opened: int = 0

    @property
    def distance_sq(self) -> int:
        return (self.tile_a[0] - self.tile_b[0]) ** 2 + (self.tile_a[1] - self.tile_b[1]) ** 2

    def to_dict(self):
        return {
            'room_a': self.room_a,
            'room_b': self.room_b,
            'tile_a': list(self.tile_a),
            'tile_b': list(self.tile_b),
            'phase': self.phase,
            'distance_sq': self.distance_sq,
            'cells_opened': self.cells_opened,
        }


@dataclass
class _Candidate:
    distance_sq: int
    room_a: int
    room_b: int
    tile_a: Coord
    tile_b: Coord


def closest_edge_pair(room_a: Room, room_b: Room) -> Optional[Tuple[int, Coord, Coord]]:
    """
    Nearest pair of edge tiles between two rooms.

    Squared Euclidean distance; on ties the first pair in scan order
    (edge tiles of ``room_a`` outer, ``room_b`` inner) wins.

    Returns:
        (distance_sq, tile_a, tile_b), or None if either room has no edge
    """
    a = room_a.edge_array
    b = room_b.edge_array
    if len(a) == 0 or len(b) == 0:
        return None

    diff = a[:, None, :] - b[None, :, :]
    dist = np.einsum('ijk,ijk->ij', diff, diff)
    i, j = divmod(int(np.argmin(dist)), dist.shape[1])
    return (int(dist[i, j]),
            (int(a[i, 0]), int(a[i, 1])),
            (int(b[j, 0]), int(b[j, 1])))


class RoomConnector:
    """
    Two-phase greedy room stitching.

    Owns a private copy of the grid; ``connect()`` returns the carved grid.
    """

    def __init__(self, grid: Grid, graph: RoomGraph, brush_radius: int = 2):
        """
        Initialize connector.

        Args:
            grid: Pruned grid (copied, never mutated)
            graph: Room graph; connections are recorded on it
            brush_radius: Passage brush radius in cells (>= 1)
        """
        if brush_radius < 1:
            raise InvalidConfigError(
                f"brush_radius must be >= 1 to keep passages 4-connected, got {brush_radius}")
        self.grid = grid.copy()
        self.graph = graph
        self.brush_radius = brush_radius
        self.passages: List[Passage] = []
        self.logger = get_logger(__name__)

    def connect(self) -> Grid:
        """Run both phases and return the carved grid"""
        phase = PHASE_PAIRWISE
        while phase is not None:
            if phase == PHASE_PAIRWISE:
                self._connect_isolated_rooms()
                phase = PHASE_MAIN
                continue

            unreached = self.graph.inaccessible_indices()
            if not unreached:
                phase = None
                continue

            best = self._closest_pair(unreached, self.graph.accessible_indices())
            if best is None:
                raise CaveGenerationError(
                    f"{len(unreached)} room(s) cannot be linked to the main room")
            self._create_passage(best, PHASE_MAIN)

        self.logger.debug(f"Connected {len(self.graph)} rooms with "
                          f"{len(self.passages)} passages")
        return self.grid

    def _connect_isolated_rooms(self):
        every_room = [room.index for room in self.graph]
        for room in self.graph:
            # Rooms linked earlier in this pass are skipped too
            if room.connected:
                continue
            best = self._closest_pair([room.index], every_room)
            if best is not None:
                self._create_passage(best, PHASE_PAIRWISE)

    def _closest_pair(self, side_a: Sequence[int], side_b: Sequence[int]) -> Optional[_Candidate]:
        best = None
        for ia in side_a:
            room_a = self.graph[ia]
            for ib in side_b:
                if ia == ib or room_a.is_connected(ib):
                    continue
                pair = closest_edge_pair(room_a, self.graph[ib])
                if pair is None:
                    continue
                if best is None or pair[0] < best.distance_sq:
                    best = _Candidate(pair[0], ia, ib, pair[1], pair[2])
        return best

    def _create_passage(self, candidate: _Candidate, phase: str):
        self.graph.connect(candidate.room_a, candidate.room_b)
        line = get_line(candidate.tile_a, candidate.tile_b)
        opened = paint_line(self.grid.cells, line, self.brush_radius)

        passage = Passage(
            room_a=candidate.room_a,
            room_b=candidate.room_b,
            tile_a=candidate.tile_a,
            tile_b=candidate.tile_b,
            phase=phase,
            cells_opened=opened
        )
        self.passages.append(passage)
        self.logger.debug(f"[{phase}] room {passage.room_a} <-> room {passage.room_b}: "
                          f"{passage.tile_a} -> {passage.tile_b}, {opened} cells opened")
