"""
Rooms Module
============

Room graph built from the open regions that survive pruning.

Rooms live in a single table and refer to each other only by their
integer index in that table.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set

import numpy as np

from .extraction import Region
from ..errors import EmptyMapError
from ..terrain import CellState, Coord, Grid


@dataclass
class Room:
    """
    Graph node for one surviving open region.

    Attributes:
        index: Position in the owning RoomGraph
        tiles: Member cells, row-major
        edge_tiles: Member cells with an orthogonal wall neighbour, row-major
        connected: Indices of directly linked rooms
    """
    index: int
    tiles: List[Coord]
    edge_tiles: List[Coord]
    connected: Set[int] = field(default_factory=set)
    is_main: bool = False
    is_accessible_from_main: bool = False

    @property
    def size(self) -> int:
        return len(self.tiles)

    @property
    def edge_array(self) -> np.ndarray:
        """Edge tiles as an (n, 2) int64 array"""
        if not self.edge_tiles:
            return np.empty((0, 2), dtype=np.int64)
        return np.asarray(self.edge_tiles, dtype=np.int64)

    def is_connected(self, other: int) -> bool:
        return other in self.connected

    def to_dict(self) -> Dict:
        return {
            'index': self.index,
            'size': self.size,
            'edge_tiles': len(self.edge_tiles),
            'connected': sorted(self.connected),
            'is_main': self.is_main,
            'is_accessible_from_main': self.is_accessible_from_main,
        }


class RoomGraph:
    """
    Indexed room table with a symmetric connection relation.

    Room 0 is always the main room.
    """

    def __init__(self, rooms: List[Room]):
        self.rooms = rooms

    def __len__(self) -> int:
        return len(self.rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(self.rooms)

    def __getitem__(self, index: int) -> Room:
        return self.rooms[index]

    @property
    def main(self) -> Room:
        return self.rooms[0]

    def connect(self, a: int, b: int):
        """
        Link two rooms both ways.

        Accessibility flows from whichever side already has it into the
        whole component reachable from the other side.
        """
        room_a, room_b = self.rooms[a], self.rooms[b]
        if room_a.is_accessible_from_main:
            self.set_accessible_from_main(b)
        elif room_b.is_accessible_from_main:
            self.set_accessible_from_main(a)
        room_a.connected.add(b)
        room_b.connected.add(a)

    def set_accessible_from_main(self, index: int):
        """Mark a room and everything linked to it, using a worklist"""
        queue = deque([index])
        while queue:
            room = self.rooms[queue.popleft()]
            if room.is_accessible_from_main:
                continue
            room.is_accessible_from_main = True
            queue.extend(i for i in room.connected
                         if not self.rooms[i].is_accessible_from_main)

    def accessible_indices(self) -> List[int]:
        return [r.index for r in self.rooms if r.is_accessible_from_main]

    def inaccessible_indices(self) -> List[int]:
        return [r.index for r in self.rooms if not r.is_accessible_from_main]

    def is_fully_connected(self) -> bool:
        return all(r.is_accessible_from_main for r in self.rooms)

    def edge_count(self) -> int:
        return sum(len(r.connected) for r in self.rooms) // 2

    def to_dict(self) -> Dict:
        return {
            'room_count': len(self.rooms),
            'connections': self.edge_count(),
            'rooms': [r.to_dict() for r in self.rooms],
        }


def _wall_contact_mask(grid: Grid) -> np.ndarray:
    """True where a cell has an in-bounds orthogonal wall neighbour"""
    walls = np.pad(grid.cells == CellState.WALL, 1, mode='constant', constant_values=False)
    return walls[:-2, 1:-1] | walls[2:, 1:-1] | walls[1:-1, :-2] | walls[1:-1, 2:]


def build_rooms(regions: List[Region], grid: Grid) -> RoomGraph:
    """
    Promote surviving open regions to rooms.

    Rooms are ordered by size, largest first; equal sizes keep region
    discovery order. The largest becomes the main room.

    Raises:
        EmptyMapError: if no region is given
    """
    if not regions:
        raise EmptyMapError()

    contact = _wall_contact_mask(grid)
    ordered = sorted(regions, key=lambda r: r.size, reverse=True)

    rooms = []
    for index, region in enumerate(ordered):
        tiles = sorted(region.tiles)
        edge_tiles = [t for t in tiles if contact[t]]
        rooms.append(Room(index=index, tiles=tiles, edge_tiles=edge_tiles))

    rooms[0].is_main = True
    rooms[0].is_accessible_from_main = True
    return RoomGraph(rooms)
