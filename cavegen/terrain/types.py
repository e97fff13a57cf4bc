"""
Cell Types Module
=================

Defines the cell state enumeration and its text glyphs.
"""

from enum import IntEnum
from typing import Dict, Tuple


Coord = Tuple[int, int]


class CellState(IntEnum):
    """
    Cell state enumeration.

    Values are integers for efficient numpy array storage. OPEN and WALL
    keep 0 and 1 so that a wall count is a plain sum over a mask.
    """
    OPEN = 0
    WALL = 1
    ENTRY = 2
    EXIT = 3

    @classmethod
    def from_glyph(cls, glyph: str) -> 'CellState':
        """Get cell state from its single-character glyph"""
        for state, g in GLYPHS.items():
            if g == glyph:
                return state
        raise ValueError(f"Unknown cell glyph: {glyph!r}")

    @property
    def glyph(self) -> str:
        return GLYPHS[self]


GLYPHS: Dict[CellState, str] = {
    CellState.OPEN: '.',
    CellState.WALL: '#',
    CellState.ENTRY: 'S',
    CellState.EXIT: 'E',
}
