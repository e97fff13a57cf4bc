"""
Connectivity Module
===================

Passage rasterization and room stitching.
"""

from .passages import get_line, brush_offsets, paint_line, carve_passage
from .connector import (
    RoomConnector,
    Passage,
    closest_edge_pair,
    PHASE_PAIRWISE,
    PHASE_MAIN,
)

__all__ = [
    'get_line',
    'brush_offsets',
    'paint_line',
    'carve_passage',
    'RoomConnector',
    'Passage',
    'closest_edge_pair',
    'PHASE_PAIRWISE',
    'PHASE_MAIN',
]
