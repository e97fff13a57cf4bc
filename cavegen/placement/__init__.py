"""
Placement Module
================

Entry/exit selection on the finished cave.
"""

from .points import PointPlacer, Placement, find_reachable

__all__ = [
    'PointPlacer',
    'Placement',
    'find_reachable',
]
