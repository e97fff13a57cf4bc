"""
Regions Module
==============

Region extraction, pruning and the room graph.
"""

from .extraction import Region, PruneResult, extract_regions, prune_regions
from .rooms import Room, RoomGraph, build_rooms

__all__ = [
    'Region',
    'PruneResult',
    'extract_regions',
    'prune_regions',
    'Room',
    'RoomGraph',
    'build_rooms',
]
