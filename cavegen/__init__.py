"""
Cave Generator - Modular Architecture
=====================================

Seeded cellular-automaton cave maps with guaranteed connectivity.

Pipeline:
- Random wall fill with a solid border
- Majority-rule smoothing
- Pruning of small wall pockets and small rooms
- Room graph stitched together with carved passages
- Entry and exit placed far apart inside the connected cave

Version: 1.0.0
"""

__version__ = "1.0.0"

from .errors import (
    CaveGenerationError,
    InvalidConfigError,
    InvalidDimensionsError,
    EmptyMapError,
    NoWarpCandidateError,
)
from .config import CaveConfig, get_logger, setup_logging
from .terrain import CellState, Grid
from .regions import Room, RoomGraph
from .connectivity import RoomConnector, get_line
from .placement import PointPlacer
from .metrics import GenerationStats
from .pipeline import CaveGenerator, CaveMap, generate_cave, SuiteRunner

__all__ = [
    'CaveGenerationError', 'InvalidConfigError', 'InvalidDimensionsError',
    'EmptyMapError', 'NoWarpCandidateError',
    'CaveConfig', 'get_logger', 'setup_logging',
    'CellState', 'Grid',
    'Room', 'RoomGraph',
    'RoomConnector', 'get_line',
    'PointPlacer',
    'GenerationStats',
    'CaveGenerator', 'CaveMap', 'generate_cave', 'SuiteRunner',
]
