"""
Generation Metrics Module
=========================

Per-run statistics and per-phase timing for cave generation.
"""

import math
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..terrain import CellState, Grid


@dataclass
class GenerationStats:
    """
    Metrics for one generated cave.

    Tracks:
    - Wall/open balance before and after the pipeline
    - Pruning and room counts
    - Passages carved per connector phase
    - Entry/exit separation
    - Phase timings
    """

    seed: int = 0
    width: int = 0
    height: int = 0

    initial_wall_ratio: float = 0.0
    wall_regions_removed: int = 0
    room_regions_removed: int = 0

    room_count: int = 0
    main_room_size: int = 0
    passages_phase_a: int = 0
    passages_phase_b: int = 0

    open_cells: int = 0
    open_ratio: float = 0.0
    entry_exit_distance: float = 0.0
    entry_attempts: int = 0

    phase_ms: Dict[str, float] = field(default_factory=dict)
    runtime_ms: float = 0.0

    @property
    def total_cells(self) -> int:
        return self.width * self.height

    @property
    def passages(self) -> int:
        return self.passages_phase_a + self.passages_phase_b

    def record_initial(self, grid: Grid):
        self.initial_wall_ratio = grid.count(CellState.WALL) / grid.size

    def record_final(self, grid: Grid, entry: Tuple[int, int], exit_: Tuple[int, int]):
        self.open_cells = int(grid.walkable_mask().sum())
        self.open_ratio = self.open_cells / grid.size
        self.entry_exit_distance = math.hypot(entry[0] - exit_[0], entry[1] - exit_[1])

    @contextmanager
    def phase(self, label: str):
        """Time a pipeline phase into ``phase_ms``"""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.phase_ms[label] = (time.perf_counter() - start) * 1000.0

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            'seed': self.seed,
            'width': self.width,
            'height': self.height,
            'initial_wall_ratio': self.initial_wall_ratio,
            'wall_regions_removed': self.wall_regions_removed,
            'room_regions_removed': self.room_regions_removed,
            'room_count': self.room_count,
            'main_room_size': self.main_room_size,
            'passages_phase_a': self.passages_phase_a,
            'passages_phase_b': self.passages_phase_b,
            'passages': self.passages,
            'open_cells': self.open_cells,
            'open_ratio': self.open_ratio,
            'entry_exit_distance': self.entry_exit_distance,
            'entry_attempts': self.entry_attempts,
            'phase_ms': dict(self.phase_ms),
            'runtime_ms': self.runtime_ms,
        }

    @classmethod
    def from_dict(cls, d: Optional[Dict]) -> 'GenerationStats':
        stats = cls()
        for key, value in (d or {}).items():
            if hasattr(stats, key) and not isinstance(getattr(type(stats), key, None), property):
                setattr(stats, key, value)
        return stats
