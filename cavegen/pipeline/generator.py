"""
Cave Generator Module
=====================

Runs the full generation pipeline:
noise fill -> smoothing -> pruning -> room graph -> connection -> entry/exit.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from ..config import CaveConfig, get_logger
from ..config.settings import SEED_MASK
from ..connectivity import RoomConnector, Passage, PHASE_PAIRWISE, PHASE_MAIN
from ..metrics import GenerationStats
from ..placement import PointPlacer
from ..regions import RoomGraph, build_rooms, prune_regions
from ..terrain import Coord, Grid, random_fill, smooth_grid


@dataclass
class CaveMap:
    """
    Finished cave handed to external consumers.

    Contains:
    - The final grid (with ENTRY and EXIT marked)
    - Entry and exit coordinates
    - The resolved seed, so random-seed runs can be replayed
    - The room graph and carved passages (absent when loaded from disk)
    - Generation statistics
    """
    grid: Grid
    entry: Coord
    exit: Coord
    seed: int
    config: CaveConfig
    rooms: Optional[RoomGraph] = None
    passages: List[Passage] = field(default_factory=list)
    stats: GenerationStats = field(default_factory=GenerationStats)

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def is_walkable(self, x: int, y: int) -> bool:
        return self.grid.is_walkable(x, y)

    def to_dict(self) -> Dict:
        """JSON-safe export; rows are glyph strings, one per y"""
        return {
            'seed': self.seed,
            'width': self.width,
            'height': self.height,
            'entry': list(self.entry),
            'exit': list(self.exit),
            'rows': self.grid.to_rows(),
            'config': self.config.to_dict(),
            'rooms': self.rooms.to_dict() if self.rooms is not None else None,
            'passages': [p.to_dict() for p in self.passages],
            'stats': self.stats.to_dict(),
        }

    def save_to_npz(self, filepath: str):
        """Save cave to NPZ file"""
        np.savez_compressed(
            filepath,
            cells=self.grid.cells,
            entry=np.array(self.entry),
            exit=np.array(self.exit),
            seed=np.array(self.seed, dtype=np.uint64),
            config=json.dumps(self.config.to_dict()),
            stats=json.dumps(self.stats.to_dict())
        )

    @classmethod
    def load_from_npz(cls, filepath: str) -> 'CaveMap':
        """Load cave from NPZ file (room graph and passages are not stored)"""
        with np.load(filepath) as data:
            return cls(
                grid=Grid(data['cells']),
                entry=tuple(int(v) for v in data['entry']),
                exit=tuple(int(v) for v in data['exit']),
                seed=int(data['seed']),
                config=CaveConfig.from_dict(json.loads(str(data['config']))),
                stats=GenerationStats.from_dict(json.loads(str(data['stats'])))
            )


class CaveGenerator:
    """
    Caller-owned cave generator.

    Each ``generate()`` call builds a fresh grid and room graph; nothing
    carries over between calls except the configured seed policy. A failed
    run raises and returns no partial result.

    Usage:
        generator = CaveGenerator(CaveConfig(width=80, height=60, seed=7))
        cave = generator.generate()
    """

    def __init__(self, config: Optional[CaveConfig] = None):
        self.config = config or CaveConfig()
        self.logger = get_logger(__name__)

    def generate(self, seed: Optional[int] = None) -> CaveMap:
        """
        Generate one cave.

        Args:
            seed: Overrides the configured seed policy for this run

        Raises:
            InvalidDimensionsError, InvalidConfigError: bad configuration
            EmptyMapError: nothing survived pruning
            NoWarpCandidateError: no valid exit could be placed
        """
        config = self.config.validate()
        seed = config.resolve_seed() if seed is None else int(seed) & SEED_MASK
        rng = np.random.default_rng(seed)

        stats = GenerationStats(seed=seed, width=config.width, height=config.height)
        t0 = time.perf_counter()

        with stats.phase('fill'):
            grid = random_fill(config.width, config.height, config.random_fill_percent, rng)
        stats.record_initial(grid)

        with stats.phase('smooth'):
            grid = smooth_grid(grid, config.smoothing_iterations)

        with stats.phase('prune'):
            pruned = prune_regions(grid, config.wall_region_threshold,
                                   config.room_region_threshold)
        stats.wall_regions_removed = pruned.wall_regions_removed
        stats.room_regions_removed = pruned.room_regions_removed

        with stats.phase('rooms'):
            graph = build_rooms(pruned.rooms, pruned.grid)
        stats.room_count = len(graph)
        stats.main_room_size = graph.main.size

        with stats.phase('connect'):
            connector = RoomConnector(pruned.grid, graph, config.passage_brush_radius)
            grid = connector.connect()
        stats.passages_phase_a = sum(1 for p in connector.passages if p.phase == PHASE_PAIRWISE)
        stats.passages_phase_b = sum(1 for p in connector.passages if p.phase == PHASE_MAIN)

        with stats.phase('place'):
            placer = PointPlacer(
                rng,
                exit_radius_factor=config.exit_radius_factor,
                max_entry_attempts=config.max_entry_attempts,
                margin=config.placement_margin
            )
            placement = placer.place(grid)
        stats.entry_attempts = placement.attempts
        stats.record_final(placement.grid, placement.entry, placement.exit)
        stats.runtime_ms = (time.perf_counter() - t0) * 1000.0

        self.logger.info(
            f"Cave {config.width}x{config.height} seed={seed}: {stats.room_count} rooms, "
            f"{stats.passages} passages, entry={placement.entry}, exit={placement.exit} "
            f"({stats.runtime_ms:.1f} ms)")

        return CaveMap(
            grid=placement.grid,
            entry=placement.entry,
            exit=placement.exit,
            seed=seed,
            config=CaveConfig.from_dict(config.to_dict()),
            rooms=graph,
            passages=list(connector.passages),
            stats=stats
        )

    def regenerate(self) -> CaveMap:
        """Fresh run under the same configuration"""
        return self.generate()


def generate_cave(config: Optional[CaveConfig] = None, **overrides) -> CaveMap:
    """One-shot helper: ``generate_cave(width=40, height=30, seed=1)``"""
    config = config or CaveConfig()
    if overrides:
        merged = config.to_dict()
        merged.update(overrides)
        config = CaveConfig.from_dict(merged)
    return CaveGenerator(config).generate()
