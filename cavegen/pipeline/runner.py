"""
Pipeline Runner Module
======================

Batch runner generating caves over a range of seeds and aggregating
their statistics.
"""

import json
import time
import traceback
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from .generator import CaveGenerator
from ..config import CaveConfig, get_logger
from ..errors import CaveGenerationError


SUMMARY_FIELDS = ('room_count', 'passages', 'open_ratio', 'entry_exit_distance', 'runtime_ms')


@dataclass
class MapResult:
    """Result from a single seed"""
    seed: int
    success: bool = False
    stats: Dict = field(default_factory=dict)
    runtime: float = 0.0
    error: Optional[str] = None
    error_kind: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class AggregatedResults:
    """Aggregated results from multiple seeds"""
    num_maps: int = 0
    num_success: int = 0
    summary: Dict[str, Dict] = field(default_factory=dict)
    failure_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        return self.num_success / self.num_maps if self.num_maps > 0 else 0.0

    def to_dict(self) -> Dict:
        d = asdict(self)
        d['success_rate'] = self.success_rate
        return d


def aggregate_results(results: List[Dict]) -> AggregatedResults:
    """
    Aggregate per-map result dicts (``MapResult.to_dict()`` shape).

    Failures are counted by error kind; statistics cover successes only.
    """
    agg = AggregatedResults(num_maps=len(results))

    values: Dict[str, List[float]] = {name: [] for name in SUMMARY_FIELDS}
    for r in results:
        if r.get('success'):
            agg.num_success += 1
            stats = r.get('stats') or {}
            for name in SUMMARY_FIELDS:
                if stats.get(name) is not None:
                    values[name].append(float(stats[name]))
        else:
            kind = r.get('error_kind') or 'error'
            agg.failure_counts[kind] = agg.failure_counts.get(kind, 0) + 1

    for name, vals in values.items():
        agg.summary[name] = {
            'mean': float(np.mean(vals)) if vals else None,
            'std': float(np.std(vals)) if vals else None,
            'min': float(np.min(vals)) if vals else None,
            'max': float(np.max(vals)) if vals else None,
        }
    return agg


def aggregate_directory(input_dir: str) -> AggregatedResults:
    """Rebuild the aggregate from ``**/logs.json`` files on disk"""
    logger = get_logger(__name__)
    results = []
    for log_file in sorted(Path(input_dir).glob('**/logs.json')):
        try:
            with open(log_file) as f:
                results.append(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {log_file}: {e}")
    return aggregate_results(results)


class SuiteRunner:
    """
    Runs the generator over consecutive seeds.

    Features:
    - Optional parallel execution (one process per map)
    - Per-map JSON logs and NPZ grids
    - Aggregate summary with failure counts per error kind
    """

    def __init__(self, config: Optional[CaveConfig] = None):
        """
        Initialize suite runner.

        Args:
            config: Configuration object (uses default if None)
        """
        self.config = config or CaveConfig()
        self.logger = get_logger(__name__)

    def run_single(self,
                   seed: int,
                   save_assets: bool = True,
                   output_dir: Optional[str] = None,
                   verbose: bool = False) -> MapResult:
        """
        Generate one cave for ``seed``.

        Generation errors are recorded on the result instead of raised.
        """
        result = MapResult(seed=seed)
        t0 = time.perf_counter()

        if output_dir:
            map_dir = Path(output_dir) / f'map_{seed:05d}'
            map_dir.mkdir(parents=True, exist_ok=True)
        else:
            map_dir = None

        try:
            cave = CaveGenerator(self.config).generate(seed=seed)
            result.stats = cave.stats.to_dict()
            result.success = True

            if save_assets and map_dir:
                cave.save_to_npz(str(map_dir / 'cave.npz'))

            if verbose:
                print(f"[Seed {seed}] {cave.stats.room_count} rooms, "
                      f"{cave.stats.passages} passages, entry={cave.entry}, exit={cave.exit}")

        except CaveGenerationError as e:
            result.error = str(e)
            result.error_kind = e.kind
            self.logger.warning(f"[Seed {seed}] {e.kind}: {e}")
            if verbose:
                print(f"[Seed {seed}] FAILED - {e.kind}: {e}")

        result.runtime = time.perf_counter() - t0

        if map_dir:
            with open(map_dir / 'logs.json', 'w') as f:
                json.dump(result.to_dict(), f, indent=2, default=str)

        return result

    def run_suite(self,
                  num_maps: int = 30,
                  seed_base: int = 42,
                  output_dir: Optional[str] = 'results',
                  save_assets: bool = True,
                  parallel: bool = False,
                  max_workers: int = 4,
                  verbose: bool = True) -> AggregatedResults:
        """
        Generate ``num_maps`` caves for seeds ``seed_base ..``.

        Args:
            num_maps: Number of maps to generate
            seed_base: First seed
            output_dir: Output directory (None writes nothing)
            save_assets: Whether to save NPZ grids
            parallel: Use parallel execution
            max_workers: Number of parallel workers
            verbose: Print progress

        Returns:
            AggregatedResults with all statistics
        """
        if output_dir:
            output_path = Path(output_dir)
            output_path.mkdir(parents=True, exist_ok=True)
        else:
            output_path = None
        out = str(output_path) if output_path else None

        all_results: List[MapResult] = []

        if verbose:
            print(f"Generating {num_maps} maps "
                  f"({self.config.width}x{self.config.height}, seeds {seed_base}..{seed_base + num_maps - 1})")

        if parallel and max_workers > 1:
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                futures = {}
                for i in range(num_maps):
                    seed = seed_base + i
                    future = executor.submit(
                        self.run_single,
                        seed=seed,
                        save_assets=save_assets,
                        output_dir=out,
                        verbose=False
                    )
                    futures[future] = seed

                for future in as_completed(futures):
                    seed = futures[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        # Worker crashed outside the generator's own error kinds
                        self.logger.error(f"Seed {seed} worker failed: {e}")
                        result = MapResult(seed=seed, error=str(e), error_kind=type(e).__name__)
                    all_results.append(result)
                    if verbose:
                        status = "✓" if result.success else "✗"
                        print(f"[{len(all_results)}/{num_maps}] Seed {seed}: {status}")
        else:
            for i in range(num_maps):
                seed = seed_base + i
                try:
                    result = self.run_single(
                        seed=seed,
                        save_assets=save_assets,
                        output_dir=out,
                        verbose=verbose
                    )
                except Exception as e:
                    self.logger.error(f"Seed {seed} failed: {e}")
                    if verbose:
                        traceback.print_exc()
                    result = MapResult(seed=seed, error=str(e), error_kind=type(e).__name__)
                all_results.append(result)

        all_results.sort(key=lambda r: r.seed)
        aggregated = aggregate_results([r.to_dict() for r in all_results])

        if output_path:
            with open(output_path / 'aggregated_results.json', 'w') as f:
                json.dump(aggregated.to_dict(), f, indent=2, default=str)

        if verbose:
            print_summary(aggregated)

        return aggregated


def print_summary(agg: AggregatedResults):
    """Print summary table"""
    print("\n" + "=" * 70)
    print("SUITE SUMMARY")
    print("=" * 70)
    print(f"Total maps: {agg.num_maps}   success: {agg.success_rate * 100:.1f}%")
    print()

    print(f"{'Metric':<24} {'Mean':>12} {'Std':>12} {'Min':>9} {'Max':>9}")
    print("-" * 70)
    for name, s in agg.summary.items():
        if s.get('mean') is None:
            print(f"{name:<24} {'N/A':>12}")
            continue
        print(f"{name:<24} {s['mean']:>12.2f} {s['std']:>12.2f} {s['min']:>9.2f} {s['max']:>9.2f}")

    if agg.failure_counts:
        print()
        for kind, count in sorted(agg.failure_counts.items()):
            print(f"  {kind}: {count}")

    print("=" * 70)
