#!/usr/bin/env python3
"""
Cave Generator - Main Entry Point
=================================

Usage:
    # Single cave
    python -m cavegen generate --width 80 --height 60 --seed 42 --output out/

    # Many seeds with aggregated statistics
    python -m cavegen suite --num_maps 30 --seed_base 42 --output results/

    # Aggregate existing results
    python -m cavegen aggregate --input results/ --output aggregated.json

From Python:
    from cavegen import CaveConfig, CaveGenerator

    cave = CaveGenerator(CaveConfig(width=80, height=60, seed=7)).generate()
    print(cave.entry, cave.exit)
"""

import argparse
import json
import logging
import sys
from pathlib import Path


def _build_config(args):
    from cavegen import CaveConfig

    return CaveConfig(
        width=args.width,
        height=args.height,
        seed=getattr(args, 'seed', None),
        use_random_seed=getattr(args, 'random_seed', False),
        random_fill_percent=args.fill,
        smoothing_iterations=args.smoothing,
        wall_region_threshold=args.wall_threshold,
        room_region_threshold=args.room_threshold,
        passage_brush_radius=args.brush_radius,
        exit_radius_factor=args.exit_radius_factor,
        max_entry_attempts=args.max_entry_attempts,
        placement_margin=args.margin
    )


def run_generate(args):
    """Generate a single cave"""
    from cavegen import CaveGenerator, CaveGenerationError

    try:
        config = _build_config(args)
        cave = CaveGenerator(config).generate()
    except CaveGenerationError as e:
        print(f"✗ Generation failed ({e.kind}): {e}")
        return 1

    stats = cave.stats
    print("\n" + "=" * 60)
    print(f"CAVE {cave.width}x{cave.height} (seed={cave.seed})")
    print("=" * 60)
    print(f"Rooms:        {stats.room_count} (main room {stats.main_room_size} cells)")
    print(f"Pruned:       {stats.wall_regions_removed} wall / {stats.room_regions_removed} room regions")
    print(f"Passages:     {stats.passages} ({stats.passages_phase_a} pairwise, {stats.passages_phase_b} to main)")
    print(f"Open cells:   {stats.open_cells} ({stats.open_ratio * 100:.1f}%)")
    print(f"Entry/Exit:   {cave.entry} -> {cave.exit} (d={stats.entry_exit_distance:.1f})")
    print(f"Runtime:      {stats.runtime_ms:.1f} ms")
    print("=" * 60)

    if args.print_map:
        print("\n".join(cave.grid.to_rows()))

    if args.output:
        output_dir = Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)
        with open(output_dir / 'cave.json', 'w') as f:
            json.dump(cave.to_dict(), f, indent=2)
        if not args.no_npz:
            cave.save_to_npz(str(output_dir / 'cave.npz'))
        print(f"\nSaved to: {output_dir}")

    return 0


def run_suite(args):
    """Generate caves for a range of seeds"""
    from cavegen import CaveGenerationError, SuiteRunner

    try:
        config = _build_config(args).validate()
    except CaveGenerationError as e:
        print(f"✗ Invalid configuration ({e.kind}): {e}")
        return 1

    runner = SuiteRunner(config)
    results = runner.run_suite(
        num_maps=args.num_maps,
        seed_base=args.seed_base,
        output_dir=args.output,
        save_assets=not args.no_npz,
        parallel=args.parallel,
        max_workers=args.workers,
        verbose=True
    )

    print(f"\nResults saved to: {args.output}")
    return 0 if results.num_success == results.num_maps else 1


def run_aggregate(args):
    """Aggregate results from a previous suite run"""
    from cavegen.pipeline import aggregate_directory, print_summary

    input_path = Path(args.input)

    if not input_path.exists():
        print(f"Error: Input path does not exist: {input_path}")
        return 1

    aggregated = aggregate_directory(str(input_path))

    if aggregated.num_maps == 0:
        print(f"No log files found in {input_path}")
        return 1

    output_path = Path(args.output)
    with open(output_path, 'w') as f:
        json.dump(aggregated.to_dict(), f, indent=2)

    print(f"\nAggregated results saved to: {output_path}")
    print_summary(aggregated)
    return 0


def _add_config_arguments(parser):
    parser.add_argument('--width', type=int, default=64, help='Grid width in cells')
    parser.add_argument('--height', type=int, default=48, help='Grid height in cells')
    parser.add_argument('--fill', type=int, default=45, help='Initial wall chance (%%)')
    parser.add_argument('--smoothing', type=int, default=5, help='Smoothing iterations')
    parser.add_argument('--wall_threshold', type=int, default=50, help='Minimum wall region size')
    parser.add_argument('--room_threshold', type=int, default=50, help='Minimum room size')
    parser.add_argument('--brush_radius', type=int, default=2, help='Passage brush radius')
    parser.add_argument('--exit_radius_factor', type=float, default=0.55,
                        help='Minimum entry/exit distance as a fraction of max(width, height)')
    parser.add_argument('--max_entry_attempts', type=int, default=10, help='Entry redraw limit')
    parser.add_argument('--margin', type=float, default=0.0,
                        help='Fraction of each axis excluded from entry/exit placement')
    parser.add_argument('--no_npz', action='store_true', help='Do not save NPZ grids')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Cellular-automaton cave generator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--log_level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Log level')
    parser.add_argument('--log_file', type=str, help='Also write logs to this file')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Generate command
    gen_parser = subparsers.add_parser('generate', help='Generate a single cave')
    _add_config_arguments(gen_parser)
    gen_parser.add_argument('--seed', type=int, help='Random seed')
    gen_parser.add_argument('--random_seed', action='store_true', help='Use a clock-derived seed')
    gen_parser.add_argument('--output', type=str, help='Output directory')
    gen_parser.add_argument('--print_map', action='store_true', help='Print the map as text')

    # Suite command
    suite_parser = subparsers.add_parser('suite', help='Generate caves over a range of seeds')
    _add_config_arguments(suite_parser)
    suite_parser.add_argument('--num_maps', type=int, default=30, help='Number of maps')
    suite_parser.add_argument('--seed_base', type=int, default=42, help='Base seed')
    suite_parser.add_argument('--output', type=str, default='results', help='Output directory')
    suite_parser.add_argument('--parallel', action='store_true', help='Use parallel execution')
    suite_parser.add_argument('--workers', type=int, default=4, help='Number of workers')

    # Aggregate command
    agg_parser = subparsers.add_parser('aggregate', help='Aggregate results')
    agg_parser.add_argument('--input', type=str, required=True, help='Input directory')
    agg_parser.add_argument('--output', type=str, default='aggregated.json', help='Output file')

    args = parser.parse_args(argv)

    from cavegen.config import setup_logging
    level = logging.DEBUG if args.verbose else getattr(logging, args.log_level)
    setup_logging(level, args.log_file)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == 'generate':
        return run_generate(args)
    elif args.command == 'suite':
        return run_suite(args)
    elif args.command == 'aggregate':
        return run_aggregate(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
