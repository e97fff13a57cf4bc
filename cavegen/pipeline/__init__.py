"""
Pipeline Module
===============

Single-map generation and multi-seed suite runs.
"""

from .generator import CaveGenerator, CaveMap, generate_cave
from .runner import (
    SuiteRunner,
    MapResult,
    AggregatedResults,
    aggregate_results,
    aggregate_directory,
    print_summary,
)

__all__ = [
    'CaveGenerator',
    'CaveMap',
    'generate_cave',
    'SuiteRunner',
    'MapResult',
    'AggregatedResults',
    'aggregate_results',
    'aggregate_directory',
    'print_summary',
]
