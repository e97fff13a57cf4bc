"""
Configuration Settings Module
==============================

Dataclass-based configuration with validation and defaults.
Follows Single Responsibility Principle - only handles configuration.
"""

import logging
import sys
import time
from dataclasses import dataclass, asdict, fields
from typing import Dict, Optional, Any

from ..errors import InvalidConfigError, InvalidDimensionsError


LOG_FORMAT = '[%(asctime)s] - [%(name)s] - [%(levelname)s] - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

SEED_MASK = (1 << 64) - 1


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name of the logger (typically __name__)

    Returns:
        logging.Logger instance
    """
    return logging.getLogger(name or 'cavegen')


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure root logging for command-line use.

    Library code never calls this; it only asks for loggers.

    Args:
        level: Root log level
        log_file: Optional path of a log file written alongside stdout

    Returns:
        The package logger
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True
    )

    logger = get_logger()
    logger.debug(f"Logging initialized at level {logging.getLevelName(level)}")
    return logger


@dataclass
class CaveConfig:
    """
    Cave generation configuration.

    Usage:
        config = CaveConfig(width=80, height=60, seed=1234)
        config = CaveConfig(use_random_seed=True)
    """
    width: int = 64
    height: int = 48

    # Seed policy
    seed: Optional[int] = None
    use_random_seed: bool = False

    # Noise + cellular automaton
    random_fill_percent: int = 45  # chance (%) an interior cell starts as wall
    smoothing_iterations: int = 5

    # Region pruning
    wall_region_threshold: int = 50
    room_region_threshold: int = 50

    # Passage carving
    passage_brush_radius: int = 2

    # Entry/exit placement
    exit_radius_factor: float = 0.55  # times max(width, height)
    max_entry_attempts: int = 10
    placement_margin: float = 0.0  # fraction of each axis excluded at the edges

    def validate(self) -> 'CaveConfig':
        """Check every option, raising on the first bad one"""
        if self.width <= 3 or self.height <= 3:
            raise InvalidDimensionsError(self.width, self.height)
        if not 0 <= self.random_fill_percent <= 100:
            raise InvalidConfigError(
                f"random_fill_percent must be within 0-100, got {self.random_fill_percent}")
        if self.smoothing_iterations < 0:
            raise InvalidConfigError(
                f"smoothing_iterations must be >= 0, got {self.smoothing_iterations}")
        if self.wall_region_threshold < 0 or self.room_region_threshold < 0:
            raise InvalidConfigError("region thresholds must be >= 0")
        if self.passage_brush_radius < 1:
            raise InvalidConfigError(
                f"passage_brush_radius must be >= 1, got {self.passage_brush_radius}")
        if self.exit_radius_factor < 0:
            raise InvalidConfigError(
                f"exit_radius_factor must be >= 0, got {self.exit_radius_factor}")
        if self.max_entry_attempts < 1:
            raise InvalidConfigError(
                f"max_entry_attempts must be >= 1, got {self.max_entry_attempts}")
        if not 0.0 <= self.placement_margin < 0.5:
            raise InvalidConfigError(
                f"placement_margin must be within [0, 0.5), got {self.placement_margin}")
        return self

    def resolve_seed(self) -> int:
        """
        Seed for the next run.

        The fixed seed unless random seeding is requested (or no seed was
        given), in which case a clock-derived 64-bit value is returned.
        """
        if self.use_random_seed or self.seed is None:
            return time.time_ns() & SEED_MASK
        return int(self.seed) & SEED_MASK

    @property
    def exit_radius(self) -> float:
        """Minimum entry-to-exit distance in cells"""
        return self.exit_radius_factor * max(self.width, self.height)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'CaveConfig':
        """Create CaveConfig from dictionary, ignoring unknown keys"""
        config = cls()
        known = {f.name for f in fields(cls)}
        for key, value in d.items():
            if key in known:
                setattr(config, key, value)
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Export config to dictionary"""
        return asdict(self)
