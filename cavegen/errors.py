"""
Errors Module
=============

Exception kinds raised by the generation pipeline.
"""

from typing import Optional, Tuple


class CaveGenerationError(Exception):
    """Base class for every generation failure"""

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidConfigError(CaveGenerationError, ValueError):
    pass


class InvalidDimensionsError(InvalidConfigError):
    """Width or height too small to hold a walled border around a cave"""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        super().__init__(
            f"Grid of {width}x{height} has no usable interior; both axes must exceed 3")


class EmptyMapError(CaveGenerationError):
    """No open region survived pruning, so no main room exists"""

    def __init__(self, message: str = "No open region survived pruning"):
        super().__init__(message)


class NoWarpCandidateError(CaveGenerationError):
    """
    No reachable cell is far enough from the entry to host the exit.

    Attributes:
        entry: Last entry cell tried (None when nothing could be tried)
        radius: Required minimum distance in cells
    """

    def __init__(self, entry: Optional[Tuple[int, int]], radius: float, attempts: int = 1):
        self.entry = entry
        self.radius = radius
        self.attempts = attempts
        super().__init__(
            f"No exit candidate at distance >= {radius:.2f} "
            f"(last entry {entry}, {attempts} attempt(s))")
