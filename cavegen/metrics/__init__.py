"""
Metrics Module
==============

Generation statistics and phase timing.
"""

from .generation_metrics import GenerationStats

__all__ = [
    'GenerationStats',
]
