"""
Configuration Module
====================

Centralized configuration and logging setup for cave generation.
"""

from .settings import (
    CaveConfig,
    get_logger,
    setup_logging,
    LOG_FORMAT,
)

__all__ = [
    'CaveConfig',
    'get_logger',
    'setup_logging',
    'LOG_FORMAT',
]
