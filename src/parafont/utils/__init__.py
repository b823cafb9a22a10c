"""Utility functions for parafont.

This module provides utility functions including:

- Logging setup and configuration
- Session statistics tracking
"""

from parafont.utils.logging import (
    SessionLogger,
    SessionStats,
    configure_logging,
)

__all__ = [
    "SessionLogger",
    "SessionStats",
    "configure_logging",
]
