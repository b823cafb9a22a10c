"""Configuration management for parafont.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- InteractionConfig: Drag thresholds, double-click window, nudge steps
- CameraConfig: Zoom limits
- KeyBindings: Key codes driving the interaction state machine
- LoggingConfig: Logging settings
- ParafontSettings: Main application settings
"""

from parafont.config.settings import (
    CameraConfig,
    InteractionConfig,
    KeyBindings,
    LoggingConfig,
    ParafontSettings,
    get_default_settings,
)

__all__ = [
    "CameraConfig",
    "InteractionConfig",
    "KeyBindings",
    "LoggingConfig",
    "ParafontSettings",
    "get_default_settings",
]
