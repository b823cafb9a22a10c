"""Configuration settings for parafont."""

from pathlib import Path

from pydantic import BaseModel, Field


class InteractionConfig(BaseModel):
    """Thresholds and steps for pointer and keyboard interaction.

    Pixel values are measured in screen space, step values in font units.
    """

    drag_threshold_px: float = Field(
        default=6.0,
        ge=0.0,
        le=50.0,
        description="Screen displacement before a drag starts producing edits",
    )
    directional_threshold_px: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="Screen displacement before the direction lock axis is frozen",
    )
    double_click_ms: float = Field(
        default=400.0,
        ge=50.0,
        le=2000.0,
        description="Window in which a second pointer-down counts as a double click",
    )
    nudge_step: float = Field(
        default=1.0,
        gt=0.0,
        description="Arrow key step in font units",
    )
    nudge_large_step: float = Field(
        default=10.0,
        gt=0.0,
        description="Arrow key step with SHIFT held",
    )
    hit_radius_px: float = Field(
        default=6.0,
        gt=0.0,
        le=50.0,
        description="Hit-test radius around points, in screen pixels",
    )


class CameraConfig(BaseModel):
    """Camera zoom limits."""

    min_zoom: float = Field(default=0.1, gt=0.0)
    max_zoom: float = Field(default=10.0, gt=0.0)
    reset_zoom: float = Field(
        default=0.5,
        gt=0.0,
        description="Zoom used when the view is re-fitted to the glyph",
    )
    wheel_divisor: float = Field(
        default=1000.0,
        gt=0.0,
        description="Zoom factor per wheel event is 1 + delta / divisor",
    )


class KeyBindings(BaseModel):
    """Key codes recognised by the interaction state machine."""

    pan: int = 32
    escape: int = 27
    left: int = 37
    up: int = 38
    right: int = 39
    down: int = 40
    angle_only: int = 65
    width_only: int = 87
    distribution: int = 68
    preview: int = 90
    mac_platform: bool = Field(
        default=False,
        description="Use META instead of CTRL as the unparallel modifier",
    )

    @property
    def arrows(self) -> tuple[int, int, int, int]:
        """Arrow key codes in (left, up, right, down) order."""
        return (self.left, self.up, self.right, self.down)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class ParafontSettings(BaseModel):
    """Main application settings."""

    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    keys: KeyBindings = Field(default_factory=KeyBindings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> ParafontSettings:
    """Get default application settings."""
    return ParafontSettings()
