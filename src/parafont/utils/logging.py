"""Logging utilities for parafont."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class SessionStats:
    """Counters accumulated over an interaction session."""

    frame_count: int = 0
    transition_count: int = 0
    edits_dispatched: int = 0
    edits_skipped: int = 0
    actions_dispatched: int = 0
    skipped: list[tuple[str, str]] = field(default_factory=list)

    @property
    def skip_ratio(self) -> float:
        """Fraction of edit attempts that were skipped."""
        total = self.edits_dispatched + self.edits_skipped
        if total == 0:
            return 0.0
        return self.edits_skipped / total


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(
        logging.ERROR if quiet else getattr(logging, console_level.upper())
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("parafont")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class SessionLogger:
    """Logger for tracking an interaction session and its statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger("parafont")
        self._stats = SessionStats()

    def log_frame(self) -> None:
        """Count one processed frame."""
        self._stats.frame_count += 1

    def log_transition(self, glyph_name: str | None, old_state: str, new_state: str) -> None:
        """Log a change of the primary interaction state."""
        self._logger.debug(
            "State transition",
            glyph=glyph_name,
            old=old_state,
            new=new_state,
        )
        self._stats.transition_count += 1

    def log_edit(self, glyph_name: str, item_id: str, change_count: int) -> None:
        """Log an edit that produced override changes."""
        self._logger.debug(
            "Edit computed",
            glyph=glyph_name,
            item=item_id,
            changes=change_count,
        )
        self._stats.edits_dispatched += 1

    def log_edit_skipped(self, glyph_name: str | None, item_id: str, reason: str) -> None:
        """Log an edit that could not be computed this frame."""
        self._logger.debug(
            "Edit skipped",
            glyph=glyph_name,
            item=item_id,
            reason=reason,
        )
        self._stats.edits_skipped += 1
        self._stats.skipped.append((item_id, reason))

    def log_action(self, name: str) -> None:
        """Log an action message sent to the dispatch bus."""
        self._logger.debug("Action dispatched", action=name)
        self._stats.actions_dispatched += 1

    def log_lifecycle(self, event: str, **context: object) -> None:
        """Log a session lifecycle event (mount, unmount, glyph change)."""
        self._logger.info(event, **context)

    @property
    def stats(self) -> SessionStats:
        """Get current session statistics."""
        return self._stats
