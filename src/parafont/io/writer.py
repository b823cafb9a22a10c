"""Geometry writer for constructed glyphs.

This module provides the GeometryWriter class for saving a construction
result as JSON: resolved font info, per-glyph geometry, dependency trees
and the drawn outline recorded through the fontTools pen protocol.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from fontTools.pens.recordingPen import RecordingPen

from parafont import __version__
from parafont.domain import ConstructedFont, ConstructedGlyph
from parafont.exceptions import GeometrySaveError

logger = structlog.get_logger(__name__)


def record_outline(glyph: ConstructedGlyph) -> list[list[Any]]:
    """Pen commands drawing a glyph, components included.

    Returns:
        List of [operator, [points...]] entries
    """
    pen = RecordingPen()
    glyph.draw(pen)
    return [[operator, [list(point) for point in operands]] for operator, operands in pen.value]


def glyph_document(glyph: ConstructedGlyph, include_dependencies: bool = False) -> dict[str, Any]:
    data = glyph.to_dict()
    data["outline"] = record_outline(glyph)
    if include_dependencies:
        data["dependencies"] = glyph.dependency_tree.to_dict()
    return data


class GeometryWriter:
    """Writes constructed fonts to JSON.

    Example:
        writer = GeometryWriter(Path("out.json"))
        writer.save(font, params={"thickness": 90})
    """

    def __init__(self, output_path: Path, include_dependencies: bool = False) -> None:
        """Initialize the writer.

        Args:
            output_path: Destination file
            include_dependencies: Also write each glyph's dependency tree
        """
        self._output_path = output_path
        self._include_dependencies = include_dependencies

    def document(self, font: ConstructedFont, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Build the JSON document for a constructed font."""
        return {
            "generator": f"parafont {__version__}",
            "created": datetime.now().isoformat(timespec="seconds"),
            "parameters": {k: v for k, v in (params or {}).items() if isinstance(v, int | float | str)},
            "fontinfo": dict(font.fontinfo),
            "glyphs": [glyph_document(g, self._include_dependencies) for g in font.glyphs],
        }

    def save(self, font: ConstructedFont, params: dict[str, Any] | None = None) -> None:
        """Write the document.

        Raises:
            GeometrySaveError: If the file cannot be written
        """
        path = str(self._output_path)
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            with self._output_path.open("w", encoding="utf-8") as handle:
                json.dump(self.document(font, params), handle, indent=2)
        except (OSError, TypeError, ValueError) as e:
            raise GeometrySaveError(path, str(e)) from e

        logger.info("Geometry saved", path=path, glyphs=len(font.glyphs))
