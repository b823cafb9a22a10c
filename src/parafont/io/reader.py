"""Font source reader.

This module provides the FontSourceReader class for loading parametric
font source documents (JSON) into domain models.
"""

import json
from collections.abc import Iterator
from pathlib import Path

import structlog

from parafont.domain import FontSource, GlyphSource
from parafont.exceptions import FormulaError, SourceFormatError, SourceLoadError

logger = structlog.get_logger(__name__)


class FontSourceReader:
    """Loads a font source document and exposes its glyph sources.

    Example:
        reader = FontSourceReader(Path("font.json"))
        reader.load()
        for glyph in reader.iter_glyphs():
            print(glyph.name)
    """

    def __init__(self, source_path: Path) -> None:
        """Initialize the reader.

        Args:
            source_path: Path to the JSON font source
        """
        self._source_path = source_path
        self._source: FontSource | None = None

    def load(self) -> FontSource:
        """Read and parse the font source.

        Returns:
            The parsed font source

        Raises:
            SourceLoadError: If the file is missing or not valid JSON
            SourceFormatError: If the document does not describe a font source
        """
        path = str(self._source_path)
        if not self._source_path.exists():
            raise SourceLoadError(path, "file not found")

        try:
            with self._source_path.open(encoding="utf-8") as handle:
                data = json.load(handle)
        except OSError as e:
            raise SourceLoadError(path, str(e)) from e
        except json.JSONDecodeError as e:
            raise SourceLoadError(path, f"invalid JSON: {e.msg} (line {e.lineno})") from e

        if not isinstance(data, dict):
            raise SourceFormatError(path, "top-level value must be an object")

        try:
            self._source = FontSource.from_dict(data)
        except KeyError as e:
            raise SourceFormatError(path, f"missing field {e}") from e
        except (TypeError, ValueError, FormulaError) as e:
            raise SourceFormatError(path, str(e)) from e

        logger.info("Font source loaded", path=path, glyphs=len(self._source.glyphs))
        return self._source

    @property
    def source(self) -> FontSource:
        """Loaded font source.

        Raises:
            RuntimeError: If the source has not been loaded yet
        """
        if self._source is None:
            raise RuntimeError("Font source not loaded. Call load() first.")
        return self._source

    @property
    def glyph_count(self) -> int:
        return len(self.source.glyphs)

    def iter_glyphs(self) -> Iterator[GlyphSource]:
        """Iterate over glyph sources in document order."""
        yield from self.source.glyphs.values()

    def get_glyph(self, name: str) -> GlyphSource | None:
        """Get a glyph source by name, None if absent."""
        return self.source.glyphs.get(name)


def load_font_source(path: Path) -> FontSource:
    """Load a font source document.

    Raises:
        SourceLoadError: If the file cannot be read
        SourceFormatError: If the document is malformed
    """
    return FontSourceReader(path).load()
