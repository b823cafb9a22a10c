"""Font source I/O layer for parafont.

This module handles reading parametric font sources and writing
constructed geometry.

Key responsibilities:
- Load JSON font sources into domain models
- Report unreadable or malformed sources with source errors
- Write constructed glyph geometry and recorded outlines

Key classes:
- FontSourceReader: Load a font source and look up glyph sources
- GeometryWriter: Save constructed geometry
"""

from parafont.io.reader import FontSourceReader, load_font_source
from parafont.io.writer import GeometryWriter, record_outline

__all__ = [
    "FontSourceReader",
    "GeometryWriter",
    "load_font_source",
    "record_outline",
]
