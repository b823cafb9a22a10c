"""Shared fixtures: a small parametric font source."""

import copy
import json
from pathlib import Path

import pytest

from parafont.core import FontConstructor
from parafont.domain import ConstructedGlyph, FontSource

SAMPLE_SOURCE = {
    "fontinfo": {
        "family_name": "Sample",
        "version": "1.0",
        "ascender": "xHeight + 200",
        "descender": -200,
    },
    "parameters": {
        "thickness": 80,
        "xHeight": 500,
        "spacing": "thickness / 2",
    },
    "glyphs": {
        # Vertical stem 60..140 x 0..500, dot anchor above the top node
        "i": {
            "unicode": 105,
            "spacing_left": "spacing",
            "spacing_right": "spacing",
            "anchors": [{"x": "contours[0].nodes[1].x", "y": "xHeight + 100"}],
            "contours": [
                {
                    "skeleton": True,
                    "closed": False,
                    "nodes": [
                        {"x": 100, "y": 0, "expand": {"width": "thickness", "angle": 0}},
                        {
                            "x": "contours[0].nodes[0].x",
                            "y": "xHeight",
                            "expand": {"width": "thickness", "angle": 0},
                        },
                    ],
                }
            ],
        },
        "j": {
            "unicode": 106,
            "spacing_left": "spacing",
            "spacing_right": "spacing",
            "contours": [
                {
                    "skeleton": True,
                    "closed": False,
                    "nodes": [
                        {"x": 100, "y": -200, "expand": {"width": "thickness", "angle": 0}},
                        {"x": 100, "y": "xHeight", "expand": {"width": "thickness", "angle": 0}},
                    ],
                }
            ],
            "components": [
                {
                    "id": "dot",
                    "base": ["dot", "dot.alt"],
                    "transforms": [
                        {"name": "translateX", "param": 80},
                        {"name": "translateY", "param": "xHeight + 100"},
                    ],
                }
            ],
        },
        "dot": {
            "component_class": "dots",
            "contours": [
                {
                    "nodes": [
                        {"x": 0, "y": 0},
                        {"x": 40, "y": 0},
                        {"x": 40, "y": 40},
                        {"x": 0, "y": 40},
                    ]
                }
            ],
        },
        "dot.alt": {
            "component_class": "dots",
            "contours": [
                {
                    "nodes": [
                        {"x": 0, "y": 0},
                        {"x": 60, "y": 0},
                        {"x": 60, "y": 60},
                        {"x": 0, "y": 60},
                    ]
                }
            ],
        },
        # Single skeleton node with vertical handles, for handle edits
        "s": {
            "unicode": 115,
            "contours": [
                {
                    "skeleton": True,
                    "closed": False,
                    "nodes": [
                        {
                            "x": 150,
                            "y": 100,
                            "handle_in": {"x": 0, "y": 100},
                            "handle_out": {"x": 0, "y": -100},
                            "expand": {"width": 100, "angle": "pi", "distr": 0.5},
                        }
                    ],
                }
            ],
        },
    },
}


@pytest.fixture
def source_data() -> dict:
    """Raw sample font source document."""
    return copy.deepcopy(SAMPLE_SOURCE)


@pytest.fixture
def font_source(source_data: dict) -> FontSource:
    return FontSource.from_dict(source_data)


@pytest.fixture
def constructor(font_source: FontSource) -> FontConstructor:
    return FontConstructor(font_source)


@pytest.fixture
def glyph_i(constructor: FontConstructor) -> ConstructedGlyph:
    return constructor.construct_glyph("i", {})


@pytest.fixture
def glyph_s(constructor: FontConstructor) -> ConstructedGlyph:
    return constructor.construct_glyph("s", {})


@pytest.fixture
def source_file(tmp_path: Path, source_data: dict) -> Path:
    """Sample font source written to disk."""
    path = tmp_path / "font.json"
    path.write_text(json.dumps(source_data), encoding="utf-8")
    return path

