"""Core algorithms for parafont.

This module contains the core algorithms for:

- Geometry operations (vectors, transform chains, point-in-polygon, bounds)
- Parametric construction (formulas + overrides -> glyph geometry)
- Constraint-preserving edits (handles, width/angle, skeleton position)
- Override store (action reducer with undo/redo)

Key functions:
- apply_edit: Compute the action for dragging an item
- chain_transform: Compose a transform chain
- glyph_bounds: Bounding box of a constructed glyph

Key classes:
- FontConstructor: Constructs glyphs of a font source
- GlyphBuilder: Constructs one glyph
- EditModifiers: Modifier state of an edit
- OverlayStore: In-process override store
"""

from parafont.core.construction import FontConstructor, GlyphBuilder
from parafont.core.edits import (
    EditModifiers,
    OnCurveMode,
    apply_edit,
    change_spacing,
    handle_modification,
    on_curve_modification,
    skeleton_distribution_modification,
    skeleton_position_modification,
)
from parafont.core.geometry import (
    chain_transform,
    flatten_outline,
    glyph_bounds,
    inverse_scale,
    point_in_polygon,
)
from parafont.core.overlay import OverlayState, OverlayStore

__all__ = [
    # Construction
    "FontConstructor",
    "GlyphBuilder",
    # Edits
    "EditModifiers",
    "OnCurveMode",
    "apply_edit",
    "change_spacing",
    "handle_modification",
    "on_curve_modification",
    "skeleton_distribution_modification",
    "skeleton_position_modification",
    # Geometry functions
    "chain_transform",
    "flatten_outline",
    "glyph_bounds",
    "inverse_scale",
    "point_in_polygon",
    # Store
    "OverlayState",
    "OverlayStore",
]
