"""Domain models for parafont.

This module contains the value types shared by construction, editing and
interaction. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable to plain dictionaries
- Independent of fontTools implementation details

Key classes:
- NodePath: Structured address into a constructed glyph
- Literal / Formula: Constant-or-formula values
- Point, Node, Contour: Resolved geometry
- ConstructedGlyph / ConstructedFont: Output of a construction pass
- FontSource / GlyphSource: Parametric font description
- Item variants: Interactive item descriptors
- Action: Message sent to the dispatch bus
"""

from parafont.domain.actions import Action
from parafont.domain.contour import (
    Contour,
    Expand,
    Handle,
    Node,
    NodeType,
    Point,
    ResolvedTransform,
)
from parafont.domain.glyph import ConstructedFont, ConstructedGlyph, DependencyTree
from parafont.domain.items import (
    ComponentItem,
    ComponentMenuItem,
    ContourItem,
    HandleItem,
    Item,
    ItemType,
    OnCurveItem,
    Side,
    SkeletonItem,
    SpacingItem,
)
from parafont.domain.path import NodePath
from parafont.domain.source import (
    AnchorSource,
    ComponentSource,
    ContourSource,
    ExpandSource,
    FontSource,
    GlyphSource,
    HandleSource,
    NodeSource,
    TransformSource,
)
from parafont.domain.values import Formula, Literal, Value, constant_or_formula

__all__: list[str] = [
    # Enums
    "ItemType",
    "NodeType",
    "Side",
    # Paths and values
    "NodePath",
    "Formula",
    "Literal",
    "Value",
    "constant_or_formula",
    # Geometry
    "Point",
    "Handle",
    "Expand",
    "Node",
    "Contour",
    "ResolvedTransform",
    "DependencyTree",
    "ConstructedGlyph",
    "ConstructedFont",
    # Source
    "AnchorSource",
    "ComponentSource",
    "ContourSource",
    "ExpandSource",
    "FontSource",
    "GlyphSource",
    "HandleSource",
    "NodeSource",
    "TransformSource",
    # Items
    "Item",
    "OnCurveItem",
    "HandleItem",
    "SkeletonItem",
    "SpacingItem",
    "ContourItem",
    "ComponentItem",
    "ComponentMenuItem",
    # Messages
    "Action",
]
