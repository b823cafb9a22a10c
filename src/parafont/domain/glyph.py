"""Constructed glyph representation.

This module defines the output of a construction pass: a glyph with its
resolved contours, anchors, components, spacing and the dependency tree
recording which points each point's formulas read.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from parafont.domain.contour import Contour, Node, Point, ResolvedTransform
from parafont.domain.path import NodePath


class DependencyTree:
    """Per-point record of the point paths each attribute's formula reads.

    Keys are point-level paths (``contours.0.nodes.1``), values map an
    attribute (``x``, ``expand.width``, ``in.y``...) to the referenced paths.
    """

    def __init__(self) -> None:
        self._entries: dict[NodePath, dict[str, tuple[NodePath, ...]]] = {}

    def add(self, point: NodePath, attribute: str, references: tuple[NodePath, ...]) -> None:
        """Record the references of one attribute of a point."""
        if references:
            self._entries.setdefault(point, {})[attribute] = references

    def merge(self, prefix: NodePath, other: "DependencyTree") -> None:
        """Import another tree with every path placed under ``prefix``."""
        for point, attributes in other._entries.items():
            self._entries[prefix.child(*point)] = {
                attribute: tuple(prefix.child(*ref) for ref in refs)
                for attribute, refs in attributes.items()
            }

    def get(self, point: NodePath | str) -> dict[str, tuple[NodePath, ...]]:
        """Attribute references recorded for a point (empty if none)."""
        if isinstance(point, str):
            point = NodePath.parse(point)
        return dict(self._entries.get(point, {}))

    def dependencies_of(self, point: NodePath | str) -> list[NodePath]:
        """Distinct points read by a point's formulas, anchors excluded.

        Args:
            point: Point-level path

        Returns:
            Point paths in first-reference order
        """
        seen: list[NodePath] = []
        for references in self.get(point).values():
            for reference in references:
                if reference.is_anchor():
                    continue
                target = reference.point()
                if target is not None and target not in seen:
                    seen.append(target)
        return seen

    def __contains__(self, point: object) -> bool:
        return point in self._entries

    def __iter__(self) -> Iterator[NodePath]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        return {
            str(point): {attribute: [str(ref) for ref in refs] for attribute, refs in attributes.items()}
            for point, attributes in self._entries.items()
        }


def _draw_segment(pen: Any, start: Node, end: Node) -> None:
    if (
        start.handle_out.x == start.x
        and start.handle_out.y == start.y
        and end.handle_in.x == end.x
        and end.handle_in.y == end.y
    ):
        pen.lineTo((end.x, end.y))
    else:
        pen.curveTo(
            (start.handle_out.x, start.handle_out.y),
            (end.handle_in.x, end.handle_in.y),
            (end.x, end.y),
        )


@dataclass
class ConstructedGlyph:
    """A glyph resolved against a parameter environment.

    Component glyphs are themselves ConstructedGlyph instances carrying the
    component id and the list of bases the component can switch between.

    Attributes:
        name: Glyph name
        unicode: Unicode code point (None for unencoded glyphs)
        contours: Resolved contours
        anchors: Resolved anchor points
        components: Resolved component glyphs
        base: Name of the glyph this one is an alternate of
        component_class: Class shared by interchangeable component glyphs
        component_id: Id of the component slot this glyph fills
        component_bases: Glyph names the component slot can use
        spacing_left: Left side bearing with letter spacing applied
        spacing_right: Right side bearing with letter spacing applied
        base_spacing_left: Formula left side bearing
        base_spacing_right: Formula right side bearing
        advance_width: Outline x-max plus right spacing
        transforms: Transform chain applied to every point
        dependency_tree: Point references of every formula
        manual_changes: Overlay entries applied to this glyph
    """

    name: str
    unicode: int | None
    contours: list[Contour]
    anchors: list[Point] = field(default_factory=list)
    components: list["ConstructedGlyph"] = field(default_factory=list)
    base: str | None = None
    component_class: str | None = None
    component_id: str | None = None
    component_bases: tuple[str, ...] = ()
    spacing_left: float = 0.0
    spacing_right: float = 0.0
    base_spacing_left: float = 0.0
    base_spacing_right: float = 0.0
    advance_width: float = 0.0
    transforms: tuple[ResolvedTransform, ...] = ()
    dependency_tree: DependencyTree = field(default_factory=DependencyTree, repr=False, compare=False)
    manual_changes: dict[str, float] = field(default_factory=dict, repr=False)

    @property
    def edit_name(self) -> str:
        """Name that manual changes are stored under."""
        return self.base or self.name

    @property
    def letter(self) -> str:
        """Character of the glyph, empty for unencoded glyphs."""
        return chr(self.unicode) if self.unicode is not None else ""

    def is_empty(self) -> bool:
        """Check if glyph has no outlines of its own or through components."""
        return not self.contours and all(c.is_empty() for c in self.components)

    def get(self, path: NodePath | str) -> Any | None:
        """Resolve a path into the glyph, None if it does not exist."""
        if isinstance(path, str):
            path = NodePath.parse(path)
        return path.get(self)

    def draw(self, pen: Any) -> None:
        """Draw the outline, components included, with a segment pen.

        Args:
            pen: Object implementing the fontTools pen protocol
        """
        for contour in self.contours:
            for nodes, closed in contour.outlines():
                if not nodes:
                    continue
                first = nodes[0]
                pen.moveTo((first.x, first.y))
                for start, end in zip(nodes, nodes[1:]):
                    _draw_segment(pen, start, end)
                if closed:
                    if len(nodes) > 1:
                        last = nodes[-1]
                        closing_is_line = (
                            last.handle_out.x == last.x
                            and last.handle_out.y == last.y
                            and first.handle_in.x == first.x
                            and first.handle_in.y == first.y
                        )
                        if not closing_is_line:
                            _draw_segment(pen, last, first)
                    pen.closePath()
                else:
                    pen.endPath()

        for component in self.components:
            component.draw(pen)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the resolved geometry.

        Returns:
            Dictionary representation of the glyph
        """
        data: dict[str, Any] = {
            "name": self.name,
            "unicode": self.unicode,
            "spacing_left": self.spacing_left,
            "spacing_right": self.spacing_right,
            "advance_width": self.advance_width,
            "contours": [c.to_dict() for c in self.contours],
            "anchors": [a.to_dict() for a in self.anchors],
            "components": [c.to_dict() for c in self.components],
        }
        if self.base is not None:
            data["base"] = self.base
        if self.component_id is not None:
            data["component_id"] = self.component_id
        if self.transforms:
            data["transforms"] = [t.to_dict() for t in self.transforms]
        return data


@dataclass
class ConstructedFont:
    """Result of constructing a font for a character subset.

    Attributes:
        fontinfo: Resolved font-level attributes (family_name, ascender...)
        glyphs: Constructed glyphs in subset order
    """

    fontinfo: dict[str, Any]
    glyphs: list[ConstructedGlyph]

    def glyph(self, name: str) -> ConstructedGlyph | None:
        """Find a constructed glyph by name."""
        for glyph in self.glyphs:
            if glyph.name == name:
                return glyph
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fontinfo": dict(self.fontinfo),
            "glyphs": [g.to_dict() for g in self.glyphs],
        }
