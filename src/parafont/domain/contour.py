"""Resolved geometric types for constructed glyphs.

This module defines the concrete geometry produced by a construction pass:
- Point: A 2D point in font units
- NodeType: Tangency of a node on its in/out side
- ResolvedTransform: One step of a transform chain with its resolved parameter
- Handle: A bezier control point with its formula-derived base position
- Expand: Resolved width/angle/distribution of a skeleton node
- Node: An on-curve node with handles (skeleton or outline)
- Contour: A sequence of nodes, either a skeleton or a plain outline
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in font units
        y: Y coordinate in font units
    """

    x: float
    y: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point instance
        """
        return cls(x=float(data["x"]), y=float(data["y"]))


class NodeType(Enum):
    """Tangency of a node on one side.

    - SMOOTH: in and out handles stay collinear through the node
    - CORNER: handles move independently
    - LINE: the adjacent segment is straight
    """

    SMOOTH = "smooth"
    CORNER = "corner"
    LINE = "line"


@dataclass(frozen=True, slots=True)
class ResolvedTransform:
    """One transform of a chain.

    Attributes:
        name: scaleX, scaleY, scale, translateX, translateY or rotate
        param: Resolved parameter (degrees for rotate)
    """

    name: str
    param: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "param": self.param}


@dataclass(frozen=True, slots=True)
class Handle:
    """A bezier control point.

    Attributes:
        x: World X coordinate, overrides applied
        y: World Y coordinate, overrides applied
        x_base: World X coordinate without the handle's own override
        y_base: World Y coordinate without the handle's own override
    """

    x: float
    y: float
    x_base: float
    y_base: float

    @property
    def base(self) -> Point:
        """Formula-derived position."""
        return Point(self.x_base, self.y_base)

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "x_base": self.x_base, "y_base": self.y_base}


@dataclass(frozen=True, slots=True)
class Expand:
    """Resolved expansion of a skeleton node.

    The ``base_*`` values are the formula results; the others have the
    manual overrides applied (width is a factor, angle and distr offsets).

    Attributes:
        width: Distance between the two expanded points
        angle: Direction from the skeleton node to the first expanded point (radians)
        distr: Fraction of the width placed on the first side
        base_width: Formula width
        base_angle: Formula angle
        base_distr: Formula distribution
    """

    width: float
    angle: float
    distr: float
    base_width: float
    base_angle: float
    base_distr: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "angle": self.angle,
            "distr": self.distr,
            "base_width": self.base_width,
            "base_angle": self.base_angle,
            "base_distr": self.base_distr,
        }


@dataclass(frozen=True, slots=True)
class Node:
    """An on-curve node with its handles.

    Skeleton nodes carry their expansion and the two outline nodes it
    produces. The two outline nodes are each other's parallel sibling.

    Attributes:
        x: World X coordinate, overrides applied
        y: World Y coordinate, overrides applied
        x_base: World X coordinate without the node's own override
        y_base: World Y coordinate without the node's own override
        handle_in: Incoming control point (path token ``in``)
        handle_out: Outgoing control point (path token ``out``)
        type_in: Tangency on the incoming side
        type_out: Tangency on the outgoing side
        expand: Expansion of a skeleton node
        expanded_to: Outline nodes produced by a skeleton node
        transforms: Transform chain mapping local to world coordinates
    """

    path_aliases: ClassVar[dict[str, str]] = {"in": "handle_in", "out": "handle_out"}

    x: float
    y: float
    x_base: float
    y_base: float
    handle_in: Handle
    handle_out: Handle
    type_in: NodeType = NodeType.SMOOTH
    type_out: NodeType = NodeType.SMOOTH
    expand: Expand | None = None
    expanded_to: tuple["Node", "Node"] | None = None
    transforms: tuple[ResolvedTransform, ...] = ()

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    @property
    def base(self) -> Point:
        """Position without the node's own override."""
        return Point(self.x_base, self.y_base)

    def is_smooth(self) -> bool:
        """Check whether either side of the node is smooth."""
        return NodeType.SMOOTH in (self.type_in, self.type_out)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "x": self.x,
            "y": self.y,
            "x_base": self.x_base,
            "y_base": self.y_base,
            "in": self.handle_in.to_dict(),
            "out": self.handle_out.to_dict(),
            "type_in": self.type_in.value,
            "type_out": self.type_out.value,
        }
        if self.expand is not None:
            data["expand"] = self.expand.to_dict()
        if self.expanded_to is not None:
            data["expanded_to"] = [node.to_dict() for node in self.expanded_to]
        return data


@dataclass
class Contour:
    """A resolved contour.

    Skeleton contours describe a stroke: each node expands to a left and a
    right outline node. Plain contours are drawn as they are.

    Attributes:
        nodes: Nodes in drawing order
        skeleton: Whether nodes are skeleton nodes
        closed: Whether the contour closes on itself
    """

    nodes: list[Node]
    skeleton: bool = False
    closed: bool = True
    _cached_outlines: list[tuple[list[Node], bool]] | None = field(
        default=None, repr=False, init=False, compare=False
    )

    def outlines(self) -> list[tuple[list[Node], bool]]:
        """Outline node sequences drawn for this contour.

        An open skeleton gives one closed outline running along the first
        side and back along the second. A closed skeleton gives one outline
        per side. A plain contour gives itself.

        Returns:
            List of (nodes, closed) pairs
        """
        if self._cached_outlines is not None:
            return self._cached_outlines

        if not self.skeleton:
            outlines = [(list(self.nodes), self.closed)]
        else:
            expanded = [node.expanded_to for node in self.nodes if node.expanded_to is not None]
            left = [pair[0] for pair in expanded]
            right = [pair[1] for pair in reversed(expanded)]
            if self.closed:
                outlines = [(left, True), (right, True)]
            else:
                outlines = [(left + right, True)]

        self._cached_outlines = outlines
        return outlines

    def to_dict(self) -> dict[str, Any]:
        return {
            "skeleton": self.skeleton,
            "closed": self.closed,
            "nodes": [node.to_dict() for node in self.nodes],
        }
