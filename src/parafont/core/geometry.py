"""Geometric operations for construction, editing and hit testing.

This module provides core mathematical utilities for:
- 2D vector arithmetic on Point
- Transform chains (fontTools affine transforms)
- Inverse scale correction of world-space deltas
- Point-in-polygon testing (ray casting algorithm)
- Nearest point on a segment
- Outline flattening and glyph bounds

All functions are pure and stateless.
"""

import math
from collections.abc import Iterable

from fontTools.misc.transform import Identity, Transform
from fontTools.pens.boundsPen import BoundsPen

from parafont.core._bezier import flatten_cubic
from parafont.domain import ConstructedGlyph, Node, Point, ResolvedTransform

ORIGIN = Point(0.0, 0.0)


def add(a: Point, b: Point) -> Point:
    return Point(a.x + b.x, a.y + b.y)


def subtract(a: Point, b: Point) -> Point:
    return Point(a.x - b.x, a.y - b.y)


def scale(v: Point, factor: float) -> Point:
    return Point(v.x * factor, v.y * factor)


def dot(a: Point, b: Point) -> float:
    return a.x * b.x + a.y * b.y


def length(v: Point) -> float:
    return math.hypot(v.x, v.y)


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def normalize(v: Point) -> Point:
    """Unit vector along ``v``; the zero vector stays zero."""
    norm = length(v)
    if norm == 0:
        return ORIGIN
    return Point(v.x / norm, v.y / norm)


def angle_of(v: Point) -> float:
    """Direction of a vector in radians."""
    return math.atan2(v.y, v.x)


def polar(angle: float, radius: float) -> Point:
    """Vector of the given direction and length."""
    return Point(math.cos(angle) * radius, math.sin(angle) * radius)


def _single_transform(transform: ResolvedTransform) -> Transform:
    param = transform.param
    match transform.name:
        case "scaleX":
            return Identity.scale(param, 1)
        case "scaleY":
            return Identity.scale(1, param)
        case "scale":
            return Identity.scale(param)
        case "translateX":
            return Identity.translate(param, 0)
        case "translateY":
            return Identity.translate(0, param)
        case "rotate":
            return Identity.rotate(math.radians(param))
        case _:
            raise ValueError(f"Unknown transform '{transform.name}'")


def chain_transform(chain: Iterable[ResolvedTransform]) -> Transform:
    """Compose a transform chain, first entry applied first.

    Args:
        chain: Transforms in application order

    Returns:
        Affine transform mapping local to world coordinates

    Examples:
        >>> t = chain_transform([ResolvedTransform("scale", 2), ResolvedTransform("translateX", 10)])
        >>> t.transformPoint((1, 1))
        (12, 2)
    """
    matrix = Identity
    for transform in chain:
        matrix = _single_transform(transform).transform(matrix)
    return matrix


def apply_transform(matrix: Transform, point: Point) -> Point:
    x, y = matrix.transformPoint((point.x, point.y))
    return Point(x, y)


def inverse_scale(chain: Iterable[ResolvedTransform]) -> tuple[float, float]:
    """Accumulated inverse of the scale factors of a chain.

    Zero scale factors are ignored so the result stays finite.

    Returns:
        (x factor, y factor) turning a world delta into a local delta
    """
    x_factor = 1.0
    y_factor = 1.0
    for transform in chain:
        if transform.param == 0:
            continue
        if transform.name in ("scaleX", "scale"):
            x_factor /= transform.param
        if transform.name in ("scaleY", "scale"):
            y_factor /= transform.param
    return x_factor, y_factor


def to_local(vector: Point, chain: Iterable[ResolvedTransform]) -> Point:
    """Correct a world-space delta by the inverse scale of a chain."""
    x_factor, y_factor = inverse_scale(chain)
    return Point(vector.x * x_factor, vector.y * y_factor)


def point_in_polygon(point: Point, polygon: list[Point]) -> bool:
    """Determine if a point is inside a polygon using ray casting algorithm.

    Casts a horizontal ray from the point to the right and counts intersections
    with polygon edges. Odd number of intersections = inside, even = outside.

    Args:
        point: The point to test
        polygon: List of points forming the polygon boundary

    Returns:
        True if point is inside polygon, False otherwise

    Examples:
        >>> square = [Point(0.0, 0.0), Point(2.0, 0.0), Point(2.0, 2.0), Point(0.0, 2.0)]
        >>> point_in_polygon(Point(1.0, 1.0), square)
        True
        >>> point_in_polygon(Point(3.0, 3.0), square)
        False
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    x, y = point.x, point.y
    j = n - 1

    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        # Ray crosses edge (j, i)
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside

        j = i

    return inside


def flatten_outline(nodes: list[Node], closed: bool, tolerance: float = 1.0) -> list[Point]:
    """Convert an outline node sequence to a polyline.

    Args:
        nodes: Outline nodes in drawing order
        closed: Whether the last node connects back to the first
        tolerance: Maximum distance from the true curve (font units)

    Returns:
        Polyline points, without repeating the first point at the end
    """
    if not nodes:
        return []

    pairs = list(zip(nodes, nodes[1:]))
    if closed and len(nodes) > 1:
        pairs.append((nodes[-1], nodes[0]))

    points = [nodes[0].point]
    for start, end in pairs:
        segment = flatten_cubic(
            [
                start.point,
                Point(start.handle_out.x, start.handle_out.y),
                Point(end.handle_in.x, end.handle_in.y),
                end.point,
            ],
            tolerance,
        )
        points.extend(segment[1:])

    if closed and len(points) > 1 and points[-1] == points[0]:
        points.pop()
    return points


def glyph_bounds(glyph: ConstructedGlyph) -> tuple[float, float, float, float] | None:
    """Bounding box of a glyph's drawn outline.

    Returns:
        (xmin, ymin, xmax, ymax), or None for a glyph without outline
    """
    pen = BoundsPen(None)
    glyph.draw(pen)
    return pen.bounds


def rect_contains(point: Point, corner_a: Point, corner_b: Point) -> bool:
    """Check whether a point lies in the rectangle spanned by two corners."""
    return (
        min(corner_a.x, corner_b.x) <= point.x <= max(corner_a.x, corner_b.x)
        and min(corner_a.y, corner_b.y) <= point.y <= max(corner_a.y, corner_b.y)
    )
