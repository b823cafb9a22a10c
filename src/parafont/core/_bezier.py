"""Internal Bezier curve flattening.

Helper for outline hit testing. Not intended for public use.
"""

import math

from parafont.domain import Point


def _midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def flatten_cubic(points: list[Point], tolerance: float) -> list[Point]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Uses De Casteljau's algorithm for subdivision.

    Args:
        points: List of 4 control points [p0, p1, p2, p3]
        tolerance: Maximum distance from true curve

    Returns:
        List of points approximating the curve
    """
    p0, p1, p2, p3 = points

    # Curve midpoint (t=0.5) against chord midpoint
    curve_mid_x = 0.125 * (p0.x + 3 * p1.x + 3 * p2.x + p3.x)
    curve_mid_y = 0.125 * (p0.y + 3 * p1.y + 3 * p2.y + p3.y)
    line_mid_x = (p0.x + p3.x) / 2
    line_mid_y = (p0.y + p3.y) / 2

    if math.hypot(curve_mid_x - line_mid_x, curve_mid_y - line_mid_y) <= tolerance:
        return [p0, p3]

    q1 = _midpoint(p0, p1)
    q2 = _midpoint(p1, p2)
    q3 = _midpoint(p2, p3)
    r1 = _midpoint(q1, q2)
    r2 = _midpoint(q2, q3)
    mid = _midpoint(r1, r2)

    left = flatten_cubic([p0, q1, r1, mid], tolerance)
    right = flatten_cubic([mid, r2, q3, p3], tolerance)

    # Avoid duplicating the shared midpoint
    return left[:-1] + right
