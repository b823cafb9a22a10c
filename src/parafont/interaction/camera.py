"""View camera.

The camera maps world (font unit, y-up) coordinates to screen pixels
(y-down) with the affine transform ``(z, 0, 0, -z, tx, ty)``.
"""

from dataclasses import dataclass, replace
from typing import Any

from fontTools.misc.transform import Transform

from parafont.config import CameraConfig
from parafont.domain import Point


@dataclass(frozen=True)
class Camera:
    """Zoom and translation of the canvas.

    Attributes:
        zoom: Screen pixels per font unit
        tx: Screen x of the world origin
        ty: Screen y of the world origin
        width: Viewport width in pixels
        height: Viewport height in pixels
    """

    zoom: float = 1.0
    tx: float = 0.0
    ty: float = 0.0
    width: float = 1024.0
    height: float = 768.0

    @property
    def matrix(self) -> Transform:
        """World to screen transform."""
        return Transform(self.zoom, 0, 0, -self.zoom, self.tx, self.ty)

    def to_screen(self, point: Point) -> Point:
        x, y = self.matrix.transformPoint((point.x, point.y))
        return Point(x, y)

    def to_world(self, point: Point) -> Point:
        x, y = self.matrix.inverse().transformPoint((point.x, point.y))
        return Point(x, y)

    def pan(self, dx: float, dy: float) -> "Camera":
        """Shift the view by a screen-space delta."""
        return replace(self, tx=self.tx + dx, ty=self.ty + dy)

    def zoom_at(self, anchor: Point, wheel: float, config: CameraConfig) -> "Camera":
        """Zoom by a wheel delta, keeping a world point under the pointer.

        A zoom falling outside the limits is clamped and keeps the current
        translation.

        Args:
            anchor: World point that must not move on screen
            wheel: Wheel delta; positive zooms in
            config: Zoom limits

        Returns:
            Camera with the new zoom
        """
        requested = self.zoom * (1 + wheel / config.wheel_divisor)
        zoom = min(max(requested, config.min_zoom), config.max_zoom)
        if zoom != requested:
            return replace(self, zoom=zoom)

        growth = zoom - self.zoom
        return replace(
            self,
            zoom=zoom,
            tx=self.tx - growth * anchor.x,
            ty=self.ty + growth * anchor.y,
        )

    def centered_on(self, center: Point, zoom: float) -> "Camera":
        """Camera showing ``center`` in the middle of the viewport."""
        return replace(
            self,
            zoom=zoom,
            tx=self.width / 2 - zoom * center.x,
            ty=self.height / 2 + zoom * center.y,
        )

    def shows(self, bounds: tuple[float, float, float, float]) -> bool:
        """Check whether a world bounding box overlaps the viewport."""
        xmin, ymin, xmax, ymax = bounds
        a = self.to_screen(Point(xmin, ymin))
        b = self.to_screen(Point(xmax, ymax))
        left, right = min(a.x, b.x), max(a.x, b.x)
        top, bottom = min(a.y, b.y), max(a.y, b.y)
        return right >= 0 and left <= self.width and bottom >= 0 and top <= self.height

    def to_store(self) -> dict[str, Any]:
        """View matrix entry of the UI store."""
        return {"t": {"x": self.tx, "y": self.ty}, "z": self.zoom}
