"""Interaction session state.

The session state is an explicit value threaded through each frame step:
``advance_frame`` receives the previous state and returns the next one.
"""

import enum
from dataclasses import dataclass, field

from parafont.domain import Action, ComponentItem, ContourItem, Item, NodePath, Point
from parafont.interaction.camera import Camera


class CanvasMode(enum.Enum):
    """Top-level editing mode, selected outside the canvas."""

    MOVE = "move"
    COMPONENTS = "components"
    SELECT_POINTS = "select-points"


class AppState(enum.Flag):
    """Set of interaction flags.

    One primary state is active at a time; ZOOMING is layered on top of it
    for the frames carrying a wheel delta.
    """

    DEFAULT = 0
    MOVING = enum.auto()
    ZOOMING = enum.auto()
    COMPONENT_HOVERED = enum.auto()
    COMPONENT_MENU_HOVERED = enum.auto()
    BOX_SELECTING = enum.auto()
    POINTS_SELECTED = enum.auto()
    DRAGGING_POINTS = enum.auto()
    CONTOUR_SELECTED = enum.auto()
    DRAGGING_CONTOUR = enum.auto()
    DRAGGING_CONTOUR_POINT = enum.auto()
    CONTOUR_POINT_SELECTED = enum.auto()
    SKELETON_POINT_SELECTED = enum.auto()
    DRAGGING_SPACING = enum.auto()
    SPACING_SELECTED = enum.auto()


SINGLE_POINT_SELECTED = (
    AppState.CONTOUR_POINT_SELECTED | AppState.SKELETON_POINT_SELECTED | AppState.SPACING_SELECTED
)
ANY_POINT_SELECTED = (
    AppState.POINTS_SELECTED
    | AppState.CONTOUR_POINT_SELECTED
    | AppState.SKELETON_POINT_SELECTED
    | AppState.SPACING_SELECTED
)
NUDGEABLE = (
    AppState.POINTS_SELECTED | AppState.CONTOUR_POINT_SELECTED | AppState.SKELETON_POINT_SELECTED
)
DRAGGING = (
    AppState.DRAGGING_POINTS
    | AppState.DRAGGING_CONTOUR_POINT
    | AppState.DRAGGING_CONTOUR
    | AppState.DRAGGING_SPACING
)
CONTOUR_ACTIVE = (
    AppState.CONTOUR_SELECTED
    | AppState.DRAGGING_CONTOUR_POINT
    | AppState.CONTOUR_POINT_SELECTED
    | AppState.DRAGGING_CONTOUR
    | AppState.SKELETON_POINT_SELECTED
)
EDITABLE = DRAGGING | ANY_POINT_SELECTED


def primary(state: AppState) -> AppState:
    """State without the layered ZOOMING flag."""
    return state & ~AppState.ZOOMING


def in_any(state: AppState, flags: AppState) -> bool:
    """Check whether the primary state is one of ``flags``."""
    return bool(primary(state) & flags)


class Axis(enum.Enum):
    """Axis kept by a direction-locked drag."""

    X = "x"
    Y = "y"


@dataclass(frozen=True)
class SessionState:
    """Everything the state machine carries from one frame to the next.

    Attributes:
        mode: Mode in effect this frame
        app_state: Interaction flags
        selected_items: Current selection
        contour_selected: Contour chosen from a box-select click
        contour_selected_index: Cycling index through overlapping contours
        box_start: Screen anchor of a box selection
        drag_start: World anchor of the current drag
        dragging_not_started: Drag threshold not yet exceeded
        directional_not_started: Direction lock not yet frozen
        directional_axis: Axis kept by a direction-locked drag
        double_click_deadline: Time (ms) before which a press is a double click
        camera: View camera
        previous_mode: Mode to restore when the pan key is released
        previous_app_state: State to restore when the pan key is released
        saved_camera: Camera to restore when preview ends
        first_draw: No glyph has been displayed yet
        glyph_name: Name of the glyph shown last frame
        glyph_outside_view: Last dispatched visibility flag
        hovered_component: Component under the pointer in component mode
    """

    mode: CanvasMode = CanvasMode.MOVE
    app_state: AppState = AppState.DEFAULT
    selected_items: tuple[Item, ...] = ()
    contour_selected: ContourItem | None = None
    contour_selected_index: int = 0
    box_start: Point | None = None
    drag_start: Point | None = None
    dragging_not_started: bool = False
    directional_not_started: bool = False
    directional_axis: Axis | None = None
    double_click_deadline: float | None = None
    camera: Camera = field(default_factory=Camera)
    previous_mode: CanvasMode | None = None
    previous_app_state: AppState | None = None
    saved_camera: Camera | None = None
    first_draw: bool = True
    glyph_name: str | None = None
    glyph_outside_view: bool = False
    hovered_component: ComponentItem | None = None


@dataclass(frozen=True)
class FrameResult:
    """Outcome of one frame step, for the dispatcher and the painter.

    Attributes:
        state: Next session state
        actions: Messages to dispatch, in order
        hot_items: Items under the pointer
        box: World corners of the selection rectangle
        cursor: Cursor hint
        dependency_links: (depended-on point, selected point) pairs to draw
        preview: Preview key held; only the glyph should be drawn
        edited: (item key, change count) of each computed edit
        skipped: (item key, reason) of each skipped edit
    """

    state: SessionState
    actions: tuple[Action, ...] = ()
    hot_items: tuple[Item, ...] = ()
    box: tuple[Point, Point] | None = None
    cursor: str = "default"
    dependency_links: tuple[tuple[NodePath, NodePath], ...] = ()
    preview: bool = False
    edited: tuple[tuple[str, int], ...] = ()
    skipped: tuple[tuple[str, str], ...] = ()
