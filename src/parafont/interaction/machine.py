"""Per-frame interaction state machine.

``advance_frame`` is the single step of the editing loop: it reads one
frame of input, the displayed glyph and the items under the pointer, and
returns the next session state together with the action messages to
dispatch. It never dispatches, mutates the glyph, or touches a store
itself, so a frame can be replayed from its inputs.

Order of a step:
1. Glyph change reset, double click, pan key
2. Mode transition (move, components or select-points)
3. Zoom flag, preview key, first-draw view reset
4. Drag thresholds, escape reset, camera pan/zoom
5. Edits for drags and arrow-key nudges
6. Visibility flag, camera and selection snapshots
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace

from parafont.config import ParafontSettings, get_default_settings
from parafont.core.edits import EditModifiers, OnCurveMode, apply_edit
from parafont.core.geometry import add, distance, glyph_bounds, subtract
from parafont.domain import (
    Action,
    ComponentItem,
    ComponentMenuItem,
    ConstructedGlyph,
    ContourItem,
    Item,
    ItemType,
    NodePath,
    OnCurveItem,
    Point,
    Side,
    SkeletonItem,
    SpacingItem,
)
from parafont.domain import actions as messages
from parafont.domain.items import filter_items, point_items
from parafont.interaction.hit_test import GlyphHitTester, describe_point
from parafont.interaction.input import FrameInput, Modifiers
from parafont.interaction.state import (
    ANY_POINT_SELECTED,
    CONTOUR_ACTIVE,
    DRAGGING,
    EDITABLE,
    NUDGEABLE,
    SINGLE_POINT_SELECTED,
    AppState,
    Axis,
    CanvasMode,
    FrameResult,
    SessionState,
    in_any,
    primary,
)

CURSOR_DEFAULT = "default"
CURSOR_RESIZE = "ew-resize"


def _current_items(glyph: ConstructedGlyph, items: Sequence[Item]) -> tuple[Item, ...]:
    """Re-describe point items from the glyph as it is now."""
    return tuple(
        (describe_point(glyph, item.id) or item) if item.type.is_point else item for item in items
    )


def _movable(items: Sequence[Item]) -> list[Item]:
    """Drop outline nodes whose skeleton node is moved along with them."""
    skeletons = {item.id for item in items if item.type is ItemType.NODE_SKELETON}
    return [
        item for item in items if not (isinstance(item, OnCurveItem) and item.parent_id in skeletons)
    ]


def _snapshots(items: Sequence[Item]) -> list[dict]:
    return [item.snapshot() for item in items]


@dataclass(frozen=True)
class FrameContext:
    """Externally owned data read by one frame.

    Attributes:
        glyph: Glyph currently displayed (None while loading)
        canvas_mode: Mode configured outside the canvas
        viewport: Canvas (width, height) in pixels
        show_dependencies: Whether dependency links are requested
    """

    glyph: ConstructedGlyph | None
    canvas_mode: CanvasMode = CanvasMode.SELECT_POINTS
    viewport: tuple[float, float] = (1024.0, 768.0)
    show_dependencies: bool = False


class _FrameStep:
    """Working state of one call to ``advance_frame``."""

    def __init__(
        self,
        state: SessionState,
        frame: FrameInput,
        context: FrameContext,
        hit_tester: GlyphHitTester,
        settings: ParafontSettings,
    ) -> None:
        self.state = state
        self.frame = frame
        self.context = context
        self.hit_tester = hit_tester
        self.settings = settings
        self.keys = settings.keys
        self.actions: list[Action] = []
        self.edited: list[tuple[str, int]] = []
        self.skipped: list[tuple[str, str]] = []

    def update(self, **changes) -> None:
        self.state = replace(self.state, **changes)

    def emit(self, action: Action) -> None:
        self.actions.append(action)

    def reset_view(self, glyph: ConstructedGlyph) -> None:
        """Centre the glyph bounding box at the reset zoom."""
        bounds = glyph_bounds(glyph)
        if bounds is None:
            center = Point(glyph.advance_width / 2, 0.0)
        else:
            xmin, ymin, xmax, ymax = bounds
            center = Point((xmin + xmax) / 2, (ymin + ymax) / 2)
        self.update(camera=self.state.camera.centered_on(center, self.settings.camera.reset_zoom))

    def run(self) -> FrameResult:
        width, height = self.context.viewport
        self.update(camera=replace(self.state.camera, width=width, height=height))

        glyph = self.context.glyph
        if glyph is None:
            return FrameResult(state=self.state)

        start_camera = self.state.camera.to_store()
        start_selection = self.state.selected_items
        camera = self.state.camera

        hot = self.hit_tester.hot_items(glyph, camera, self.frame.pointer)
        boxed: list[Item] = []
        if self.state.box_start is not None:
            boxed = self.hit_tester.box_items(glyph, camera, self.state.box_start, self.frame.pointer)
        world = camera.to_world(self.frame.pointer)

        self._glyph_change(glyph)
        pressed = self._double_click(glyph)
        self._pan_key()

        match self.state.mode:
            case CanvasMode.MOVE:
                moving = AppState.MOVING if self.frame.pointer_down else AppState.DEFAULT
                self.update(app_state=moving)
            case CanvasMode.COMPONENTS:
                self._components(glyph, hot)
            case CanvasMode.SELECT_POINTS:
                self._select_points(glyph, hot, boxed, pressed)

        if self.frame.wheel:
            self.update(app_state=self.state.app_state | AppState.ZOOMING)
        else:
            self.update(app_state=self.state.app_state & ~AppState.ZOOMING)

        preview = self._preview(glyph)
        if self.state.first_draw:
            self.update(first_draw=False)
            self.reset_view(glyph)

        spacing = filter_items(hot, ItemType.SPACING_HANDLE)
        cursor = CURSOR_DEFAULT
        if (
            self.state.mode is CanvasMode.SELECT_POINTS
            and not in_any(self.state.app_state, AppState.DRAGGING_POINTS | AppState.DRAGGING_CONTOUR_POINT)
            and spacing
        ):
            cursor = CURSOR_RESIZE

        box = None
        links: list[tuple[NodePath, NodePath]] = []
        if not preview:
            self._drag_thresholds(world)
            if in_any(self.state.app_state, AppState.BOX_SELECTING) and self.state.box_start is not None:
                box = (camera.to_world(self.state.box_start), world)
            links = self._dependency_links(glyph)
            self._escape(glyph)
            self._move_camera(world)
            self._edits(glyph, world)

        self._visibility(glyph)
        if self.state.camera.to_store() != start_camera:
            self.emit(messages.store_value(glyphViewMatrix=self.state.camera.to_store()))
        if _snapshots(self.state.selected_items) != _snapshots(start_selection):
            self.emit(
                messages.store_value(selectedItems=[item.snapshot() for item in self.state.selected_items])
            )

        return FrameResult(
            state=self.state,
            actions=tuple(self.actions),
            hot_items=tuple(hot),
            box=box,
            cursor=cursor,
            dependency_links=tuple(links),
            preview=preview,
            edited=tuple(self.edited),
            skipped=tuple(self.skipped),
        )

    def _glyph_change(self, glyph: ConstructedGlyph) -> None:
        if self.state.glyph_name is not None and glyph.name != self.state.glyph_name:
            self.update(
                app_state=AppState.DEFAULT,
                selected_items=(),
                contour_selected=None,
                contour_selected_index=0,
                box_start=None,
                drag_start=None,
                dragging_not_started=False,
                directional_not_started=False,
                hovered_component=None,
            )
        self.update(glyph_name=glyph.name)

    def _visibility(self, glyph: ConstructedGlyph) -> None:
        bounds = glyph_bounds(glyph)
        outside = bounds is not None and not self.state.camera.shows(bounds)
        if outside != self.state.glyph_outside_view:
            self.emit(messages.store_value(glyphOutsideView=outside))
            self.update(glyph_outside_view=outside)

    def _double_click(self, glyph: ConstructedGlyph) -> bool:
        """Detect a double click; returns whether the press is still to be handled."""
        if not self.frame.pressed:
            return False

        deadline = self.state.double_click_deadline
        if deadline is not None and self.frame.time_ms <= deadline:
            self.reset_view(glyph)
            self.update(double_click_deadline=None)
            return False

        self.update(double_click_deadline=self.frame.time_ms + self.settings.interaction.double_click_ms)
        return True

    def _pan_key(self) -> None:
        mode = self.context.canvas_mode if self.state.previous_mode is None else CanvasMode.MOVE

        if self.frame.key_released(self.keys.pan) and self.state.previous_mode is not None:
            mode = self.state.previous_mode
            self.emit(messages.store_value(canvasMode=mode.value))
            if mode is CanvasMode.SELECT_POINTS and self.state.previous_app_state is not None:
                self.update(app_state=self.state.previous_app_state)
            self.update(previous_mode=None, previous_app_state=None)
        elif self.frame.key_pressed(self.keys.pan) and self.state.previous_mode is None:
            self.update(previous_mode=self.context.canvas_mode, previous_app_state=self.state.app_state)
            mode = CanvasMode.MOVE
            self.emit(messages.store_value(canvasMode=CanvasMode.MOVE.value))

        self.update(mode=mode)

    def _components(self, glyph: ConstructedGlyph, hot: list[Item]) -> None:
        menu = filter_items(hot, ItemType.COMPONENT_MENU_ITEM_CENTER)
        choices = filter_items(hot, ItemType.COMPONENT_MENU_ITEM)
        class_choices = filter_items(hot, ItemType.COMPONENT_MENU_ITEM_CLASS)
        components = filter_items(hot, ItemType.COMPONENT_CHOICE, ItemType.COMPONENT_NONE_CHOICE)

        if self.frame.released:
            if choices:
                choice: ComponentMenuItem = choices[0]
                self.emit(messages.change_component(glyph.name, choice.component_id, choice.base_id))
                menu, components = [], []
            if class_choices:
                choice = class_choices[0]
                self.emit(messages.change_component_class(choice.component_class, choice.base_id))
                menu, components = [], []

        current = primary(self.state.app_state)
        if current in (AppState.DEFAULT, AppState.COMPONENT_HOVERED) and components:
            hovered: ComponentItem = components[0]
            self.update(app_state=AppState.COMPONENT_HOVERED, hovered_component=hovered)
        elif menu:
            self.update(app_state=AppState.COMPONENT_MENU_HOVERED)
        else:
            self.update(app_state=AppState.DEFAULT, hovered_component=None)

    def _selectable_nodes(self, hot: list[Item]) -> list[Item]:
        """Point items the current state lets the pointer grab."""
        nodes = point_items(hot)
        state = self.state
        if in_any(state.app_state, AppState.POINTS_SELECTED | AppState.DRAGGING_POINTS):
            return nodes
        if state.contour_selected is not None and in_any(
            state.app_state, CONTOUR_ACTIVE | SINGLE_POINT_SELECTED
        ):
            prefix = state.contour_selected.id
            return [node for node in nodes if node.id.startswith(prefix)]
        return []

    def _start_point_drag(self, node: Item) -> None:
        self.update(
            selected_items=(node,),
            app_state=AppState.DRAGGING_CONTOUR_POINT,
            drag_start=node.center,
            dragging_not_started=True,
            directional_not_started=True,
            directional_axis=None,
        )

    def _start_spacing_drag(self, handle: SpacingItem, world: Point) -> None:
        self.update(
            selected_items=(handle,),
            app_state=AppState.DRAGGING_SPACING,
            drag_start=world,
            dragging_not_started=True,
            directional_not_started=False,
        )

    def _start_box(self, clear_contour: bool = False) -> None:
        self.update(app_state=AppState.BOX_SELECTING, box_start=self.frame.pointer)
        if clear_contour:
            self.update(contour_selected=None, contour_selected_index=0)

    def _flush(self, glyph: ConstructedGlyph) -> None:
        self.emit(
            messages.change_glyph_node_manually(
                {}, glyph.edit_name, label=messages.MANUAL_EDITION_LABEL, force=True
            )
        )

    def _select_points(
        self, glyph: ConstructedGlyph, hot: list[Item], boxed: list[Item], pressed: bool
    ) -> None:
        nodes = self._selectable_nodes(hot)
        spacing = filter_items(hot, ItemType.SPACING_HANDLE)
        contours: list[ContourItem] = filter_items(
            hot, ItemType.GLYPH_CONTOUR, ItemType.GLYPH_COMPONENT_CONTOUR
        )
        released = self.frame.released
        current = primary(self.state.app_state)
        world = self.state.camera.to_world(self.frame.pointer)
        contour_ids = {contour.id for contour in contours}

        if current == AppState.DEFAULT and pressed:
            if spacing:
                self._start_spacing_drag(spacing[0], world)
            else:
                self._start_box()

        elif current & AppState.BOX_SELECTING and released:
            if boxed:
                self.update(
                    selected_items=tuple(boxed), app_state=AppState.POINTS_SELECTED, box_start=None
                )
            elif contours:
                index = self.state.contour_selected_index
                self.update(
                    contour_selected=contours[index % len(contours)],
                    contour_selected_index=index + 1,
                    selected_items=(),
                    app_state=AppState.CONTOUR_SELECTED,
                    box_start=None,
                )
            else:
                self.update(selected_items=(), app_state=AppState.DEFAULT, box_start=None)

        elif current & AppState.CONTOUR_SELECTED and pressed:
            if nodes:
                self._start_point_drag(nodes[0])
            elif contours:
                if self.state.contour_selected is not None and self.state.contour_selected.id in contour_ids:
                    self.update(app_state=AppState.DRAGGING_CONTOUR)
                else:
                    self._start_box(clear_contour=True)
            elif spacing:
                self._start_spacing_drag(spacing[0], world)
            else:
                self._start_box(clear_contour=True)

        elif current & (AppState.DRAGGING_CONTOUR_POINT | AppState.DRAGGING_SPACING) and released:
            first = self.state.selected_items[0] if self.state.selected_items else None
            if first is not None and first.type is ItemType.NODE_SKELETON:
                next_state = AppState.SKELETON_POINT_SELECTED
            elif first is not None and first.type is ItemType.SPACING_HANDLE:
                next_state = AppState.SPACING_SELECTED
            else:
                next_state = AppState.CONTOUR_POINT_SELECTED
            self.update(
                app_state=next_state, dragging_not_started=False, directional_not_started=False
            )
            self._flush(glyph)

        elif current & AppState.DRAGGING_CONTOUR and released:
            self.update(app_state=AppState.CONTOUR_SELECTED)

        elif current & SINGLE_POINT_SELECTED and pressed:
            if nodes:
                self._start_point_drag(nodes[0])
            elif contours and self.state.contour_selected is not None:
                if self.state.contour_selected.id in contour_ids:
                    self.update(app_state=AppState.DRAGGING_CONTOUR, selected_items=())
                else:
                    self.update(selected_items=())
                    self._start_box()
            elif spacing:
                self._start_spacing_drag(spacing[0], world)
            else:
                self.update(selected_items=())
                self._start_box()

        elif current & AppState.POINTS_SELECTED and pressed:
            selected = {item.key for item in self.state.selected_items}
            if any(node.key in selected for node in nodes):
                self.update(
                    app_state=AppState.DRAGGING_POINTS,
                    selected_items=_current_items(glyph, self.state.selected_items),
                    drag_start=world,
                    dragging_not_started=True,
                    directional_not_started=True,
                    directional_axis=None,
                )
            else:
                self.update(selected_items=())
                self._start_box()

        elif current & AppState.DRAGGING_POINTS and released:
            self.update(
                app_state=AppState.POINTS_SELECTED,
                dragging_not_started=False,
                directional_not_started=False,
            )
            self._flush(glyph)

    def _preview(self, glyph: ConstructedGlyph) -> bool:
        preview_key = self.keys.preview
        if self.frame.key_pressed(preview_key):
            self.update(saved_camera=self.state.camera)
            self.reset_view(glyph)
        if self.frame.key_released(preview_key) and self.state.saved_camera is not None:
            saved = self.state.saved_camera
            self.update(
                camera=replace(saved, width=self.state.camera.width, height=self.state.camera.height),
                saved_camera=None,
            )
        return self.frame.held(preview_key)

    def _drag_thresholds(self, world: Point) -> None:
        state = self.state
        if not in_any(state.app_state, DRAGGING) or state.drag_start is None:
            return

        displacement = distance(state.drag_start, world) * state.camera.zoom
        config = self.settings.interaction
        if state.dragging_not_started and displacement >= config.drag_threshold_px:
            self.update(dragging_not_started=False)
        if state.directional_not_started:
            delta = subtract(world, state.drag_start)
            axis = Axis.X if abs(delta.x) > abs(delta.y) else Axis.Y
            self.update(directional_axis=axis)
            if displacement >= config.directional_threshold_px:
                self.update(directional_not_started=False)

    def _dependency_links(self, glyph: ConstructedGlyph) -> list[tuple[NodePath, NodePath]]:
        state = self.state
        if (
            not self.context.show_dependencies
            or not in_any(state.app_state, AppState.CONTOUR_POINT_SELECTED | AppState.SKELETON_POINT_SELECTED)
            or len(state.selected_items) != 1
        ):
            return []

        point = NodePath.parse(state.selected_items[0].key).point()
        if point is None:
            return []
        return [(dependency, point) for dependency in glyph.dependency_tree.dependencies_of(point)]

    def _escape(self, glyph: ConstructedGlyph) -> None:
        if in_any(self.state.app_state, ANY_POINT_SELECTED) and self.frame.key_pressed(self.keys.escape):
            self.emit(
                messages.reset_glyph_points_manually(
                    glyph.edit_name,
                    glyph.unicode,
                    [item.snapshot() for item in self.state.selected_items],
                )
            )

    def _move_camera(self, world: Point) -> None:
        state = self.state
        if in_any(state.app_state, AppState.MOVING):
            self.update(camera=state.camera.pan(self.frame.delta.x, self.frame.delta.y))
        elif state.app_state & AppState.ZOOMING:
            self.update(camera=state.camera.zoom_at(world, self.frame.wheel, self.settings.camera))

    def _arrow_step(self) -> Point | None:
        """Nudge vector of the arrow key pressed this frame."""
        step = self.settings.interaction.nudge_step
        if Modifiers.SHIFT in self.frame.modifiers:
            step = self.settings.interaction.nudge_large_step

        vectors = {
            self.keys.left: Point(-step, 0.0),
            self.keys.up: Point(0.0, step),
            self.keys.right: Point(step, 0.0),
            self.keys.down: Point(0.0, -step),
        }
        for key in self.keys.arrows:
            if self.frame.key_pressed(key):
                return vectors[key]
        return None

    def _interactions(self, glyph: ConstructedGlyph, world: Point) -> tuple[list[tuple[Item, Point]], bool]:
        """Targets of this frame's edits and whether they follow the pointer."""
        state = self.state
        selected: Sequence[Item] = state.selected_items

        if in_any(
            state.app_state,
            AppState.DRAGGING_CONTOUR_POINT | AppState.DRAGGING_POINTS | AppState.DRAGGING_CONTOUR,
        ):
            if in_any(state.app_state, AppState.DRAGGING_POINTS) and state.drag_start is not None:
                offset = subtract(world, state.drag_start)
                return [(item, add(item.center, offset)) for item in _movable(selected)], True
            return [(item, world) for item in selected], True

        step = self._arrow_step()
        if in_any(state.app_state, NUDGEABLE) and step is not None:
            targets = []
            for item in _movable(_current_items(glyph, selected)):
                current = glyph.get(item.key)
                if current is None:
                    self.skipped.append((item.key, "unresolved"))
                    continue
                targets.append((item, Point(current.x + step.x, current.y + step.y)))
            return targets, False

        if in_any(state.app_state, AppState.DRAGGING_SPACING) and selected:
            return [(selected[0], world)], True

        if in_any(state.app_state, AppState.SPACING_SELECTED) and selected and step is not None and step.x:
            handle = selected[0]
            base = glyph.advance_width if handle.side is Side.RIGHT else 0.0
            return [(handle, Point(base + step.x, 0.0))], False

        return [], False

    def _modifiers(self) -> EditModifiers:
        held = self.frame.modifiers
        unparallel_key = Modifiers.META if self.keys.mac_platform else Modifiers.CTRL
        on_curve = OnCurveMode.BOTH
        if self.frame.held(self.keys.angle_only):
            on_curve = OnCurveMode.ANGLE
        elif self.frame.held(self.keys.width_only):
            on_curve = OnCurveMode.WIDTH
        return EditModifiers(
            unsmooth=Modifiers.ALT in held,
            unparallel=unparallel_key in held,
            on_curve=on_curve,
            distribution=self.frame.held(self.keys.distribution),
        )

    def _locked(self, item: Item, target: Point) -> Point:
        """Keep a skeleton or contour node on the axis of a direction-locked drag."""
        state = self.state
        multi = in_any(state.app_state, AppState.DRAGGING_POINTS)
        anchor = item.center if multi else state.drag_start
        if anchor is None or state.directional_axis is None:
            return target
        if state.directional_axis is Axis.X:
            return Point(target.x, anchor.y)
        return Point(anchor.x, target.y)

    def _edits(self, glyph: ConstructedGlyph, world: Point) -> None:
        interactions, movement = self._interactions(glyph, world)
        if not interactions:
            return
        if not in_any(self.state.app_state, EDITABLE) or self.state.dragging_not_started:
            return

        modifiers = self._modifiers()
        lock = (
            Modifiers.SHIFT in self.frame.modifiers
            and not self.state.directional_not_started
            and movement
            and not modifiers.distribution
        )

        for item, target in interactions:
            if lock and isinstance(item, SkeletonItem):
                target = self._locked(item, target)

            action = apply_edit(glyph, item, target, modifiers)
            if action is None:
                self.skipped.append((item.key, "unresolved"))
                continue

            self.emit(action)
            self.edited.append((item.key, len(action.payload.get("changes", {})) or 1))

            if isinstance(item, SpacingItem) and item.side is Side.LEFT:
                camera = self.state.camera
                self.update(camera=camera.pan(target.x * camera.zoom, 0.0))


def advance_frame(
    state: SessionState,
    frame: FrameInput,
    context: FrameContext,
    hit_tester: GlyphHitTester | None = None,
    settings: ParafontSettings | None = None,
) -> FrameResult:
    """Advance the interaction session by one frame.

    Args:
        state: Session state left by the previous frame
        frame: Input seen by this frame
        context: Displayed glyph and externally configured mode
        hit_tester: Item lookup under the pointer
        settings: Thresholds, key bindings and camera limits

    Returns:
        Next state, actions to dispatch and data for the painter
    """
    settings = settings or get_default_settings()
    hit_tester = hit_tester or GlyphHitTester(settings.interaction)
    return _FrameStep(state, frame, context, hit_tester, settings).run()
