"""Tests for the per-frame interaction state machine."""

from dataclasses import replace

import pytest

from parafont.config import ParafontSettings
from parafont.core.construction import MANUAL_CHANGES
from parafont.domain import (
    ComponentMenuItem,
    ContourItem,
    ItemType,
    NodePath,
    Point,
)
from parafont.domain import actions
from parafont.interaction import (
    AppState,
    Axis,
    Camera,
    CanvasMode,
    FrameContext,
    FrameInput,
    GlyphHitTester,
    Modifiers,
    SessionState,
    advance_frame,
    describe_point,
)

# World (x, y) is drawn at screen (x, 800 - y)
CAMERA = Camera(zoom=1.0, tx=0.0, ty=800.0)

ESCAPE = 27
RIGHT_ARROW = 39
PAN = 32
PREVIEW = 90

STEM = ContourItem(type=ItemType.GLYPH_CONTOUR, id=NodePath.of("contours", 0))


@pytest.fixture
def settings() -> ParafontSettings:
    return ParafontSettings()


@pytest.fixture
def tester(settings: ParafontSettings) -> GlyphHitTester:
    return GlyphHitTester(settings.interaction)


@pytest.fixture
def state() -> SessionState:
    """Select-points session already showing glyph "i"."""
    return SessionState(
        mode=CanvasMode.SELECT_POINTS,
        first_draw=False,
        camera=CAMERA,
        glyph_name="i",
    )


@pytest.fixture
def run(glyph_i, tester, settings):
    """Advance one frame on glyph "i" (or another glyph/context)."""

    def _run(state: SessionState, glyph=None, mode=CanvasMode.SELECT_POINTS, dependencies=False, **frame):
        context = FrameContext(
            glyph=glyph if glyph is not None else glyph_i,
            canvas_mode=mode,
            show_dependencies=dependencies,
        )
        return advance_frame(state, FrameInput(**frame), context, tester, settings)

    return _run


def named(result, name: str) -> list[actions.Action]:
    return [action for action in result.actions if action.name == name]


class TestLifecycle:
    """Tests for first draw, glyph changes and missing glyphs."""

    def test_no_glyph(self, tester, settings) -> None:
        result = advance_frame(SessionState(), FrameInput(), FrameContext(glyph=None), tester, settings)
        assert result.actions == ()
        assert result.state.first_draw

    def test_first_draw_centres_glyph(self, run) -> None:
        result = run(SessionState(mode=CanvasMode.SELECT_POINTS))
        camera = result.state.camera
        assert not result.state.first_draw
        assert camera.zoom == pytest.approx(0.5)
        center = camera.to_screen(Point(100, 250))
        assert (center.x, center.y) == pytest.approx((512, 384))
        assert named(result, actions.STORE_VALUE)[0].payload == {"glyphViewMatrix": camera.to_store()}

    def test_glyph_change_resets_selection(self, run, glyph_i, state) -> None:
        selected = describe_point(glyph_i, "contours.0.nodes.0")
        previous = replace(
            state,
            glyph_name="o",
            app_state=AppState.SKELETON_POINT_SELECTED,
            selected_items=(selected,),
        )
        result = run(previous)
        assert result.state.app_state == AppState.DEFAULT
        assert result.state.selected_items == ()
        assert result.state.glyph_name == "i"

    def test_glyph_outside_view(self, run, state) -> None:
        far = replace(state, camera=Camera(zoom=1.0, tx=5000.0, ty=800.0))
        result = run(far)
        assert named(result, actions.STORE_VALUE)[-1].payload == {"glyphOutsideView": True}
        assert result.state.glyph_outside_view


class TestBoxSelection:
    """Tests for box selection."""

    def test_press_on_empty_starts_box(self, run, state) -> None:
        result = run(state, pointer=Point(600, 100), pointer_down=True, pressed=True)
        assert result.state.app_state == AppState.BOX_SELECTING
        assert result.state.box_start == Point(600, 100)

    def test_box_release_selects_points(self, run, state) -> None:
        first = run(state, pointer=Point(600, 100), pointer_down=True, pressed=True, time_ms=0)
        result = run(first.state, pointer=Point(50, 850), released=True, time_ms=100)

        assert result.state.app_state == AppState.POINTS_SELECTED
        assert len(result.state.selected_items) == 6
        assert result.state.box_start is None
        selection = named(result, actions.STORE_VALUE)[0].payload["selectedItems"]
        assert len(selection) == 6

    def test_box_drawn_while_selecting(self, run, state) -> None:
        first = run(state, pointer=Point(600, 100), pointer_down=True, pressed=True)
        result = run(first.state, pointer=Point(500, 200), pointer_down=True, time_ms=16)
        assert result.box == (Point(600, 700), Point(500, 600))

    def test_click_inside_contour_selects_it(self, run, state) -> None:
        first = run(state, pointer=Point(100, 550), pointer_down=True, pressed=True)
        result = run(first.state, pointer=Point(100, 550), released=True, time_ms=100)

        assert result.state.app_state == AppState.CONTOUR_SELECTED
        assert result.state.contour_selected == STEM
        assert result.state.contour_selected_index == 1

    def test_release_on_nothing_clears(self, run, state) -> None:
        first = run(state, pointer=Point(600, 100), pointer_down=True, pressed=True)
        result = run(first.state, pointer=Point(600, 100), released=True, time_ms=100)
        assert result.state.app_state == AppState.DEFAULT
        assert result.state.selected_items == ()


class TestContourPointDrag:
    """Tests for dragging a single point of a selected contour."""

    @pytest.fixture
    def contour_state(self, state: SessionState) -> SessionState:
        return replace(state, app_state=AppState.CONTOUR_SELECTED, contour_selected=STEM)

    def test_full_drag(self, run, contour_state) -> None:
        pressed = run(contour_state, pointer=Point(100, 300), pointer_down=True, pressed=True)
        assert pressed.state.app_state == AppState.DRAGGING_CONTOUR_POINT
        assert pressed.state.drag_start == Point(100, 500)
        assert pressed.state.dragging_not_started
        assert named(pressed, actions.CHANGE_GLYPH_NODE_MANUALLY) == []

        moved = run(pressed.state, pointer=Point(120, 280), pointer_down=True, time_ms=16)
        edits = named(moved, actions.CHANGE_GLYPH_NODE_MANUALLY)
        assert len(edits) == 1
        assert edits[0].payload["changes"] == pytest.approx(
            {"contours.0.nodes.1.x": 20, "contours.0.nodes.1.y": 20}
        )
        assert moved.edited == (("contours.0.nodes.1", 2),)

        released = run(moved.state, pointer=Point(120, 280), released=True, time_ms=32)
        assert released.state.app_state == AppState.SKELETON_POINT_SELECTED
        flush = named(released, actions.CHANGE_GLYPH_NODE_MANUALLY)
        assert flush[0].payload == {
            "changes": {},
            "glyphName": "i",
            "label": actions.MANUAL_EDITION_LABEL,
            "force": True,
        }

    def test_below_threshold_no_edit(self, run, contour_state) -> None:
        pressed = run(contour_state, pointer=Point(100, 300), pointer_down=True, pressed=True)
        moved = run(pressed.state, pointer=Point(103, 298), pointer_down=True, time_ms=16)
        assert named(moved, actions.CHANGE_GLYPH_NODE_MANUALLY) == []
        assert moved.state.dragging_not_started

    @pytest.mark.parametrize(("x", "edits"), [(105.9, 0), (106, 1)])
    def test_drag_threshold_boundary(self, run, contour_state, x: float, edits: int) -> None:
        pressed = run(contour_state, pointer=Point(100, 300), pointer_down=True, pressed=True)
        moved = run(pressed.state, pointer=Point(x, 300), pointer_down=True, time_ms=16)
        assert len(named(moved, actions.CHANGE_GLYPH_NODE_MANUALLY)) == edits

    def test_direction_lock(self, run, contour_state) -> None:
        pressed = run(contour_state, pointer=Point(100, 300), pointer_down=True, pressed=True)
        moved = run(pressed.state, pointer=Point(130, 295), pointer_down=True, time_ms=16)
        assert moved.state.directional_axis is Axis.X

        locked = run(
            moved.state,
            pointer=Point(140, 280),
            pointer_down=True,
            modifiers=Modifiers.SHIFT,
            time_ms=32,
        )
        changes = named(locked, actions.CHANGE_GLYPH_NODE_MANUALLY)[0].payload["changes"]
        assert changes == pytest.approx({"contours.0.nodes.1.x": 40, "contours.0.nodes.1.y": 0})

    def test_press_on_contour_drags_contour(self, run, contour_state) -> None:
        pressed = run(contour_state, pointer=Point(100, 550), pointer_down=True, pressed=True)
        assert pressed.state.app_state == AppState.DRAGGING_CONTOUR

        released = run(pressed.state, pointer=Point(110, 550), released=True, time_ms=16)
        assert released.state.app_state == AppState.CONTOUR_SELECTED
        assert named(released, actions.CHANGE_GLYPH_NODE_MANUALLY) == []

    def test_press_elsewhere_starts_box(self, run, contour_state) -> None:
        pressed = run(contour_state, pointer=Point(600, 100), pointer_down=True, pressed=True)
        assert pressed.state.app_state == AppState.BOX_SELECTING
        assert pressed.state.contour_selected is None


class TestMultiPointDrag:
    """Tests for dragging a box selection."""

    @pytest.fixture
    def points_state(self, state: SessionState, tester, glyph_i) -> SessionState:
        selected = tuple(tester.box_items(glyph_i, CAMERA, Point(0, 0), Point(1024, 850)))
        return replace(state, app_state=AppState.POINTS_SELECTED, selected_items=selected)

    def test_drag_translates_selection(self, run, points_state, constructor) -> None:
        assert len(points_state.selected_items) == 6
        pressed = run(points_state, pointer=Point(100, 800), pointer_down=True, pressed=True)
        assert pressed.state.app_state == AppState.DRAGGING_POINTS

        moved = run(pressed.state, pointer=Point(100, 780), pointer_down=True, time_ms=16)
        edits = named(moved, actions.CHANGE_GLYPH_NODE_MANUALLY)
        # Outline nodes follow their skeleton node
        assert len(edits) == 2
        changes = {**edits[0].payload["changes"], **edits[1].payload["changes"]}
        assert changes == pytest.approx(
            {
                "contours.0.nodes.0.x": 0,
                "contours.0.nodes.0.y": 20,
                "contours.0.nodes.1.x": 0,
                "contours.0.nodes.1.y": 20,
            }
        )

        rebuilt = constructor.construct_glyph("i", {MANUAL_CHANGES: {"i": changes}})
        bottom = rebuilt.contours[0].nodes[0]
        assert sorted((node.x, node.y) for node in bottom.expanded_to) == [
            pytest.approx((60, 20)),
            pytest.approx((140, 20)),
        ]
        assert bottom.expand.width == pytest.approx(80)
        assert bottom.expand.angle == pytest.approx(0)

        released = run(moved.state, pointer=Point(100, 780), released=True, time_ms=32)
        assert released.state.app_state == AppState.POINTS_SELECTED

    def test_drag_starts_from_current_positions(self, run, points_state, constructor) -> None:
        moved_glyph = constructor.construct_glyph(
            "i", {MANUAL_CHANGES: {"i": {"contours.0.nodes.0.y": 20, "contours.0.nodes.1.y": 20}}}
        )
        pressed = run(
            points_state, glyph=moved_glyph, pointer=Point(100, 780), pointer_down=True, pressed=True
        )
        assert pressed.state.app_state == AppState.DRAGGING_POINTS

        moved = run(pressed.state, glyph=moved_glyph, pointer=Point(100, 760), pointer_down=True, time_ms=16)
        changes = named(moved, actions.CHANGE_GLYPH_NODE_MANUALLY)[0].payload["changes"]
        assert changes["contours.0.nodes.0.y"] == pytest.approx(40)

    def test_nudge_moves_skeleton_only(self, run, points_state) -> None:
        result = run(
            points_state,
            keys_pressed=frozenset({RIGHT_ARROW}),
            keys_down=frozenset({RIGHT_ARROW}),
        )
        edits = named(result, actions.CHANGE_GLYPH_NODE_MANUALLY)
        assert [set(edit.payload["changes"]) for edit in edits] == [
            {"contours.0.nodes.0.x", "contours.0.nodes.0.y"},
            {"contours.0.nodes.1.x", "contours.0.nodes.1.y"},
        ]

    def test_press_outside_selection_starts_box(self, run, state, glyph_i) -> None:
        selected = (describe_point(glyph_i, "contours.0.nodes.1"),)
        points_state = replace(state, app_state=AppState.POINTS_SELECTED, selected_items=selected)
        pressed = run(points_state, pointer=Point(100, 800), pointer_down=True, pressed=True)
        assert pressed.state.app_state == AppState.BOX_SELECTING
        assert pressed.state.selected_items == ()


class TestSelectedPoint:
    """Tests for nudges, escape and dependency links on a selected point."""

    @pytest.fixture
    def selected_state(self, state: SessionState, glyph_i) -> SessionState:
        return replace(
            state,
            app_state=AppState.SKELETON_POINT_SELECTED,
            selected_items=(describe_point(glyph_i, "contours.0.nodes.1"),),
            contour_selected=STEM,
        )

    def test_arrow_nudge(self, run, selected_state) -> None:
        result = run(
            selected_state,
            keys_pressed=frozenset({RIGHT_ARROW}),
            keys_down=frozenset({RIGHT_ARROW}),
        )
        changes = named(result, actions.CHANGE_GLYPH_NODE_MANUALLY)[0].payload["changes"]
        assert changes == pytest.approx({"contours.0.nodes.1.x": 1, "contours.0.nodes.1.y": 0})

    def test_large_nudge(self, run, selected_state) -> None:
        result = run(
            selected_state,
            keys_pressed=frozenset({RIGHT_ARROW}),
            keys_down=frozenset({RIGHT_ARROW}),
            modifiers=Modifiers.SHIFT,
        )
        changes = named(result, actions.CHANGE_GLYPH_NODE_MANUALLY)[0].payload["changes"]
        assert changes["contours.0.nodes.1.x"] == pytest.approx(10)

    def test_escape_resets_selection(self, run, selected_state) -> None:
        result = run(selected_state, keys_pressed=frozenset({ESCAPE}), keys_down=frozenset({ESCAPE}))
        reset = named(result, actions.RESET_GLYPH_POINTS_MANUALLY)
        assert reset[0].payload["glyphName"] == "i"
        assert reset[0].payload["unicode"] == 105
        assert reset[0].payload["points"][0]["id"] == "contours.0.nodes.1"

    def test_dependency_links(self, run, selected_state) -> None:
        result = run(selected_state, dependencies=True)
        assert result.dependency_links == (
            (NodePath.parse("contours.0.nodes.0"), NodePath.parse("contours.0.nodes.1")),
        )

    def test_dependency_links_hidden(self, run, selected_state) -> None:
        assert run(selected_state).dependency_links == ()


class TestSpacing:
    """Tests for side bearing drags."""

    def test_right_spacing_drag(self, run, state) -> None:
        pressed = run(state, pointer=Point(180, 100), pointer_down=True, pressed=True)
        assert pressed.state.app_state == AppState.DRAGGING_SPACING
        assert pressed.cursor == "ew-resize"

        moved = run(pressed.state, pointer=Point(200, 100), pointer_down=True, time_ms=16)
        spacing = named(moved, actions.CHANGE_LETTER_SPACING)
        assert spacing[0].payload == {"value": pytest.approx(20), "side": "right", "letter": "i"}

        released = run(moved.state, pointer=Point(200, 100), released=True, time_ms=32)
        assert released.state.app_state == AppState.SPACING_SELECTED

    def test_left_spacing_drag_pans_camera(self, run, state) -> None:
        pressed = run(state, pointer=Point(0, 100), pointer_down=True, pressed=True)
        moved = run(pressed.state, pointer=Point(-10, 100), pointer_down=True, time_ms=16)

        assert named(moved, actions.CHANGE_LETTER_SPACING)[0].payload["value"] == pytest.approx(10)
        assert moved.state.camera.tx == pytest.approx(-10)


class TestCamera:
    """Tests for panning and zooming."""

    def test_move_mode_pans(self, run, state) -> None:
        result = run(
            state, mode=CanvasMode.MOVE, pointer_down=True, delta=Point(10, 5), pointer=Point(300, 300)
        )
        assert result.state.app_state == AppState.MOVING
        assert (result.state.camera.tx, result.state.camera.ty) == (10, 805)
        assert named(result, actions.STORE_VALUE)[0].payload["glyphViewMatrix"]["t"] == {"x": 10, "y": 805}

    def test_wheel_zooms_about_pointer(self, run, state) -> None:
        result = run(state, pointer=Point(100, 800), wheel=100.0)
        assert AppState.ZOOMING in result.state.app_state
        assert result.state.camera.zoom == pytest.approx(1.1)
        anchor = result.state.camera.to_screen(Point(100, 0))
        assert (anchor.x, anchor.y) == pytest.approx((100, 800))

        settled = run(result.state, pointer=Point(100, 800), time_ms=16)
        assert AppState.ZOOMING not in settled.state.app_state

    def test_double_click_resets_view(self, run, state) -> None:
        armed = replace(state, double_click_deadline=500.0)
        result = run(armed, pointer=Point(600, 100), pointer_down=True, pressed=True, time_ms=100)
        assert result.state.camera.zoom == pytest.approx(0.5)
        assert result.state.app_state == AppState.DEFAULT
        assert result.state.double_click_deadline is None

    def test_single_click_arms_double_click(self, run, state) -> None:
        result = run(state, pointer=Point(600, 100), pointer_down=True, pressed=True, time_ms=100)
        assert result.state.double_click_deadline == pytest.approx(500)

    def test_pan_key(self, run, state) -> None:
        held = run(state, keys_pressed=frozenset({PAN}), keys_down=frozenset({PAN}))
        assert held.state.mode is CanvasMode.MOVE
        assert held.state.previous_mode is CanvasMode.SELECT_POINTS
        assert named(held, actions.STORE_VALUE)[0].payload == {"canvasMode": "move"}

        released = run(held.state, keys_released=frozenset({PAN}), time_ms=16)
        assert released.state.mode is CanvasMode.SELECT_POINTS
        assert released.state.previous_mode is None
        assert named(released, actions.STORE_VALUE)[0].payload == {"canvasMode": "select-points"}

    def test_preview_restores_camera(self, run, state) -> None:
        held = run(state, keys_pressed=frozenset({PREVIEW}), keys_down=frozenset({PREVIEW}))
        assert held.preview
        assert held.state.camera.zoom == pytest.approx(0.5)

        released = run(held.state, keys_released=frozenset({PREVIEW}), time_ms=16)
        assert not released.preview
        assert released.state.camera == CAMERA


class TestComponents:
    """Tests for component mode."""

    @pytest.fixture
    def glyph_j(self, constructor):
        return constructor.construct_glyph("j", {})

    @pytest.fixture
    def j_state(self, state: SessionState) -> SessionState:
        return replace(state, glyph_name="j", mode=CanvasMode.COMPONENTS)

    def test_hover(self, run, j_state, glyph_j) -> None:
        result = run(j_state, glyph=glyph_j, mode=CanvasMode.COMPONENTS, pointer=Point(100, 180))
        assert result.state.app_state == AppState.COMPONENT_HOVERED
        assert result.state.hovered_component.component_id == "dot"

    def test_hover_ends(self, run, j_state, glyph_j) -> None:
        hovered = run(j_state, glyph=glyph_j, mode=CanvasMode.COMPONENTS, pointer=Point(100, 180))
        result = run(
            hovered.state, glyph=glyph_j, mode=CanvasMode.COMPONENTS, pointer=Point(600, 100), time_ms=16
        )
        assert result.state.app_state == AppState.DEFAULT
        assert result.state.hovered_component is None

    def test_menu_choice(self, run, j_state, glyph_j, tester) -> None:
        entry = ComponentMenuItem(
            type=ItemType.COMPONENT_MENU_ITEM, id="dot.alt", component_id="dot", base_id="dot.alt"
        )
        tester.set_menu([(entry, Point(500, 500), 20.0)])
        result = run(
            j_state, glyph=glyph_j, mode=CanvasMode.COMPONENTS, pointer=Point(500, 500), released=True
        )
        assert named(result, actions.CHANGE_COMPONENT)[0].payload == {
            "glyph": "j",
            "id": "dot",
            "name": "dot.alt",
        }

    def test_menu_class_choice(self, run, j_state, glyph_j, tester) -> None:
        entry = ComponentMenuItem(
            type=ItemType.COMPONENT_MENU_ITEM_CLASS,
            id="dots:dot.alt",
            component_id="dot",
            base_id="dot.alt",
            component_class="dots",
        )
        tester.set_menu([(entry, Point(500, 500), 20.0)])
        result = run(
            j_state, glyph=glyph_j, mode=CanvasMode.COMPONENTS, pointer=Point(500, 500), released=True
        )
        assert named(result, actions.CHANGE_COMPONENT_CLASS)[0].payload == {
            "componentClass": "dots",
            "name": "dot.alt",
        }

    def test_menu_hover(self, run, j_state, glyph_j, tester) -> None:
        entry = ComponentMenuItem(type=ItemType.COMPONENT_MENU_ITEM_CENTER, id="center", component_id="dot")
        tester.set_menu([(entry, Point(500, 500), 20.0)])
        result = run(j_state, glyph=glyph_j, mode=CanvasMode.COMPONENTS, pointer=Point(500, 500))
        assert result.state.app_state == AppState.COMPONENT_MENU_HOVERED
