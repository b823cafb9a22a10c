"""Tests for constraint-preserving edits."""

import math
from dataclasses import replace

import pytest

from parafont.core import FontConstructor
from parafont.core.construction import MANUAL_CHANGES
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
from parafont.domain import (
    ConstructedGlyph,
    ContourItem,
    FontSource,
    ItemType,
    NodePath,
    Point,
    ResolvedTransform,
    Side,
    SkeletonItem,
    SpacingItem,
)
from parafont.domain import actions
from parafont.interaction import describe_point

LEFT = "contours.0.nodes.0.expanded_to.0"
RIGHT = "contours.0.nodes.0.expanded_to.1"


def approx_changes(changes: dict[str, float]):
    return pytest.approx(changes, abs=1e-9)


class TestHandleModification:
    """Tests for dragging bezier handles."""

    def test_smooth_parallel_drag(self, glyph_s) -> None:
        item = describe_point(glyph_s, f"{LEFT}.out")
        changes = handle_modification(glyph_s, item, Point(120, 20))

        assert changes == approx_changes(
            {
                f"{LEFT}.out.x": 20,
                f"{LEFT}.out.y": 20,
                f"{LEFT}.in.x": -20,
                f"{LEFT}.in.y": -20,
                f"{RIGHT}.in.x": 20,
                f"{RIGHT}.in.y": 20,
                f"{RIGHT}.out.x": -20,
                f"{RIGHT}.out.y": -20,
            }
        )

    def test_unsmooth_keeps_opposite_handles(self, glyph_s) -> None:
        item = describe_point(glyph_s, f"{LEFT}.out")
        changes = handle_modification(glyph_s, item, Point(120, 20), unsmooth=True)

        assert changes == approx_changes(
            {
                f"{LEFT}.out.x": 20,
                f"{LEFT}.out.y": 20,
                f"{RIGHT}.in.x": 20,
                f"{RIGHT}.in.y": 20,
            }
        )

    def test_unparallel_keeps_sibling(self, glyph_s) -> None:
        item = describe_point(glyph_s, f"{LEFT}.out")
        changes = handle_modification(glyph_s, item, Point(120, 20), unparallel=True)

        assert set(changes) == {
            f"{LEFT}.out.x",
            f"{LEFT}.out.y",
            f"{LEFT}.in.x",
            f"{LEFT}.in.y",
        }

    def test_drag_then_rebuild_moves_handle(self, constructor: FontConstructor, glyph_s) -> None:
        item = describe_point(glyph_s, f"{LEFT}.out")
        changes = handle_modification(glyph_s, item, Point(120, 20))

        rebuilt = constructor.construct_glyph("s", {MANUAL_CHANGES: {"s": changes}})
        handle = rebuilt.get(f"{LEFT}.out")
        assert (handle.x, handle.y) == pytest.approx((120, 20))
        sibling = rebuilt.get(f"{RIGHT}.in")
        assert (sibling.x, sibling.y) == pytest.approx((220, 20))

    def test_unresolved_handle(self, glyph_s) -> None:
        item = describe_point(glyph_s, f"{LEFT}.out")
        glyph_s.contours.clear()
        assert handle_modification(glyph_s, item, Point(0, 0)) is None


def variant_s(source_data: dict, transforms: list[dict] | None = None, **node) -> ConstructedGlyph:
    """Glyph "s" with changed skeleton node fields or glyph transforms."""
    glyph = source_data["glyphs"]["s"]
    glyph["contours"][0]["nodes"][0].update(node)
    if transforms:
        glyph["transforms"] = transforms
    return FontConstructor(FontSource.from_dict(source_data)).construct_glyph("s", {})


class TestZeroLengthHandles:
    """Tests for handles sitting on their node."""

    def test_dragged_handle_on_node_keeps_opposite_length(self, source_data) -> None:
        glyph = variant_s(source_data, handle_out={"x": 0, "y": 0})
        item = describe_point(glyph, f"{LEFT}.out")
        changes = handle_modification(glyph, item, Point(100, 50), unparallel=True)

        # Tension falls back to 1: the opposite handle keeps its 100 units
        opposite = Point(100 + changes[f"{LEFT}.in.x"], 200 + changes[f"{LEFT}.in.y"])
        assert math.dist((opposite.x, opposite.y), (100, 100)) == pytest.approx(100)

    def test_opposite_handle_on_node_takes_dragged_length(self, source_data) -> None:
        glyph = variant_s(source_data, handle_in={"x": 0, "y": 0})
        item = describe_point(glyph, f"{LEFT}.out")
        changes = handle_modification(glyph, item, Point(100, -50), unparallel=True)

        assert changes == approx_changes(
            {
                f"{LEFT}.out.x": 0,
                f"{LEFT}.out.y": -50,
                f"{LEFT}.in.x": 150,
                f"{LEFT}.in.y": 0,
            }
        )


class TestScaledHandleModification:
    """Tests for handle edits under a non-uniform scale."""

    TRANSFORMS = [{"name": "scaleX", "param": 2}, {"name": "scaleY", "param": 4}]

    def test_parallel_writes_use_axis_factors(self, source_data) -> None:
        glyph = variant_s(source_data, transforms=self.TRANSFORMS)
        item = describe_point(glyph, f"{LEFT}.out")
        assert (item.center.x, item.center.y) == pytest.approx((200, 0))

        changes = handle_modification(glyph, item, Point(240, 40))

        # World deltas of (+-40, +-40) stored as local (+-20, +-10)
        assert changes == approx_changes(
            {
                f"{LEFT}.out.x": 20,
                f"{LEFT}.out.y": 10,
                f"{LEFT}.in.x": -20,
                f"{LEFT}.in.y": -10,
                f"{RIGHT}.in.x": 20,
                f"{RIGHT}.in.y": 10,
                f"{RIGHT}.out.x": -20,
                f"{RIGHT}.out.y": -10,
            }
        )

    def test_rebuilt_parallel_handle_mirrors_drag(self, source_data) -> None:
        source_data["glyphs"]["s"]["transforms"] = self.TRANSFORMS
        constructor = FontConstructor(FontSource.from_dict(source_data))
        glyph = constructor.construct_glyph("s", {})
        item = describe_point(glyph, f"{LEFT}.out")
        changes = handle_modification(glyph, item, Point(240, 40))

        rebuilt = constructor.construct_glyph("s", {MANUAL_CHANGES: {"s": changes}})
        dragged = rebuilt.get(f"{LEFT}.out")
        sibling = rebuilt.get(f"{RIGHT}.in")
        assert (dragged.x, dragged.y) == pytest.approx((240, 40))
        assert (sibling.x, sibling.y) == pytest.approx((440, 40))


class TestOnCurveModification:
    """Tests for width and angle edits."""

    def test_width_and_angle(self, glyph_s) -> None:
        item = describe_point(glyph_s, LEFT)
        changes = on_curve_modification(glyph_s, item, Point(75, 100))

        assert changes == approx_changes(
            {"contours.0.nodes.0.expand.width": 1.25, "contours.0.nodes.0.expand.angle": 0.0}
        )

    def test_width_only(self, glyph_s) -> None:
        item = describe_point(glyph_s, LEFT)
        changes = on_curve_modification(glyph_s, item, Point(75, 100), OnCurveMode.WIDTH)
        assert set(changes) == {"contours.0.nodes.0.expand.width"}

    def test_angle_only(self, glyph_s) -> None:
        item = describe_point(glyph_s, LEFT)
        changes = on_curve_modification(glyph_s, item, Point(150, 150), OnCurveMode.ANGLE)
        # Pointer straight above the skeleton node: quarter turn back from pi
        assert changes == approx_changes({"contours.0.nodes.0.expand.angle": -1.5707963267948966})

    def test_zero_base_width_skipped(self, glyph_s) -> None:
        item = describe_point(glyph_s, LEFT)
        zero = replace(item, base_width=0.0)
        assert on_curve_modification(glyph_s, zero, Point(75, 100)) is None


class TestSkeletonModification:
    """Tests for skeleton node moves."""

    def test_position(self, glyph_s) -> None:
        item = describe_point(glyph_s, "contours.0.nodes.0")
        changes = skeleton_position_modification(glyph_s, item, Point(160, 90))
        assert changes == approx_changes({"contours.0.nodes.0.x": 10, "contours.0.nodes.0.y": -10})

    def test_position_under_scale(self, glyph_s) -> None:
        item = SkeletonItem(
            type=ItemType.CONTOUR_NODE,
            id=NodePath.parse("contours.0.nodes.0"),
            base=Point(150, 100),
            center=Point(150, 100),
            transforms=(ResolvedTransform("scaleX", 2),),
        )
        changes = skeleton_position_modification(glyph_s, item, Point(170, 100))
        assert changes["contours.0.nodes.0.x"] == pytest.approx(10)

    def test_distribution(self, glyph_s) -> None:
        item = describe_point(glyph_s, "contours.0.nodes.0")
        changes = skeleton_distribution_modification(glyph_s, item, Point(125, 130))
        assert changes == approx_changes(
            {
                "contours.0.nodes.0.expand.distr": -0.25,
                "contours.0.nodes.0.x": -25,
                "contours.0.nodes.0.y": 0,
            }
        )

    def test_distribution_keeps_outline(self, constructor: FontConstructor, glyph_s) -> None:
        item = describe_point(glyph_s, "contours.0.nodes.0")
        changes = skeleton_distribution_modification(glyph_s, item, Point(125, 130))
        rebuilt = constructor.construct_glyph("s", {MANUAL_CHANGES: {"s": changes}})
        left, right = rebuilt.contours[0].nodes[0].expanded_to
        assert (left.x, left.y) == pytest.approx((100, 100))
        assert (right.x, right.y) == pytest.approx((200, 100))

    def test_distribution_is_clamped(self, glyph_s) -> None:
        item = describe_point(glyph_s, "contours.0.nodes.0")
        changes = skeleton_distribution_modification(glyph_s, item, Point(500, 100))
        assert changes["contours.0.nodes.0.expand.distr"] == pytest.approx(0.5)


class TestSpacing:
    """Tests for side bearing drags."""

    def test_left(self, glyph_i) -> None:
        action = change_spacing(glyph_i, SpacingItem(Side.LEFT, Point(0, 0)), Point(-10, 0))
        assert action.name == actions.CHANGE_LETTER_SPACING
        assert action.payload == {"value": pytest.approx(10), "side": "left", "letter": "i"}

    def test_right(self, glyph_i) -> None:
        action = change_spacing(glyph_i, SpacingItem(Side.RIGHT, Point(180, 0)), Point(200, 0))
        assert action.payload["value"] == pytest.approx(20)
        assert action.payload["side"] == "right"


class TestApplyEdit:
    """Tests for edit dispatch over item variants."""

    def test_handle_edit_action(self, glyph_s) -> None:
        item = describe_point(glyph_s, f"{LEFT}.out")
        action = apply_edit(glyph_s, item, Point(120, 20))
        assert action.name == actions.CHANGE_GLYPH_NODE_MANUALLY
        assert action.payload["glyphName"] == "s"
        assert len(action.payload["changes"]) == 8

    def test_distribution_modifier(self, glyph_s) -> None:
        item = describe_point(glyph_s, "contours.0.nodes.0")
        action = apply_edit(glyph_s, item, Point(125, 130), EditModifiers(distribution=True))
        assert "contours.0.nodes.0.expand.distr" in action.payload["changes"]

    def test_contour_items_not_editable(self, glyph_s) -> None:
        item = ContourItem(type=ItemType.GLYPH_CONTOUR, id=NodePath.of("contours", 0))
        assert apply_edit(glyph_s, item, Point(0, 0)) is None

    def test_spacing_edit(self, glyph_i) -> None:
        action = apply_edit(glyph_i, SpacingItem(Side.LEFT, Point(0, 0)), Point(-5, 0))
        assert action.name == actions.CHANGE_LETTER_SPACING

    def test_alternate_edits_stored_under_base(self, font_source) -> None:
        font_source.glyphs["i.alt"] = replace(
            font_source.glyphs["i"], name="i.alt", unicode=None, base="i"
        )
        glyph = FontConstructor(font_source).construct_glyph("i.alt", {})
        item = describe_point(glyph, "contours.0.nodes.0")
        action = apply_edit(glyph, item, Point(110, 0))
        assert action.payload["glyphName"] == "i"
