"""Tests for hit testing of constructed glyphs."""

import math

import pytest

from parafont.config import InteractionConfig
from parafont.domain import (
    ComponentItem,
    ComponentMenuItem,
    ContourItem,
    HandleItem,
    ItemType,
    NodePath,
    OnCurveItem,
    Point,
    Side,
    SkeletonItem,
    SpacingItem,
)
from parafont.interaction import Camera, GlyphHitTester, describe_point, iter_point_items, spacing_items


@pytest.fixture
def camera() -> Camera:
    """Unit zoom camera with the baseline 800 px from the top."""
    return Camera(zoom=1.0, tx=0.0, ty=800.0)


@pytest.fixture
def tester() -> GlyphHitTester:
    return GlyphHitTester(InteractionConfig(hit_radius_px=6.0))


class TestPointItems:
    """Tests for item enumeration."""

    def test_skeleton_node_items(self, glyph_i) -> None:
        items = list(iter_point_items(glyph_i))
        kinds = [item.type for item in items[:7]]
        assert kinds == [
            ItemType.NODE_SKELETON,
            ItemType.NODE,
            ItemType.NODE_IN,
            ItemType.NODE_OUT,
            ItemType.NODE,
            ItemType.NODE_IN,
            ItemType.NODE_OUT,
        ]
        assert len(items) == 14

    def test_on_curve_descriptor(self, glyph_i) -> None:
        item = describe_point(glyph_i, "contours.0.nodes.1.expanded_to.1")
        assert isinstance(item, OnCurveItem)
        assert item.opposite_id == NodePath.parse("contours.0.nodes.1.expanded_to.0")
        assert item.parent_id == NodePath.parse("contours.0.nodes.1")
        assert item.base_width == 80
        assert item.base_angle == pytest.approx(math.pi)
        assert item.angle_offset == 0
        assert item.center == Point(60, 500)

    def test_handle_parallel_sibling(self, glyph_i) -> None:
        item = describe_point(glyph_i, "contours.0.nodes.0.expanded_to.0.in")
        assert isinstance(item, HandleItem)
        assert item.parallel_id == NodePath.parse("contours.0.nodes.0.expanded_to.1")

    def test_skeleton_descriptor(self, glyph_i) -> None:
        item = describe_point(glyph_i, "contours.0.nodes.0")
        assert isinstance(item, SkeletonItem)
        assert item.expanded_to == (Point(140, 0), Point(60, 0))
        assert item.width == 80
        assert item.base_distr == 0.5

    def test_component_points_prefixed(self, constructor) -> None:
        glyph = constructor.construct_glyph("j", {})
        item = describe_point(glyph, "components.0.contours.0.nodes.2")
        assert item.type is ItemType.CONTOUR_NODE
        assert item.center == Point(120, 640)

    def test_describe_missing(self, glyph_i) -> None:
        assert describe_point(glyph_i, "contours.5.nodes.0") is None

    def test_spacing_items(self, glyph_i) -> None:
        left, right = spacing_items(glyph_i)
        assert left.side is Side.LEFT
        assert right.center.x == pytest.approx(180)


class TestHotItems:
    """Tests for GlyphHitTester.hot_items."""

    def test_skeleton_node(self, tester, glyph_i, camera) -> None:
        hot = tester.hot_items(glyph_i, camera, Point(100, 800))
        assert hot[0].type is ItemType.NODE_SKELETON
        assert hot[0].id == NodePath.parse("contours.0.nodes.0")

    def test_closest_point_first(self, tester, glyph_i, camera) -> None:
        hot = tester.hot_items(glyph_i, camera, Point(139, 301))
        assert hot[0].type is ItemType.NODE
        assert hot[0].id == NodePath.parse("contours.0.nodes.1.expanded_to.0")

    def test_outside_radius(self, tester, glyph_i, camera) -> None:
        hot = tester.hot_items(glyph_i, camera, Point(100, 780))
        assert not [item for item in hot if item.type.is_point]

    def test_spacing_handle(self, tester, glyph_i, camera) -> None:
        hot = tester.hot_items(glyph_i, camera, Point(182, 100))
        assert hot == [SpacingItem(side=Side.RIGHT, center=Point(180.0, 0.0))]

    def test_contour_containment(self, tester, glyph_i, camera) -> None:
        hot = tester.hot_items(glyph_i, camera, Point(100, 550))
        assert hot == [ContourItem(type=ItemType.GLYPH_CONTOUR, id=NodePath.of("contours", 0))]

    def test_nothing(self, tester, glyph_i, camera) -> None:
        assert tester.hot_items(glyph_i, camera, Point(600, 100)) == []

    def test_component(self, tester, constructor, camera) -> None:
        glyph = constructor.construct_glyph("j", {})
        hot = tester.hot_items(glyph, camera, Point(100, 180))
        kinds = [item.type for item in hot]
        assert ItemType.GLYPH_COMPONENT_CONTOUR in kinds
        component = next(item for item in hot if isinstance(item, ComponentItem))
        assert component.component_id == "dot"
        assert component.bases == ("dot", "dot.alt")
        assert component.id == NodePath.of("components", 0)

    def test_menu_entries_first(self, tester, glyph_i, camera) -> None:
        entry = ComponentMenuItem(
            type=ItemType.COMPONENT_MENU_ITEM, id="dot.alt", component_id="dot", base_id="dot.alt"
        )
        tester.set_menu([(entry, Point(100, 550), 20.0)])
        hot = tester.hot_items(glyph_i, camera, Point(105, 555))
        assert hot[0] == entry


class TestBoxItems:
    """Tests for GlyphHitTester.box_items."""

    def test_box_selects_on_curve_and_skeleton(self, tester, glyph_i, camera) -> None:
        items = tester.box_items(glyph_i, camera, Point(0, 0), Point(1024, 850))
        kinds = {item.type for item in items}
        assert kinds == {ItemType.NODE, ItemType.NODE_SKELETON}
        assert len(items) == 6

    def test_box_partial(self, tester, glyph_i, camera) -> None:
        # Only the top node row (world y = 500)
        items = tester.box_items(glyph_i, camera, Point(0, 250), Point(1024, 350))
        assert {str(item.id) for item in items} == {
            "contours.0.nodes.1",
            "contours.0.nodes.1.expanded_to.0",
            "contours.0.nodes.1.expanded_to.1",
        }
