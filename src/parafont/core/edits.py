"""Constraint-preserving edits.

Each operation takes the constructed glyph, the dragged item, a target
world-space position and the active modifiers, and computes a sparse set of
override changes (dotted path -> value). Nothing here mutates the glyph:
changes are submitted as one action and applied by the next construction
pass.

An operation that cannot resolve the points it needs returns None; the
caller skips the edit for this frame.
"""

import enum
from dataclasses import dataclass

from parafont.core.geometry import (
    add,
    angle_of,
    distance,
    dot,
    inverse_scale,
    length,
    normalize,
    polar,
    scale,
    subtract,
    to_local,
)
from parafont.domain import (
    Action,
    ConstructedGlyph,
    HandleItem,
    Item,
    ItemType,
    Node,
    OnCurveItem,
    Point,
    Side,
    SkeletonItem,
    SpacingItem,
)
from parafont.domain.actions import change_glyph_node_manually, change_letter_spacing

Changes = dict[str, float]


class OnCurveMode(enum.Flag):
    """Which components of an on-curve drag are written."""

    WIDTH = 1
    ANGLE = 2
    BOTH = WIDTH | ANGLE


@dataclass(frozen=True)
class EditModifiers:
    """Modifier state for one edit.

    Attributes:
        unsmooth: Do not keep the opposite handle collinear
        unparallel: Do not mirror the edit onto the parallel sibling
        on_curve: Components written by on-curve drags
        distribution: Move skeleton nodes along their expansion segment
    """

    unsmooth: bool = False
    unparallel: bool = False
    on_curve: OnCurveMode = OnCurveMode.BOTH
    distribution: bool = False


def _opposite_handle_vector(
    parent_ref: Node,
    own_parent: Node,
    new_pos: Point,
    handle_pos: Point,
    tension: float,
    is_in: bool,
    ref_length: float,
) -> Point:
    """Delta moving a handle of ``own_parent`` to mirror the dragged handle.

    The handle opposite to ``is_in`` is rotated by the angle the dragged
    handle turned around ``parent_ref`` and its length is scaled by
    ``tension``. A zero-length handle takes ``ref_length`` instead.
    """
    handle = own_parent.handle_out if is_in else own_parent.handle_in
    handle_base = handle.base
    own_point = own_parent.point

    relative_new = subtract(new_pos, parent_ref.point)
    relative_base = subtract(handle_pos, parent_ref.point)
    relative_opposite = subtract(handle_base, own_point)
    angle = angle_of(relative_opposite) + angle_of(relative_new) - angle_of(relative_base)

    handle_length = distance(handle_base, own_point)
    actual_length = ref_length if handle_length == 0 else handle_length * tension

    return subtract(add(own_point, polar(angle, actual_length)), handle_base)


def _write(changes: Changes, key_x: str, key_y: str, vector: Point, factors: tuple[float, float]) -> None:
    changes[key_x] = vector.x * factors[0]
    changes[key_y] = vector.y * factors[1]


def handle_modification(
    glyph: ConstructedGlyph,
    item: HandleItem,
    new_pos: Point,
    unsmooth: bool = False,
    unparallel: bool = False,
) -> Changes | None:
    """Move a bezier handle, keeping smoothness and parallel symmetry.

    Args:
        glyph: Constructed glyph
        item: Dragged handle
        new_pos: Requested world position of the handle
        unsmooth: Leave the opposite handle untouched
        unparallel: Leave the parallel sibling untouched

    Returns:
        Override changes, or None if the handle or its node cannot be resolved
    """
    handle = glyph.get(item.id)
    parent = glyph.get(item.parent_id)
    if handle is None or parent is None:
        return None

    handle_pos = handle.base
    factors = inverse_scale(item.transforms)
    direction = item.direction
    opposite = item.opposite_direction

    changes: Changes = {}
    _write(
        changes,
        item.parent_id.key(direction, "x"),
        item.parent_id.key(direction, "y"),
        subtract(new_pos, handle_pos),
        factors,
    )

    ref_length = distance(new_pos, parent.point)
    base_length = distance(handle_pos, parent.point)
    tension = ref_length / base_length if base_length else 1.0

    parallel = None
    if not unparallel and item.parallel_id is not None:
        parallel = glyph.get(item.parallel_id)

    if not unsmooth and parent.is_smooth():
        vector = _opposite_handle_vector(
            parent, parent, new_pos, handle_pos, tension, item.is_in, ref_length
        )
        _write(
            changes,
            item.parent_id.key(opposite, "x"),
            item.parent_id.key(opposite, "y"),
            vector,
            factors,
        )

        if parallel is not None:
            vector = _opposite_handle_vector(
                parent, parallel, new_pos, handle_pos, tension, not item.is_in, ref_length
            )
            _write(
                changes,
                item.parallel_id.key(direction, "x"),
                item.parallel_id.key(direction, "y"),
                vector,
                inverse_scale(parallel.transforms),
            )

    if parallel is not None:
        vector = _opposite_handle_vector(
            parent, parallel, new_pos, handle_pos, tension, item.is_in, ref_length
        )
        _write(
            changes,
            item.parallel_id.key(opposite, "x"),
            item.parallel_id.key(opposite, "y"),
            vector,
            inverse_scale(parallel.transforms),
        )

    return changes


def on_curve_modification(
    glyph: ConstructedGlyph,
    item: OnCurveItem,
    new_pos: Point,
    mode: OnCurveMode = OnCurveMode.BOTH,
) -> Changes | None:
    """Change width and/or angle of a skeleton node by dragging an outline node.

    Returns:
        Override changes, or None if the opposite node cannot be resolved or
        the formula width is zero
    """
    opposite = glyph.get(item.opposite_id)
    if opposite is None or item.base_width == 0:
        return None

    width_vector = to_local(subtract(opposite.point, new_pos), item.transforms)
    angle_vector = to_local(subtract(new_pos, item.skeleton), item.transforms)

    changes: Changes = {}
    if OnCurveMode.WIDTH in mode:
        changes[item.modif_address.key("width")] = length(width_vector) / item.base_width
    if OnCurveMode.ANGLE in mode:
        changes[item.modif_address.key("angle")] = (
            angle_of(angle_vector) - item.base_angle + item.angle_offset
        )
    return changes


def skeleton_position_modification(
    glyph: ConstructedGlyph, item: SkeletonItem, new_pos: Point
) -> Changes | None:
    """Move a skeleton or contour node to a new position."""
    if glyph.get(item.id) is None:
        return None

    vector = to_local(subtract(new_pos, item.base), item.transforms)
    return {item.modif_address.key("x"): vector.x, item.modif_address.key("y"): vector.y}


def skeleton_distribution_modification(
    glyph: ConstructedGlyph, item: SkeletonItem, new_pos: Point
) -> Changes | None:
    """Slide a skeleton node between its two outline nodes.

    The pointer is projected onto the segment joining the outline nodes and
    clamped to it, so the outline stays put while the distribution changes.

    Returns:
        Override changes, or None for a node without expansion or a zero width
    """
    if glyph.get(item.id) is None or item.expanded_to is None or item.width == 0:
        return None

    start, end = item.expanded_to
    direction = normalize(subtract(end, start))
    projection = min(max(dot(subtract(new_pos, start), direction), 0.0), item.width)
    vector = to_local(subtract(add(scale(direction, projection), start), item.base), item.transforms)

    return {
        item.modif_address.key("expand", "distr"): projection / item.width - item.base_distr,
        item.modif_address.key("x"): vector.x,
        item.modif_address.key("y"): vector.y,
    }


def change_spacing(glyph: ConstructedGlyph, item: SpacingItem, new_pos: Point) -> Action:
    """Letter spacing change for a dragged side bearing handle."""
    if item.side is Side.LEFT:
        value = glyph.spacing_left - glyph.base_spacing_left - new_pos.x
    else:
        value = new_pos.x - glyph.advance_width + glyph.spacing_right - glyph.base_spacing_right
    return change_letter_spacing(value, item.side.value, glyph.letter)


def apply_edit(
    glyph: ConstructedGlyph,
    item: Item,
    new_pos: Point,
    modifiers: EditModifiers | None = None,
) -> Action | None:
    """Compute the action for dragging an item to a position.

    Args:
        glyph: Constructed glyph
        item: Dragged item
        new_pos: Requested world position
        modifiers: Active modifiers

    Returns:
        The action to dispatch, or None when the edit is skipped
    """
    modifiers = modifiers or EditModifiers()

    match item:
        case SpacingItem():
            return change_spacing(glyph, item, new_pos)
        case HandleItem():
            contour_handle = item.type in (ItemType.CONTOUR_NODE_IN, ItemType.CONTOUR_NODE_OUT)
            changes = handle_modification(
                glyph,
                item,
                new_pos,
                unsmooth=modifiers.unsmooth,
                unparallel=modifiers.unparallel or contour_handle,
            )
        case OnCurveItem():
            changes = on_curve_modification(glyph, item, new_pos, modifiers.on_curve)
        case SkeletonItem() if modifiers.distribution:
            changes = skeleton_distribution_modification(glyph, item, new_pos)
        case SkeletonItem():
            changes = skeleton_position_modification(glyph, item, new_pos)
        case _:
            return None

    if not changes:
        return None
    return change_glyph_node_manually(changes, glyph.edit_name)
