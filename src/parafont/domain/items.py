"""Interactive item descriptors.

Hit testing produces one descriptor per entity under the pointer. Each
variant carries exactly the data its edit operation needs; the edit engine
dispatches with a single match over the variant.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

from parafont.domain.contour import Point, ResolvedTransform
from parafont.domain.path import NodePath


class ItemType(IntEnum):
    """Kind of an interactive item.

    Point kinds come first so ``is_point`` is a single comparison.
    """

    NODE = 0
    NODE_SKELETON = 1
    NODE_IN = 2
    NODE_OUT = 3
    CONTOUR_NODE = 4
    CONTOUR_NODE_IN = 5
    CONTOUR_NODE_OUT = 6
    SPACING_HANDLE = 7
    GLYPH_CONTOUR = 8
    GLYPH_COMPONENT_CONTOUR = 9
    COMPONENT_CHOICE = 10
    COMPONENT_NONE_CHOICE = 11
    COMPONENT_MENU_ITEM = 12
    COMPONENT_MENU_ITEM_CLASS = 13
    COMPONENT_MENU_ITEM_CENTER = 14

    @property
    def is_point(self) -> bool:
        return self <= ItemType.CONTOUR_NODE_OUT


class Side(Enum):
    """Side of a spacing handle."""

    LEFT = "left"
    RIGHT = "right"


class _Item:
    """Shared behaviour of item variants."""

    id: Any
    type: ItemType

    @property
    def key(self) -> str:
        """Stable string identity of the item."""
        return str(self.id)

    def snapshot(self) -> dict[str, Any]:
        """Selection entry stored in the UI store."""
        parent = getattr(self, "parent_id", None)
        address = getattr(self, "modif_address", None)
        return {
            "type": self.type.name,
            "id": str(self.id),
            "data": {
                "parentId": str(parent) if parent is not None else None,
                "modifAddress": str(address) if address is not None else None,
            },
        }


@dataclass(frozen=True)
class OnCurveItem(_Item):
    """An outline node produced by a skeleton node.

    Attributes:
        id: Path of the outline node (``...nodes.j.expanded_to.k``)
        parent_id: Path of the skeleton node
        opposite_id: Path of the other outline node of the same skeleton node
        base_width: Formula width of the skeleton node
        base_angle: Current direction from the skeleton node to this node
        angle_offset: Current angle override of the skeleton node
        skeleton: World position of the skeleton node
        center: World position of the outline node
        transforms: Transform chain of the skeleton node
    """

    id: NodePath
    parent_id: NodePath
    opposite_id: NodePath
    base_width: float
    base_angle: float
    angle_offset: float
    skeleton: Point
    center: Point
    transforms: tuple[ResolvedTransform, ...] = ()

    @property
    def type(self) -> ItemType:  # type: ignore[override]
        return ItemType.NODE

    @property
    def modif_address(self) -> NodePath:
        """Path receiving width and angle overrides."""
        return self.parent_id / "expand"


@dataclass(frozen=True)
class HandleItem(_Item):
    """A bezier handle of an outline or plain contour node.

    Attributes:
        type: NODE_IN, NODE_OUT, CONTOUR_NODE_IN or CONTOUR_NODE_OUT
        id: Path of the handle (``<parent>.in`` or ``<parent>.out``)
        parent_id: Path of the node owning the handle
        parallel_id: Path of the parallel sibling node, if any
        center: World position of the handle
        transforms: Transform chain of the owning node
    """

    type: ItemType
    id: NodePath
    parent_id: NodePath
    center: Point
    parallel_id: NodePath | None = None
    transforms: tuple[ResolvedTransform, ...] = ()

    @property
    def is_in(self) -> bool:
        return self.type in (ItemType.NODE_IN, ItemType.CONTOUR_NODE_IN)

    @property
    def direction(self) -> str:
        return "in" if self.is_in else "out"

    @property
    def opposite_direction(self) -> str:
        return "out" if self.is_in else "in"

    @property
    def modif_address(self) -> NodePath:
        return self.parent_id / self.direction


@dataclass(frozen=True)
class SkeletonItem(_Item):
    """A skeleton node or a plain contour node moved by position.

    Attributes:
        type: NODE_SKELETON or CONTOUR_NODE
        id: Path of the node
        base: World position without the node's own override
        center: Current world position
        expanded_to: World positions of the two outline nodes (skeleton only)
        width: Distance between the outline nodes
        base_distr: Formula distribution of the node
        transforms: Transform chain of the node
    """

    type: ItemType
    id: NodePath
    base: Point
    center: Point
    expanded_to: tuple[Point, Point] | None = None
    width: float = 0.0
    base_distr: float = 0.0
    transforms: tuple[ResolvedTransform, ...] = ()

    @property
    def modif_address(self) -> NodePath:
        return self.id


@dataclass(frozen=True)
class SpacingItem(_Item):
    """A side bearing handle.

    Attributes:
        side: Left or right bearing
        center: World position of the handle
    """

    side: Side
    center: Point

    @property
    def type(self) -> ItemType:  # type: ignore[override]
        return ItemType.SPACING_HANDLE

    @property
    def id(self) -> str:  # type: ignore[override]
        return "spacingLeft" if self.side is Side.LEFT else "spacingRight"


@dataclass(frozen=True)
class ContourItem(_Item):
    """A glyph or component outline.

    Attributes:
        type: GLYPH_CONTOUR or GLYPH_COMPONENT_CONTOUR
        id: Path of the contour
        component_index: Index of the owning component, None for the glyph itself
    """

    type: ItemType
    id: NodePath
    component_index: int | None = None


@dataclass(frozen=True)
class ComponentItem(_Item):
    """A component hovered in component mode.

    Attributes:
        type: COMPONENT_CHOICE or COMPONENT_NONE_CHOICE
        id: Path of the component
        component_id: Slot identifier
        bases: Glyph names the slot can switch between
    """

    type: ItemType
    id: NodePath
    component_id: str
    bases: tuple[str, ...] = ()


@dataclass(frozen=True)
class ComponentMenuItem(_Item):
    """An entry of the component choice menu.

    Attributes:
        type: COMPONENT_MENU_ITEM, COMPONENT_MENU_ITEM_CLASS or COMPONENT_MENU_ITEM_CENTER
        id: Identifier of the entry
        component_id: Slot identifier
        base_id: Glyph name the entry selects
        component_class: Class the entry applies to (class entries)
    """

    type: ItemType
    id: str
    component_id: str
    base_id: str | None = None
    component_class: str | None = None


Item = (
    OnCurveItem
    | HandleItem
    | SkeletonItem
    | SpacingItem
    | ContourItem
    | ComponentItem
    | ComponentMenuItem
)


def filter_items(items: list[Item], *types: ItemType) -> list[Item]:
    """Keep the items of the given kinds, in order."""
    return [item for item in items if item.type in types]


def point_items(items: list[Item]) -> list[Item]:
    """Keep the point items (nodes and handles), in order."""
    return [item for item in items if item.type.is_point]
