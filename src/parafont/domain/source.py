"""Font source models.

A font source is the parametric description a construction pass reads:
font-level attributes and parameters, plus per-glyph skeletons and contours
whose numeric fields are constant-or-formula values.

Key classes:
- TransformSource: One transform of a glyph or component chain
- NodeSource: A node with position, handles and optional expansion
- ContourSource: A skeleton or plain contour
- ComponentSource: A component slot with its candidate base glyphs
- GlyphSource: One glyph
- FontSource: The whole font
"""

from dataclasses import dataclass, field
from typing import Any

from parafont.domain.contour import NodeType
from parafont.domain.values import Literal, Value, constant_or_formula

FONTINFO_FIELDS = (
    "family_name",
    "version",
    "description",
    "ascender",
    "descender",
    "cap_height",
    "descendent_height",
)

TEXT_FONTINFO_FIELDS = frozenset({"family_name", "version", "description"})

TRANSFORM_NAMES = frozenset({"scaleX", "scaleY", "scale", "translateX", "translateY", "rotate"})

ZERO = Literal(0.0)


@dataclass(frozen=True)
class TransformSource:
    """Transform with a constant-or-formula parameter."""

    name: str
    param: Value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransformSource":
        name = data["name"]
        if name not in TRANSFORM_NAMES:
            raise ValueError(f"unknown transform '{name}'")
        return cls(name=name, param=constant_or_formula(data["param"]))


@dataclass(frozen=True)
class HandleSource:
    """Handle offset from its node."""

    x: Value = ZERO
    y: Value = ZERO

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "HandleSource":
        if not data:
            return cls()
        return cls(
            x=constant_or_formula(data.get("x", 0.0)),
            y=constant_or_formula(data.get("y", 0.0)),
        )


@dataclass(frozen=True)
class ExpandSource:
    """Expansion of a skeleton node into two outline nodes.

    Attributes:
        width: Distance between the outline nodes
        angle: Direction of the first outline node (radians)
        distr: Fraction of the width on the first side
    """

    width: Value
    angle: Value
    distr: Value = Literal(0.5)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExpandSource":
        return cls(
            width=constant_or_formula(data["width"]),
            angle=constant_or_formula(data.get("angle", 0.0)),
            distr=constant_or_formula(data.get("distr", 0.5)),
        )


@dataclass(frozen=True)
class NodeSource:
    """A node of a contour as written in the source."""

    x: Value
    y: Value
    type_in: NodeType = NodeType.SMOOTH
    type_out: NodeType = NodeType.SMOOTH
    handle_in: HandleSource = field(default_factory=HandleSource)
    handle_out: HandleSource = field(default_factory=HandleSource)
    expand: ExpandSource | None = None

    def values(self) -> dict[str, Value]:
        """Every formula of the node keyed by its attribute path."""
        values: dict[str, Value] = {
            "x": self.x,
            "y": self.y,
            "in.x": self.handle_in.x,
            "in.y": self.handle_in.y,
            "out.x": self.handle_out.x,
            "out.y": self.handle_out.y,
        }
        if self.expand is not None:
            values["expand.width"] = self.expand.width
            values["expand.angle"] = self.expand.angle
            values["expand.distr"] = self.expand.distr
        return values

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeSource":
        expand = data.get("expand")
        return cls(
            x=constant_or_formula(data["x"]),
            y=constant_or_formula(data["y"]),
            type_in=NodeType(data.get("type_in", "smooth")),
            type_out=NodeType(data.get("type_out", "smooth")),
            handle_in=HandleSource.from_dict(data.get("handle_in")),
            handle_out=HandleSource.from_dict(data.get("handle_out")),
            expand=ExpandSource.from_dict(expand) if expand else None,
        )


@dataclass(frozen=True)
class ContourSource:
    """A skeleton or plain contour."""

    nodes: tuple[NodeSource, ...]
    skeleton: bool = False
    closed: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContourSource":
        skeleton = bool(data.get("skeleton", False))
        nodes = tuple(NodeSource.from_dict(n) for n in data["nodes"])
        if skeleton and any(node.expand is None for node in nodes):
            raise ValueError("every skeleton node needs an 'expand' entry")
        return cls(nodes=nodes, skeleton=skeleton, closed=bool(data.get("closed", not skeleton)))


@dataclass(frozen=True)
class AnchorSource:
    """A named construction point."""

    x: Value
    y: Value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnchorSource":
        return cls(x=constant_or_formula(data["x"]), y=constant_or_formula(data["y"]))


@dataclass(frozen=True)
class ComponentSource:
    """A component slot.

    Attributes:
        id: Slot identifier, unique within the glyph
        base: Candidate glyph names, the first one is the default
        transforms: Transforms applied to the component glyph
    """

    id: str
    base: tuple[str, ...]
    transforms: tuple[TransformSource, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ComponentSource":
        base = data["base"]
        if isinstance(base, str):
            base = [base]
        if not base:
            raise ValueError(f"component '{data['id']}' has no base glyph")
        return cls(
            id=str(data["id"]),
            base=tuple(base),
            transforms=tuple(TransformSource.from_dict(t) for t in data.get("transforms", [])),
        )


@dataclass(frozen=True)
class GlyphSource:
    """Parametric description of one glyph."""

    name: str
    unicode: int | None = None
    base: str | None = None
    component_class: str | None = None
    spacing_left: Value = ZERO
    spacing_right: Value = ZERO
    transforms: tuple[TransformSource, ...] = ()
    anchors: tuple[AnchorSource, ...] = ()
    contours: tuple[ContourSource, ...] = ()
    components: tuple[ComponentSource, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlyphSource":
        """Deserialize from dictionary.

        Args:
            data: Glyph entry of a font source document

        Returns:
            GlyphSource instance

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has an invalid value
        """
        unicode = data.get("unicode")
        return cls(
            name=data["name"],
            unicode=int(unicode) if unicode is not None else None,
            base=data.get("base"),
            component_class=data.get("component_class"),
            spacing_left=constant_or_formula(data.get("spacing_left", 0.0)),
            spacing_right=constant_or_formula(data.get("spacing_right", 0.0)),
            transforms=tuple(TransformSource.from_dict(t) for t in data.get("transforms", [])),
            anchors=tuple(AnchorSource.from_dict(a) for a in data.get("anchors", [])),
            contours=tuple(ContourSource.from_dict(c) for c in data.get("contours", [])),
            components=tuple(ComponentSource.from_dict(c) for c in data.get("components", [])),
        )


@dataclass
class FontSource:
    """Parametric description of a font.

    Attributes:
        fontinfo: Font-level attributes as constant-or-formula values
        parameters: Named parameters as constant-or-formula values
        glyphs: Glyph sources keyed by glyph name
    """

    fontinfo: dict[str, Value]
    parameters: dict[str, Value]
    glyphs: dict[str, GlyphSource]

    @property
    def unicode_to_glyph_name(self) -> dict[int, str]:
        """Map of code points to the glyph encoding them."""
        return {g.unicode: g.name for g in self.glyphs.values() if g.unicode is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FontSource":
        """Deserialize a whole font source document.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has an invalid value
        """
        raw_info = data.get("fontinfo", {})
        fontinfo = {
            name: constant_or_formula(raw_info[name], text=name in TEXT_FONTINFO_FIELDS)
            for name in FONTINFO_FIELDS
            if name in raw_info
        }
        parameters = {
            name: constant_or_formula(value) for name, value in data.get("parameters", {}).items()
        }
        glyphs = {}
        for key, raw_glyph in data.get("glyphs", {}).items():
            raw_glyph = {"name": key, **raw_glyph}
            glyphs[key] = GlyphSource.from_dict(raw_glyph)
        return cls(fontinfo=fontinfo, parameters=parameters, glyphs=glyphs)
