"""Parametric construction of glyph geometry.

A construction pass turns a font source, a parameter environment and the
override maps (manual point changes, component choices, letter spacing)
into concrete glyph geometry. Every pass re-resolves every formula; nothing
is cached between passes, so identical inputs always give identical output.

Key components:
- FontConstructor: Resolves parameters and font info, constructs a subset
- GlyphBuilder: Constructs one glyph (points, spacing, components)
"""

import graphlib
import math
from collections import ChainMap
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog

from parafont.core.geometry import apply_transform, chain_transform, glyph_bounds
from parafont.domain import (
    ConstructedFont,
    ConstructedGlyph,
    Contour,
    DependencyTree,
    Expand,
    FontSource,
    GlyphSource,
    Handle,
    Node,
    NodePath,
    NodeSource,
    Point,
    ResolvedTransform,
    TransformSource,
    Value,
)
from parafont.exceptions import DependencyCycleError, GlyphNotFoundError

logger = structlog.get_logger(__name__)

MANUAL_CHANGES = "manual_changes"
GLYPH_COMPONENT_CHOICE = "glyph_component_choice"
COMPONENT_CLASS_CHOICE = "component_class_choice"
GLYPH_SPECIAL_PROPS = "glyph_special_props"
ALT_LIST = "alt_list"

OVERRIDE_KEYS = frozenset(
    {MANUAL_CHANGES, GLYPH_COMPONENT_CHOICE, COMPONENT_CLASS_CHOICE, GLYPH_SPECIAL_PROPS, ALT_LIST}
)


def resolve_transforms(
    transforms: Iterable[TransformSource], env: Mapping[str, Any]
) -> tuple[ResolvedTransform, ...]:
    """Resolve the parameters of a transform list."""
    return tuple(ResolvedTransform(t.name, float(t.param.resolve(env))) for t in transforms)


def _handle_world(matrix: Any, handle: Handle) -> Handle:
    x, y = matrix.transformPoint((handle.x, handle.y))
    x_base, y_base = matrix.transformPoint((handle.x_base, handle.y_base))
    return Handle(x, y, x_base, y_base)


def _node_world(matrix: Any, node: Node, chain: tuple[ResolvedTransform, ...]) -> Node:
    x, y = matrix.transformPoint((node.x, node.y))
    x_base, y_base = matrix.transformPoint((node.x_base, node.y_base))
    expanded = None
    if node.expanded_to is not None:
        expanded = (
            _node_world(matrix, node.expanded_to[0], chain),
            _node_world(matrix, node.expanded_to[1], chain),
        )
    return Node(
        x=x,
        y=y,
        x_base=x_base,
        y_base=y_base,
        handle_in=_handle_world(matrix, node.handle_in),
        handle_out=_handle_world(matrix, node.handle_out),
        type_in=node.type_in,
        type_out=node.type_out,
        expand=node.expand,
        expanded_to=expanded,
        transforms=chain,
    )


class GlyphBuilder:
    """Constructs a single glyph.

    Points (anchors and contour nodes) are resolved in local coordinates in
    dependency order, so a formula may read any point resolved before it.
    The transform chain is applied once every point is known.
    """

    def __init__(
        self,
        source: GlyphSource,
        env: Mapping[str, Any],
        font_glyphs: Mapping[str, GlyphSource],
        overlay: Mapping[str, float],
        overrides: Mapping[str, Any],
        chain: tuple[ResolvedTransform, ...] = (),
        stack: tuple[str, ...] = (),
    ) -> None:
        """Initialize builder.

        Args:
            source: Glyph to construct
            env: Resolved parameter environment
            font_glyphs: Every glyph of the font, for component lookups
            overlay: Manual changes of this glyph (dotted path -> value)
            overrides: Override maps (component choices, special props...)
            chain: Transform chain inherited from a parent glyph
            stack: Names of the glyphs currently being built, outermost first
        """
        self.source = source
        self.env = env
        self.font_glyphs = font_glyphs
        self.overlay = overlay
        self.overrides = overrides
        self.chain = chain + resolve_transforms(source.transforms, env)
        self.stack = stack + (source.name,)
        self.tree = DependencyTree()

        self._nodes: dict[int, dict[str, dict[int, Node]]] = {}
        self._anchors: dict[int, Point] = {}
        self._local_env = ChainMap({"contours": self._nodes, "anchors": self._anchors}, env)

    def _offset(self, path: NodePath, *tokens: str) -> float:
        return float(self.overlay.get(path.key(*tokens), 0.0))

    def _resolve(self, value: Value) -> float:
        return float(value.resolve(self._local_env))

    def _point_order(self) -> list[NodePath]:
        points: dict[NodePath, set[NodePath]] = {}

        for k, anchor in enumerate(self.source.anchors):
            path = NodePath.of("anchors", k)
            refs = set(anchor.x.references) | set(anchor.y.references)
            points[path] = refs
            self.tree.add(path, "x", anchor.x.references)
            self.tree.add(path, "y", anchor.y.references)

        for i, contour in enumerate(self.source.contours):
            for j, node in enumerate(contour.nodes):
                path = NodePath.of("contours", i, "nodes", j)
                refs: set[NodePath] = set()
                for attribute, value in node.values().items():
                    self.tree.add(path, attribute, value.references)
                    refs.update(value.references)
                points[path] = refs

        graph = {
            path: {ref for ref in refs if ref != path and ref in points}
            for path, refs in points.items()
        }
        try:
            return list(graphlib.TopologicalSorter(graph).static_order())
        except graphlib.CycleError as e:
            cycle = [str(p) for p in e.args[1]]
            raise DependencyCycleError(self.source.name, cycle) from e

    def _handle(self, anchor: Point, offset: Point, path: NodePath, direction: str) -> Handle:
        x_base = anchor.x + offset.x
        y_base = anchor.y + offset.y
        return Handle(
            x=x_base + self._offset(path, direction, "x"),
            y=y_base + self._offset(path, direction, "y"),
            x_base=x_base,
            y_base=y_base,
        )

    def _build_node(self, path: NodePath, source: NodeSource) -> Node:
        x_base = self._resolve(source.x)
        y_base = self._resolve(source.y)
        position = Point(x_base + self._offset(path, "x"), y_base + self._offset(path, "y"))

        offset_in = Point(self._resolve(source.handle_in.x), self._resolve(source.handle_in.y))
        offset_out = Point(self._resolve(source.handle_out.x), self._resolve(source.handle_out.y))
        handle_in = self._handle(position, offset_in, path, "in")
        handle_out = self._handle(position, offset_out, path, "out")

        if source.expand is None:
            return Node(
                x=position.x,
                y=position.y,
                x_base=x_base,
                y_base=y_base,
                handle_in=handle_in,
                handle_out=handle_out,
                type_in=source.type_in,
                type_out=source.type_out,
            )

        base_width = self._resolve(source.expand.width)
        base_angle = self._resolve(source.expand.angle)
        base_distr = self._resolve(source.expand.distr)
        expand = Expand(
            width=base_width * float(self.overlay.get(path.key("expand", "width"), 1.0)),
            angle=base_angle + self._offset(path, "expand", "angle"),
            distr=base_distr + self._offset(path, "expand", "distr"),
            base_width=base_width,
            base_angle=base_angle,
            base_distr=base_distr,
        )

        # Final handle offsets, overrides included
        skeleton_in = Point(handle_in.x - position.x, handle_in.y - position.y)
        skeleton_out = Point(handle_out.x - position.x, handle_out.y - position.y)

        dx = math.cos(expand.angle) * expand.width
        dy = math.sin(expand.angle) * expand.width
        left = Point(position.x + dx * expand.distr, position.y + dy * expand.distr)
        right = Point(
            position.x - dx * (1 - expand.distr),
            position.y - dy * (1 - expand.distr),
        )

        left_path = path.child("expanded_to", 0)
        right_path = path.child("expanded_to", 1)
        # The second side runs in reverse, so its handles swap
        left_node = Node(
            x=left.x,
            y=left.y,
            x_base=left.x,
            y_base=left.y,
            handle_in=self._handle(left, skeleton_in, left_path, "in"),
            handle_out=self._handle(left, skeleton_out, left_path, "out"),
            type_in=source.type_in,
            type_out=source.type_out,
        )
        right_node = Node(
            x=right.x,
            y=right.y,
            x_base=right.x,
            y_base=right.y,
            handle_in=self._handle(right, skeleton_out, right_path, "in"),
            handle_out=self._handle(right, skeleton_in, right_path, "out"),
            type_in=source.type_out,
            type_out=source.type_in,
        )

        return Node(
            x=position.x,
            y=position.y,
            x_base=x_base,
            y_base=y_base,
            handle_in=handle_in,
            handle_out=handle_out,
            type_in=source.type_in,
            type_out=source.type_out,
            expand=expand,
            expanded_to=(left_node, right_node),
        )

    def _choose_component(self, component_id: str, bases: tuple[str, ...]) -> str:
        glyph_choice = self.overrides.get(GLYPH_COMPONENT_CHOICE, {}).get(self.source.name, {})
        if component_id in glyph_choice:
            return glyph_choice[component_id]

        default = self.font_glyphs.get(bases[0])
        class_choice = self.overrides.get(COMPONENT_CLASS_CHOICE, {})
        if default is not None and default.component_class in class_choice:
            return class_choice[default.component_class]

        return bases[0]

    def _build_components(self) -> list[ConstructedGlyph]:
        manual_changes = self.overrides.get(MANUAL_CHANGES, {})
        components = []

        for n, component in enumerate(self.source.components):
            name = self._choose_component(component.id, component.base)
            glyph_source = self.font_glyphs.get(name)
            if glyph_source is None:
                raise GlyphNotFoundError(name)
            if name in self.stack:
                raise DependencyCycleError(self.source.name, [*self.stack, name])

            prefix = f"components.{n}."
            overlay = dict(manual_changes.get(name, {}))
            overlay.update(
                {key[len(prefix):]: value for key, value in self.overlay.items() if key.startswith(prefix)}
            )

            builder = GlyphBuilder(
                source=glyph_source,
                env=self.env,
                font_glyphs=self.font_glyphs,
                overlay=overlay,
                overrides=self.overrides,
                chain=self.chain + resolve_transforms(component.transforms, self.env),
                stack=self.stack,
            )
            glyph = builder.build(component_id=component.id, component_bases=component.base)
            self.tree.merge(NodePath.of("components", n), glyph.dependency_tree)
            components.append(glyph)

        return components

    def build(
        self, component_id: str | None = None, component_bases: tuple[str, ...] = ()
    ) -> ConstructedGlyph:
        """Construct the glyph.

        Args:
            component_id: Slot id when the glyph is built as a component
            component_bases: Candidate glyphs of that slot

        Returns:
            ConstructedGlyph in world coordinates

        Raises:
            DependencyCycleError: If points or components depend on each other in a cycle
            GlyphNotFoundError: If a component names an unknown glyph
            FormulaError: If a formula cannot be evaluated
        """
        for path in self._point_order():
            if path.is_anchor():
                k = path.tokens[1]
                anchor = self.source.anchors[k]
                self._anchors[k] = Point(
                    self._resolve(anchor.x) + self._offset(path, "x"),
                    self._resolve(anchor.y) + self._offset(path, "y"),
                )
            else:
                _, i, _, j = path.tokens
                node = self._build_node(path, self.source.contours[i].nodes[j])
                self._nodes.setdefault(i, {"nodes": {}})["nodes"][j] = node

        special = self.overrides.get(GLYPH_SPECIAL_PROPS, {}).get(
            chr(self.source.unicode) if self.source.unicode is not None else "", {}
        )
        base_spacing_left = self._resolve(self.source.spacing_left)
        base_spacing_right = self._resolve(self.source.spacing_right)
        spacing_left = base_spacing_left + float(special.get("spacing_left", 0.0))
        spacing_right = base_spacing_right + float(special.get("spacing_right", 0.0))

        # A left bearing change moves the outline, components included
        shift = spacing_left - base_spacing_left
        if component_id is None and shift:
            self.chain = self.chain + (ResolvedTransform("translateX", shift),)

        matrix = chain_transform(self.chain)
        contours = [
            Contour(
                nodes=[
                    _node_world(matrix, self._nodes[i]["nodes"][j], self.chain)
                    for j in range(len(contour.nodes))
                ],
                skeleton=contour.skeleton,
                closed=contour.closed,
            )
            for i, contour in enumerate(self.source.contours)
        ]
        anchors = [apply_transform(matrix, self._anchors[k]) for k in range(len(self.source.anchors))]

        glyph = ConstructedGlyph(
            name=self.source.name,
            unicode=self.source.unicode,
            contours=contours,
            anchors=anchors,
            components=self._build_components(),
            base=self.source.base,
            component_class=self.source.component_class,
            component_id=component_id,
            component_bases=component_bases,
            spacing_left=spacing_left,
            spacing_right=spacing_right,
            base_spacing_left=base_spacing_left,
            base_spacing_right=base_spacing_right,
            transforms=self.chain,
            dependency_tree=self.tree,
            manual_changes=dict(self.overlay),
        )

        bounds = glyph_bounds(glyph)
        if bounds is None:
            glyph.advance_width = glyph.spacing_left + glyph.spacing_right
        else:
            glyph.advance_width = bounds[2] + glyph.spacing_right

        return glyph


class FontConstructor:
    """Constructs glyphs of a font source.

    Example:
        >>> constructor = FontConstructor(source)
        >>> font = constructor.construct_font({"thickness": 80}, "ab")
        >>> font.glyph("a").advance_width
    """

    def __init__(self, source: FontSource) -> None:
        self.source = source
        self.param_base: dict[str, dict[str, Any]] = {
            MANUAL_CHANGES: {},
            GLYPH_COMPONENT_CHOICE: {},
        }

    def resolve_parameters(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Merge caller values with the source parameters.

        Caller values win; the remaining parameters are resolved from their
        formulas in dependency order.

        Args:
            params: Caller parameter values (override maps are ignored)

        Returns:
            Resolved parameter environment

        Raises:
            DependencyCycleError: If parameter formulas depend on each other in a cycle
        """
        env = {key: value for key, value in params.items() if key not in OVERRIDE_KEYS}
        pending = {name: value for name, value in self.source.parameters.items() if name not in env}

        graph = {name: set(value.names) & pending.keys() for name, value in pending.items()}
        try:
            order = list(graphlib.TopologicalSorter(graph).static_order())
        except graphlib.CycleError as e:
            raise DependencyCycleError("parameters", list(e.args[1])) from e

        for name in order:
            env[name] = pending[name].resolve(env)
        return env

    def _overrides(self, params: Mapping[str, Any]) -> dict[str, Any]:
        overrides: dict[str, Any] = {
            key: params.get(key, {}) for key in (COMPONENT_CLASS_CHOICE, GLYPH_SPECIAL_PROPS)
        }
        for key in (MANUAL_CHANGES, GLYPH_COMPONENT_CHOICE):
            overrides[key] = {**self.param_base[key], **params.get(key, {})}
        return overrides

    def glyph_names(self, subset: Iterable[str | int], params: Mapping[str, Any]) -> list[str | None]:
        """Map characters to glyph names, alternates first."""
        alt_list = params.get(ALT_LIST, {})
        unicode_map = self.source.unicode_to_glyph_name
        names: list[str | None] = []
        for char in subset:
            code = char if isinstance(char, int) else ord(char)
            key = chr(code)
            names.append(alt_list.get(key) or unicode_map.get(code))
        return names

    def construct_glyph(
        self,
        name: str,
        params: Mapping[str, Any],
        env: Mapping[str, Any] | None = None,
    ) -> ConstructedGlyph:
        """Construct one glyph by name.

        Args:
            name: Glyph name
            params: Parameter values and override maps
            env: Already resolved environment, resolved from params if omitted

        Raises:
            GlyphNotFoundError: If the font has no such glyph
        """
        source = self.source.glyphs.get(name)
        if source is None:
            raise GlyphNotFoundError(name)

        if env is None:
            env = self.resolve_parameters(params)
        overrides = self._overrides(params)

        builder = GlyphBuilder(
            source=source,
            env=env,
            font_glyphs=self.source.glyphs,
            overlay=overrides[MANUAL_CHANGES].get(source.base or source.name, {}),
            overrides=overrides,
        )
        glyph = builder.build()
        logger.debug(
            "Glyph constructed",
            glyph=name,
            contours=len(glyph.contours),
            components=len(glyph.components),
            overrides=len(glyph.manual_changes),
        )
        return glyph

    def construct_font(
        self,
        params: Mapping[str, Any],
        subset: Iterable[str | int],
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> ConstructedFont:
        """Construct the glyphs of a character subset.

        Characters without a matching glyph are skipped.

        Args:
            params: Parameter values and override maps
            subset: Characters (or code points) to construct
            progress_callback: Optional callback(completed, total, glyph_name)

        Returns:
            ConstructedFont with resolved font info and glyphs in subset order
        """
        env = self.resolve_parameters(params)
        fontinfo = {name: value.resolve(env) for name, value in self.source.fontinfo.items()}

        names = [n for n in self.glyph_names(subset, params) if n is not None and n in self.source.glyphs]
        glyphs = []
        for name in names:
            glyphs.append(self.construct_glyph(name, params, env=env))
            if progress_callback is not None:
                progress_callback(len(glyphs), len(names), name)

        logger.info("Font constructed", glyphs=len(glyphs))
        return ConstructedFont(fontinfo=fontinfo, glyphs=glyphs)
