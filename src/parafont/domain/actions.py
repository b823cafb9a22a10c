"""Action messages sent to the dispatch bus.

Every outward effect of the editing core is one of these named messages.
Payload keys follow the bus's naming (``glyphName``, ``componentClass``).
"""

from dataclasses import dataclass, field
from typing import Any

CHANGE_GLYPH_NODE_MANUALLY = "change-glyph-node-manually"
RESET_GLYPH_POINTS_MANUALLY = "reset-glyph-points-manually"
CHANGE_COMPONENT = "change-component"
CHANGE_COMPONENT_CLASS = "change-component-class"
CHANGE_LETTER_SPACING = "change-letter-spacing"
CHANGE_PARAM = "change-param"
STORE_VALUE = "store-value"

MANUAL_EDITION_LABEL = "manual edition"


@dataclass(frozen=True)
class Action:
    """A named message with its payload.

    Attributes:
        name: Action name (e.g. "change-glyph-node-manually")
        payload: Message body
    """

    name: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "payload": self.payload}


def change_glyph_node_manually(
    changes: dict[str, float],
    glyph_name: str,
    label: str | None = None,
    force: bool = False,
) -> Action:
    """Apply sparse overrides; ``force`` commits a pending label."""
    payload: dict[str, Any] = {"changes": dict(changes), "glyphName": glyph_name}
    if label is not None:
        payload["label"] = label
    if force:
        payload["force"] = True
    return Action(CHANGE_GLYPH_NODE_MANUALLY, payload)


def reset_glyph_points_manually(
    glyph_name: str, unicode: int | None, points: list[dict[str, Any]]
) -> Action:
    """Clear the overrides of the given point snapshots."""
    return Action(
        RESET_GLYPH_POINTS_MANUALLY,
        {"glyphName": glyph_name, "unicode": unicode, "points": points},
    )


def change_component(glyph: str, component_id: str, name: str) -> Action:
    return Action(CHANGE_COMPONENT, {"glyph": glyph, "id": component_id, "name": name})


def change_component_class(component_class: str, name: str) -> Action:
    return Action(CHANGE_COMPONENT_CLASS, {"componentClass": component_class, "name": name})


def change_letter_spacing(value: float, side: str, letter: str) -> Action:
    return Action(CHANGE_LETTER_SPACING, {"value": value, "side": side, "letter": letter})


def change_param(values: dict[str, Any], trigger: bool = False, demo: bool = True) -> Action:
    """Parameter edit, or the download trigger when ``trigger`` is set."""
    return Action(CHANGE_PARAM, {"values": {**values, "trigger": trigger}, "demo": demo})


def store_value(**values: Any) -> Action:
    """Ambient UI state (camera, selection, visibility flags)."""
    return Action(STORE_VALUE, values)
