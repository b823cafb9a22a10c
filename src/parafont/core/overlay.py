"""In-process override store.

OverlayStore applies dispatched action messages to the override maps a
construction pass reads, and keeps undo checkpoints at labelled commits
(the end of each drag).
"""

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from parafont.core.construction import (
    COMPONENT_CLASS_CHOICE,
    GLYPH_COMPONENT_CHOICE,
    GLYPH_SPECIAL_PROPS,
    MANUAL_CHANGES,
)
from parafont.domain import Action, NodePath, actions

logger = structlog.get_logger(__name__)

SPACING_IDS = {"spacingLeft": "spacing_left", "spacingRight": "spacing_right"}
HANDLE_DIRECTIONS = ("in", "out")


@dataclass
class OverlayState:
    """Undoable part of the store."""

    manual_changes: dict[str, dict[str, float]] = field(default_factory=dict)
    glyph_component_choice: dict[str, dict[str, str]] = field(default_factory=dict)
    component_class_choice: dict[str, str] = field(default_factory=dict)
    glyph_special_props: dict[str, dict[str, float]] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)

    def copy(self) -> "OverlayState":
        return copy.deepcopy(self)


class OverlayStore:
    """Reducer for editing actions with undo/redo.

    Example:
        >>> store = OverlayStore({"thickness": 80})
        >>> store.dispatch(change_glyph_node_manually({"contours.0.nodes.0.x": 5}, "a"))
        >>> store.build_params()["manual_changes"]
        {'a': {'contours.0.nodes.0.x': 5}}
    """

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self.state = OverlayState(values=dict(values or {}))
        self.ui: dict[str, Any] = {}
        self.download_requests = 0
        self._committed = self.state.copy()
        self._history: list[OverlayState] = []
        self._future: list[OverlayState] = []
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def dispatch(self, action: Action) -> None:
        """Apply one action message."""
        payload = action.payload
        match action.name:
            case actions.CHANGE_GLYPH_NODE_MANUALLY:
                self._change_nodes(payload)
            case actions.RESET_GLYPH_POINTS_MANUALLY:
                self._reset_points(payload)
            case actions.CHANGE_COMPONENT:
                choice = self.state.glyph_component_choice.setdefault(payload["glyph"], {})
                choice[payload["id"]] = payload["name"]
            case actions.CHANGE_COMPONENT_CLASS:
                self.state.component_class_choice[payload["componentClass"]] = payload["name"]
            case actions.CHANGE_LETTER_SPACING:
                props = self.state.glyph_special_props.setdefault(payload["letter"], {})
                props[f"spacing_{payload['side']}"] = payload["value"]
            case actions.CHANGE_PARAM:
                values = dict(payload["values"])
                if values.pop("trigger", False):
                    self.download_requests += 1
                self.state.values.update(values)
            case actions.STORE_VALUE:
                self.ui.update(payload)
            case _:
                logger.warning("Unknown action", action=action.name)
                return

        logger.debug("Action applied", action=action.name)
        self._notify()

    def _change_nodes(self, payload: dict[str, Any]) -> None:
        changes = payload.get("changes", {})
        if changes:
            glyph_changes = self.state.manual_changes.setdefault(payload["glyphName"], {})
            glyph_changes.update(changes)
        if payload.get("force") or payload.get("label"):
            self.commit()

    def _reset_points(self, payload: dict[str, Any]) -> None:
        glyph_changes = self.state.manual_changes.get(payload["glyphName"], {})
        unicode = payload.get("unicode")
        letter = chr(unicode) if unicode is not None else ""

        for point in payload.get("points", []):
            point_id = point["id"]
            if point_id in SPACING_IDS:
                self.state.glyph_special_props.get(letter, {}).pop(SPACING_IDS[point_id], None)
                continue

            path = NodePath.parse(point_id)
            # A handle resets only itself, any other point its whole node
            target = path if path.name in HANDLE_DIRECTIONS else (path.point() or path)
            prefix = f"{target}."
            for key in [k for k in glyph_changes if k.startswith(prefix)]:
                del glyph_changes[key]

        self.commit()

    def commit(self) -> None:
        """Record an undo checkpoint if anything changed since the last one."""
        if self.state == self._committed:
            return
        self._history.append(self._committed)
        self._committed = self.state.copy()
        self._future.clear()

    def undo(self) -> bool:
        """Restore the previous checkpoint.

        Returns:
            True if something was undone
        """
        self.commit()
        if not self._history:
            return False
        self._future.append(self._committed)
        self._committed = self._history.pop()
        self.state = self._committed.copy()
        self._notify()
        return True

    def redo(self) -> bool:
        """Re-apply the last undone checkpoint.

        Returns:
            True if something was redone
        """
        if not self._future:
            return False
        self._history.append(self._committed)
        self._committed = self._future.pop()
        self.state = self._committed.copy()
        self._notify()
        return True

    def build_params(self, values: dict[str, Any] | None = None) -> dict[str, Any]:
        """Parameter dict for a construction pass.

        Args:
            values: Parameter values overriding the stored ones

        Returns:
            Parameter values plus the override maps
        """
        params: dict[str, Any] = {**self.state.values, **(values or {})}
        params[MANUAL_CHANGES] = copy.deepcopy(self.state.manual_changes)
        params[GLYPH_COMPONENT_CHOICE] = copy.deepcopy(self.state.glyph_component_choice)
        params[COMPONENT_CLASS_CHOICE] = dict(self.state.component_class_choice)
        params[GLYPH_SPECIAL_PROPS] = copy.deepcopy(self.state.glyph_special_props)
        return params
