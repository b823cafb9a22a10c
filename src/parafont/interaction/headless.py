"""Headless editing loop.

HeadlessEditor wires an InteractionSession to an OverlayStore (as the
dispatch bus) and a FontConstructor: every store change rebuilds the
edited glyph and publishes it, together with the UI and parameter
snapshots, to the session's stores. Input scripts replay pointer and key
events frame by frame.

Script format (list of events, applied in order):
    {"type": "move", "x": 120, "y": 300}
    {"type": "down"} / {"type": "up"}
    {"type": "wheel", "delta": -120}
    {"type": "key_down", "code": 16} / {"type": "key_up", "code": 16}
    {"type": "modifiers", "keys": ["shift", "alt"]}
    {"type": "frame", "time": 16}
    {"type": "undo"} / {"type": "redo"}
"""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from parafont.config import ParafontSettings, get_default_settings
from parafont.core.construction import FontConstructor
from parafont.core.overlay import OverlayStore
from parafont.domain import Action, ConstructedGlyph, FontSource
from parafont.interaction.input import Modifiers
from parafont.interaction.session import InteractionSession, ManualScheduler
from parafont.interaction.state import CanvasMode
from parafont.interaction.stores import SnapshotStore

logger = structlog.get_logger(__name__)

MODIFIER_NAMES = {
    "shift": Modifiers.SHIFT,
    "ctrl": Modifiers.CTRL,
    "alt": Modifiers.ALT,
    "meta": Modifiers.META,
}


class RecordingBus:
    """Dispatch bus forwarding to an overlay store and keeping every action."""

    def __init__(self, store: OverlayStore) -> None:
        self.store = store
        self.actions: list[Action] = []

    def dispatch(self, action: Action) -> None:
        self.actions.append(action)
        self.store.dispatch(action)


class HeadlessEditor:
    """Edit one glyph of a font source without a display.

    Example:
        >>> editor = HeadlessEditor(source, "a")
        >>> editor.start()
        >>> editor.run_script([{"type": "move", "x": 10, "y": 10}, {"type": "frame", "time": 0}])
    """

    def __init__(
        self,
        source: FontSource,
        glyph_name: str,
        values: Mapping[str, Any] | None = None,
        canvas_mode: CanvasMode = CanvasMode.SELECT_POINTS,
        viewport: tuple[float, float] = (1024.0, 768.0),
        settings: ParafontSettings | None = None,
    ) -> None:
        self.constructor = FontConstructor(source)
        self.glyph_name = glyph_name
        self.store = OverlayStore(dict(values or {}))
        self.store.ui.update({"canvasMode": canvas_mode.value, "viewport": viewport})
        self.bus = RecordingBus(self.store)

        self.glyph_store: SnapshotStore[ConstructedGlyph | None] = SnapshotStore(None)
        self.ui_store: SnapshotStore[Mapping[str, Any]] = SnapshotStore(dict(self.store.ui))
        self.values_store: SnapshotStore[Mapping[str, Any]] = SnapshotStore(dict(self.store.state.values))

        self.scheduler = ManualScheduler()
        self.session = InteractionSession(
            bus=self.bus,
            scheduler=self.scheduler,
            settings=settings or get_default_settings(),
        )
        self._unsubscribe = self.store.subscribe(self.publish)

    @property
    def glyph(self) -> ConstructedGlyph | None:
        return self.glyph_store.get()

    @property
    def actions(self) -> list[Action]:
        return self.bus.actions

    def publish(self) -> None:
        """Rebuild the glyph from the store and push the snapshots."""
        glyph = self.constructor.construct_glyph(self.glyph_name, self.store.build_params())
        self.glyph_store.set(glyph)
        self.ui_store.set(dict(self.store.ui))
        self.values_store.set(dict(self.store.state.values))

    def start(self) -> None:
        self.publish()
        self.session.mount(self.glyph_store, self.ui_store, self.values_store)

    def stop(self) -> None:
        self.session.unmount()
        self._unsubscribe()

    def apply(self, event: Mapping[str, Any]) -> None:
        """Apply one script event."""
        tracker = self.session.input
        match event.get("type"):
            case "move":
                tracker.pointer_move(float(event["x"]), float(event["y"]))
            case "down":
                tracker.pointer_down()
            case "up":
                tracker.pointer_up()
            case "wheel":
                tracker.wheel(float(event["delta"]))
            case "key_down":
                tracker.key_down(int(event["code"]))
            case "key_up":
                tracker.key_up(int(event["code"]))
            case "modifiers":
                held = Modifiers.NONE
                for name in event.get("keys", []):
                    held |= MODIFIER_NAMES[name]
                tracker.set_modifiers(held)
            case "frame":
                self.scheduler.tick(float(event.get("time", 0.0)))
            case "undo":
                self.store.undo()
            case "redo":
                self.store.redo()
            case other:
                raise ValueError(f"Unknown script event '{other}'")

    def run_script(self, events: Iterable[Mapping[str, Any]]) -> list[Action]:
        """Apply a list of events.

        Returns:
            Actions dispatched while the script ran
        """
        start = len(self.bus.actions)
        for event in events:
            self.apply(event)
        logger.debug("Script replayed", actions=len(self.bus.actions) - start)
        return self.bus.actions[start:]
