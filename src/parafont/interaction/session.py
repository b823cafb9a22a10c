"""Interaction session lifecycle.

InteractionSession owns the editing loop of one canvas: it subscribes to
the glyph, UI and parameter stores, runs one ``advance_frame`` step per
scheduled frame, dispatches the resulting actions to the bus and logs the
session statistics. Unmounting cancels the pending frame and releases the
store subscriptions.
"""

from collections.abc import Callable, Mapping
from typing import Any, Protocol

import structlog

from parafont.config import ParafontSettings, get_default_settings
from parafont.domain import Action, ConstructedGlyph
from parafont.domain.actions import change_param
from parafont.interaction.hit_test import GlyphHitTester
from parafont.interaction.input import InputTracker
from parafont.interaction.machine import FrameContext, advance_frame
from parafont.interaction.state import AppState, CanvasMode, FrameResult, SessionState, primary
from parafont.interaction.stores import SnapshotStore
from parafont.utils.logging import SessionLogger

logger = structlog.get_logger(__name__)

FrameCallback = Callable[[float], None]


class ActionBus(Protocol):
    """Receiver of dispatched action messages."""

    def dispatch(self, action: Action) -> None: ...


class FrameScheduler(Protocol):
    """Source of frame callbacks (an animation frame loop in a browser)."""

    def request(self, callback: FrameCallback) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class ManualScheduler:
    """Frame scheduler advanced by explicit ticks.

    Used by headless sessions and tests: ``tick`` runs the callbacks that
    were pending when it was called.
    """

    def __init__(self) -> None:
        self._pending: dict[int, FrameCallback] = {}
        self._next_handle = 0

    def request(self, callback: FrameCallback) -> int:
        self._next_handle += 1
        self._pending[self._next_handle] = callback
        return self._next_handle

    def cancel(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def tick(self, time_ms: float) -> int:
        """Run pending callbacks.

        Returns:
            Number of callbacks run
        """
        pending, self._pending = self._pending, {}
        for callback in pending.values():
            callback(time_ms)
        return len(pending)

    @property
    def pending(self) -> int:
        return len(self._pending)


def _state_name(state: AppState) -> str:
    state = primary(state)
    return state.name or str(state)


def _canvas_mode(value: Any) -> CanvasMode:
    try:
        return CanvasMode(value)
    except ValueError:
        return CanvasMode.MOVE


class InteractionSession:
    """Editing loop of one glyph canvas.

    Attributes:
        input: Tracker receiving pointer and keyboard events
        state: Session state after the last frame
        last_result: Result of the last frame
    """

    def __init__(
        self,
        bus: ActionBus,
        scheduler: FrameScheduler,
        settings: ParafontSettings | None = None,
        hit_tester: GlyphHitTester | None = None,
        session_logger: SessionLogger | None = None,
    ) -> None:
        self.bus = bus
        self.scheduler = scheduler
        self.settings = settings or get_default_settings()
        self.hit_tester = hit_tester or GlyphHitTester(self.settings.interaction)
        self.session_logger = session_logger or SessionLogger()

        self.input = InputTracker()
        self.state = SessionState()
        self.last_result: FrameResult | None = None

        self.glyph: ConstructedGlyph | None = None
        self.ui: dict[str, Any] = {}
        self.values: dict[str, Any] = {}

        self._frame_handle: Any = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._mounted = False

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(
        self,
        glyph_store: SnapshotStore[ConstructedGlyph | None],
        ui_store: SnapshotStore[Mapping[str, Any]],
        values_store: SnapshotStore[Mapping[str, Any]],
    ) -> None:
        """Subscribe to the stores and schedule the first frame."""
        if self._mounted:
            return

        self._unsubscribers = [
            glyph_store.subscribe(self.on_glyph),
            ui_store.subscribe(self.on_ui),
            values_store.subscribe(self.on_values),
        ]
        self.on_glyph(glyph_store.get())
        self.on_ui(ui_store.get())
        self.on_values(values_store.get())

        self._mounted = True
        self._frame_handle = self.scheduler.request(self._on_frame)
        self.session_logger.log_lifecycle("Session mounted")

    def unmount(self) -> None:
        """Cancel the pending frame and release the store subscriptions."""
        if not self._mounted:
            return

        if self._frame_handle is not None:
            self.scheduler.cancel(self._frame_handle)
            self._frame_handle = None
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._mounted = False

        stats = self.session_logger.stats
        self.session_logger.log_lifecycle(
            "Session unmounted",
            frames=stats.frame_count,
            edits=stats.edits_dispatched,
            skipped=stats.edits_skipped,
        )

    def on_glyph(self, glyph: ConstructedGlyph | None) -> None:
        self.glyph = glyph

    def on_ui(self, snapshot: Mapping[str, Any]) -> None:
        self.ui = dict(snapshot)

    def on_values(self, snapshot: Mapping[str, Any]) -> None:
        self.values = dict(snapshot)

    def _context(self) -> FrameContext:
        viewport = self.ui.get("viewport", (1024.0, 768.0))
        return FrameContext(
            glyph=self.glyph,
            canvas_mode=_canvas_mode(self.ui.get("canvasMode", CanvasMode.SELECT_POINTS.value)),
            viewport=(float(viewport[0]), float(viewport[1])),
            show_dependencies=bool(self.ui.get("dependencies", False)),
        )

    def _on_frame(self, time_ms: float) -> None:
        self._frame_handle = None
        if not self._mounted:
            return
        self.step(time_ms)
        if self._mounted:
            self._frame_handle = self.scheduler.request(self._on_frame)

    def step(self, time_ms: float) -> FrameResult:
        """Run one frame and dispatch its actions.

        Args:
            time_ms: Frame timestamp

        Returns:
            Result of the frame
        """
        frame = self.input.frame(time_ms)
        previous = self.state
        result = advance_frame(previous, frame, self._context(), self.hit_tester, self.settings)
        self.input.clear_edges()
        self.state = result.state
        self.last_result = result

        log = self.session_logger
        log.log_frame()
        glyph_name = result.state.glyph_name
        if previous.glyph_name is not None and glyph_name != previous.glyph_name:
            log.log_lifecycle("Glyph changed", old=previous.glyph_name, new=glyph_name)
        if primary(previous.app_state) != primary(result.state.app_state):
            log.log_transition(
                glyph_name, _state_name(previous.app_state), _state_name(result.state.app_state)
            )
        for item_id, count in result.edited:
            log.log_edit(glyph_name or "", item_id, count)
        for item_id, reason in result.skipped:
            log.log_edit_skipped(glyph_name, item_id, reason)

        for action in result.actions:
            self.dispatch(action)
        return result

    def dispatch(self, action: Action) -> None:
        self.bus.dispatch(action)
        self.session_logger.log_action(action.name)

    def change_param(self, name: str, value: float) -> None:
        """Edit one parameter value."""
        self.dispatch(change_param({**self.values, name: float(value)}))

    def download(self) -> None:
        """Request a download of the font with the current values."""
        logger.info("Download requested", values=len(self.values))
        self.dispatch(change_param(dict(self.values), trigger=True))
