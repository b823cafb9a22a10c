"""Interactive editing session.

This module contains the frame-driven editing loop:

- Input tracking (pointer and key edges per frame)
- Camera (pan, zoom about the pointer, view reset)
- Hit testing of a constructed glyph
- The per-frame state machine turning input into action messages
- Session lifecycle over snapshot stores and a dispatch bus

Key functions:
- advance_frame: Advance the session state by one frame

Key classes:
- InteractionSession: Editing loop of one canvas
- HeadlessEditor: Session wired to an in-process store and constructor
- GlyphHitTester: Items under the pointer
- Camera: World to screen mapping
- InputTracker: Accumulates events between frames
"""

from parafont.interaction.camera import Camera
from parafont.interaction.headless import HeadlessEditor, RecordingBus
from parafont.interaction.hit_test import (
    GlyphHitTester,
    describe_point,
    iter_point_items,
    spacing_items,
)
from parafont.interaction.input import FrameInput, InputTracker, Modifiers
from parafont.interaction.machine import FrameContext, advance_frame
from parafont.interaction.session import (
    ActionBus,
    FrameScheduler,
    InteractionSession,
    ManualScheduler,
)
from parafont.interaction.state import (
    AppState,
    Axis,
    CanvasMode,
    FrameResult,
    SessionState,
    in_any,
    primary,
)
from parafont.interaction.stores import SnapshotStore

__all__ = [
    # State
    "AppState",
    "Axis",
    "CanvasMode",
    "FrameResult",
    "SessionState",
    "in_any",
    "primary",
    # Input and view
    "Camera",
    "FrameInput",
    "InputTracker",
    "Modifiers",
    # Hit testing
    "GlyphHitTester",
    "describe_point",
    "iter_point_items",
    "spacing_items",
    # Frame step
    "FrameContext",
    "advance_frame",
    # Session
    "ActionBus",
    "FrameScheduler",
    "InteractionSession",
    "ManualScheduler",
    "SnapshotStore",
    "HeadlessEditor",
    "RecordingBus",
]
