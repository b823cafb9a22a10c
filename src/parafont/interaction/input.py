"""Pointer and keyboard input tracking.

Raw events are accumulated between frames by InputTracker. Each frame reads
one immutable FrameInput snapshot; edges (presses, releases, wheel and
movement deltas) are then cleared so they are seen by exactly one frame.
"""

import enum
from dataclasses import dataclass, field

from parafont.domain import Point


class Modifiers(enum.Flag):
    """Modifier keys held during a frame."""

    NONE = 0
    SHIFT = 1
    CTRL = 2
    ALT = 4
    META = 8


@dataclass(frozen=True)
class FrameInput:
    """Input state seen by one frame.

    Attributes:
        time_ms: Frame timestamp
        pointer: Pointer position in screen pixels
        pointer_down: Primary button held
        pressed: Button went down since the last frame
        released: Button went up since the last frame
        delta: Pointer movement since the last frame (screen pixels)
        wheel: Accumulated wheel delta
        keys_down: Key codes currently held
        keys_pressed: Key codes that went down since the last frame
        keys_released: Key codes that went up since the last frame
        modifiers: Modifier keys held
    """

    time_ms: float = 0.0
    pointer: Point = Point(0.0, 0.0)
    pointer_down: bool = False
    pressed: bool = False
    released: bool = False
    delta: Point = Point(0.0, 0.0)
    wheel: float = 0.0
    keys_down: frozenset[int] = field(default_factory=frozenset)
    keys_pressed: frozenset[int] = field(default_factory=frozenset)
    keys_released: frozenset[int] = field(default_factory=frozenset)
    modifiers: Modifiers = Modifiers.NONE

    def held(self, key: int) -> bool:
        return key in self.keys_down

    def key_pressed(self, key: int) -> bool:
        return key in self.keys_pressed

    def key_released(self, key: int) -> bool:
        return key in self.keys_released


class InputTracker:
    """Accumulates input events between frames."""

    def __init__(self) -> None:
        self._pointer = Point(0.0, 0.0)
        self._pointer_down = False
        self._pressed = False
        self._released = False
        self._dx = 0.0
        self._dy = 0.0
        self._wheel = 0.0
        self._keys_down: set[int] = set()
        self._keys_pressed: set[int] = set()
        self._keys_released: set[int] = set()
        self._modifiers = Modifiers.NONE

    def pointer_move(self, x: float, y: float) -> None:
        self._dx += x - self._pointer.x
        self._dy += y - self._pointer.y
        self._pointer = Point(x, y)

    def pointer_down(self) -> None:
        if not self._pointer_down:
            self._pressed = True
        self._pointer_down = True

    def pointer_up(self) -> None:
        if self._pointer_down:
            self._released = True
        self._pointer_down = False

    def wheel(self, delta: float) -> None:
        self._wheel += delta

    def key_down(self, code: int) -> None:
        if code not in self._keys_down:
            self._keys_pressed.add(code)
        self._keys_down.add(code)

    def key_up(self, code: int) -> None:
        if code in self._keys_down:
            self._keys_released.add(code)
        self._keys_down.discard(code)

    def set_modifiers(self, modifiers: Modifiers) -> None:
        self._modifiers = modifiers

    def frame(self, time_ms: float) -> FrameInput:
        """Snapshot the accumulated input for one frame."""
        return FrameInput(
            time_ms=time_ms,
            pointer=self._pointer,
            pointer_down=self._pointer_down,
            pressed=self._pressed,
            released=self._released,
            delta=Point(self._dx, self._dy),
            wheel=self._wheel,
            keys_down=frozenset(self._keys_down),
            keys_pressed=frozenset(self._keys_pressed),
            keys_released=frozenset(self._keys_released),
            modifiers=self._modifiers,
        )

    def clear_edges(self) -> None:
        """Forget the edges consumed by the last frame."""
        self._pressed = False
        self._released = False
        self._dx = 0.0
        self._dy = 0.0
        self._wheel = 0.0
        self._keys_pressed.clear()
        self._keys_released.clear()
