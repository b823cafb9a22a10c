"""Snapshot stores feeding an interaction session.

Each store holds one value and delivers the full value to its subscribers
on every change; subscribers replace their cached view with it.
"""

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class SnapshotStore(Generic[T]):
    """Single-value store with full-state change callbacks.

    Example:
        >>> store = SnapshotStore({"canvasMode": "move"})
        >>> unsubscribe = store.subscribe(print)
        >>> store.set({"canvasMode": "select-points"})
        {'canvasMode': 'select-points'}
        >>> unsubscribe()
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._subscribers: list[Callable[[T], None]] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the value and notify every subscriber."""
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback.

        Returns:
            Function removing the callback
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
