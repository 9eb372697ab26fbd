"""Change notification for settings.

Listeners are plain callables receiving a ChangeEvent. They run
synchronously, in registration order, on the thread that changed the
property. An exception raised by a listener is not caught: it stops the
notification and propagates to whoever changed the property.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from llanfair.settings.errors import InvalidListenerError


@dataclass(frozen=True)
class ChangeEvent:
    """Notification that the value of a property has changed."""

    source: Any
    name: str


ChangeListener = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """Ordered set of change listeners."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a listener; registering it twice has no further effect.

        Raises:
            InvalidListenerError: If listener is None or not callable
        """
        if listener is None or not callable(listener):
            raise InvalidListenerError(f"listener is not callable: {listener!r}")
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        """Unregister a listener; unknown listeners are ignored.

        Raises:
            InvalidListenerError: If listener is None
        """
        if listener is None:
            raise InvalidListenerError("listener is None")
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self, source: Any, name: str) -> None:
        """Call every listener with a ChangeEvent for the named property."""
        event = ChangeEvent(source, name)
        # Listeners may add or remove listeners while being notified
        for listener in list(self._listeners):
            listener(event)

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners
