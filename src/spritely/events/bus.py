"""Synchronous event bus carrying merge run lifecycle events."""

from __future__ import annotations

from typing import Any, Callable

Listener = Callable[[Any], None]


class EventBus:
    """Publish-subscribe bus dispatching in registration order.

    A listener subscribed to a class also receives events of its
    subclasses; ``on_all`` listeners receive everything first.
    """

    def __init__(self) -> None:
        self._listeners: dict[type, list[Listener]] = {}
        self._global_listeners: list[Listener] = []

    def subscribe(self, event_type: type, callback: Listener) -> None:
        """Register *callback* for *event_type* and its subclasses."""
        self._listeners.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: type, callback: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def on_all(self, callback: Listener) -> None:
        """Register *callback* for every event."""
        self._global_listeners.append(callback)

    def emit(self, event: Any) -> None:
        for cb in self._global_listeners:
            cb(event)
        for klass in type(event).__mro__:
            for cb in self._listeners.get(klass, []):
                cb(event)
