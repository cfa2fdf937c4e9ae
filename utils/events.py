"""events.py - Minimal synchronous event emitter for entities."""

from __future__ import annotations

from typing import Callable


class EventEmitter:
    """Named events with ordered, synchronous listeners."""

    def __init__(self):
        self._listeners: dict[str, list[Callable]] = {}

    def on(self, event: str, handler: Callable) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Callable) -> None:
        handlers = self._listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, *args) -> None:
        for handler in list(self._listeners.get(event, ())):
            handler(*args)
