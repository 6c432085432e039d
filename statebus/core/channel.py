from __future__ import annotations

import logging
from typing import Any, Callable


logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class NotificationChannel:
    """Synchronous, ordered pub/sub keyed by event name.

    `emit` calls every listener registered for the event right away, in
    subscription order. Nothing is queued or batched. A listener that raises is
    logged and skipped so the remaining listeners (and the caller) still run.
    """

    def __init__(self, name: str = "channel") -> None:
        self.name = name
        self._handlers: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """Subscribe `listener` to `event`; returns a callable that unsubscribes it."""

        if not callable(listener):
            raise TypeError(f"listener must be callable, got {listener!r}")
        self._handlers.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        handlers = self._handlers.get(event)
        if not handlers:
            return
        try:
            handlers.remove(listener)
        except ValueError:
            return
        if not handlers:
            del self._handlers[event]

    def listeners(self, event: str) -> list[Listener]:
        return list(self._handlers.get(event, ()))

    def emit(self, event: str, *args: Any) -> None:
        # Snapshot so listeners may (un)subscribe while being notified.
        for listener in tuple(self._handlers.get(event, ())):
            try:
                listener(*args)
            except Exception:
                logger.exception("listener_failed", extra={"channel": self.name, "event": event})

    def clear(self) -> None:
        self._handlers.clear()
