"""EventBus — pub/sub between the auto-switcher and its listeners."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable

from spellswitch.core.events import Event, EventType

logger = logging.getLogger(__name__)


class EventBus:
    """Lightweight synchronous pub/sub bus.

    A failing handler is logged and skipped; the remaining handlers still
    receive the event.
    """

    def __init__(self):
        self._handlers: dict[EventType, list[Callable[[Event], None]]] = defaultdict(list)

    def subscribe(self, event_type: EventType, handler: Callable[[Event], None]) -> None:
        """Register a handler for an event type."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: Callable[[Event], None]) -> None:
        """Remove a previously registered handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handler_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(event_type, ()))

    def publish(self, event: Event) -> None:
        """Dispatch event to all registered handlers synchronously."""
        for handler in list(self._handlers.get(event.type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception("EventBus handler error for %s", event.type)
