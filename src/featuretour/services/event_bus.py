"""Synchronous tour event bus.

The tour run announces its lifecycle here (started, step changed, step
unresolved, closed) and the headless window manager delivers activation
changes through it. Handlers run in subscription order on the publishing
thread. A handler that raises is logged and recorded in ``errors``; the
remaining handlers still run.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Callable, Deque, Dict, List, Tuple, Union

__all__ = [
    "TourEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
]

_logger = logging.getLogger(__name__)

# Handler failures kept for inspection; older ones are dropped
MAX_ERRORS = 100


class TourEvent(str, Enum):
    TOUR_STARTED = "tour_started"
    STEP_CHANGED = "step_changed"
    STEP_UNRESOLVED = "step_unresolved"
    TOUR_CLOSED = "tour_closed"
    WINDOW_ACTIVATED = "window_activated"
    WINDOW_DEACTIVATED = "window_deactivated"
    WINDOW_REMOVED = "window_removed"
    LOG_RECORD_ADDED = "log_record_added"


EventName = Union[str, TourEvent]


@dataclass(frozen=True)
class Event:
    name: str
    payload: Any = None
    timestamp: float = field(default_factory=perf_counter)


EventHandler = Callable[[Event], None]


@dataclass(eq=False)
class Subscription:
    event: str
    handler: EventHandler
    once: bool = False
    active: bool = True

    def cancel(self) -> None:
        """Stop delivery without removing the entry; ``unsubscribe`` also removes it."""
        self.active = False


def _event_key(name: EventName) -> str:
    return name.value if isinstance(name, TourEvent) else name


class EventBus:
    """Publish/subscribe keyed by event name.

    The subscription table is guarded by a re-entrant lock that is released
    before handlers run, so handlers may subscribe, unsubscribe or publish.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._by_event: Dict[str, List[Subscription]] = {}
        self._errors: Deque[Tuple[Event, BaseException]] = deque(maxlen=MAX_ERRORS)

    def subscribe(
        self, name: EventName, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(_event_key(name), handler, once)
        with self._lock:
            self._by_event.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        sub.active = False
        with self._lock:
            remaining = [s for s in self._by_event.get(sub.event, ()) if s is not sub]
            if remaining:
                self._by_event[sub.event] = remaining
            else:
                self._by_event.pop(sub.event, None)

    def publish(self, name: EventName, payload: Any = None) -> Event:
        event = Event(_event_key(name), payload)
        with self._lock:
            targets = tuple(self._by_event.get(event.name, ()))
        for sub in targets:
            if not sub.active:
                continue
            if sub.once:
                self.unsubscribe(sub)
            try:
                sub.handler(event)
            except Exception as exc:
                _logger.exception("Handler for '%s' failed", event.name)
                with self._lock:
                    self._errors.append((event, exc))
        return event

    def subscriber_count(self, name: EventName) -> int:
        with self._lock:
            return len(self._by_event.get(_event_key(name), ()))

    @property
    def errors(self) -> List[Tuple[Event, BaseException]]:
        with self._lock:
            return list(self._errors)

    def clear(self) -> None:
        """Drop every subscription and recorded error."""
        with self._lock:
            self._by_event.clear()
            self._errors.clear()
