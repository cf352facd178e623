"""Registry of the engine's shared default objects.

Only callers that rely on defaults go through here: ``get_tour_context()``
lazily creates the default ``TourContext``, ``get_diagnostics_service()`` the
log ring buffer, and both pick up an ``EventBus`` a host registered under
``EVENT_BUS``. Hosts that pass a ``TourContext`` explicitly never touch it.

    services.register(EVENT_BUS, EventBus())
    ctx = services.get_or_create(TOUR_CONTEXT, TourContext)

In tests:
    with services.override(event_bus=EventBus()):
        ...
"""

from __future__ import annotations

from contextlib import contextmanager
from threading import RLock
from typing import Any, Callable, Dict, Generator, TypeVar

T = TypeVar("T")

__all__ = [
    "ServiceLocator",
    "services",
    "ServiceAlreadyRegisteredError",
    "ServiceNotFoundError",
    "TOUR_CONTEXT",
    "EVENT_BUS",
    "DIAGNOSTICS",
]

TOUR_CONTEXT = "tour_context"
EVENT_BUS = "event_bus"
DIAGNOSTICS = "diagnostics_service"

_MISSING = object()


class ServiceAlreadyRegisteredError(RuntimeError):
    """Raised when registering over an existing key without ``allow_override``."""


class ServiceNotFoundError(KeyError):
    """Raised by ``get`` for an unknown key."""


class ServiceLocator:
    def __init__(self) -> None:
        self._lock = RLock()
        self._services: Dict[str, Any] = {}

    def register(self, key: str, value: Any, *, allow_override: bool = False) -> None:
        with self._lock:
            if key in self._services and not allow_override:
                raise ServiceAlreadyRegisteredError(f"Service '{key}' already registered")
            self._services[key] = value

    def get(self, key: str) -> Any:
        with self._lock:
            value = self._services.get(key, _MISSING)
        if value is _MISSING:
            raise ServiceNotFoundError(key)
        return value

    def try_get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._services.get(key, default)

    def get_or_create(self, key: str, factory: Callable[[], T]) -> T:
        """Return the service under ``key``, registering ``factory()`` on first use."""
        with self._lock:
            value = self._services.get(key, _MISSING)
            if value is _MISSING:
                value = factory()
                self._services[key] = value
            return value

    @contextmanager
    def override(self, **overrides: Any) -> Generator[None, None, None]:
        """Temporarily replace services; previous values (or absence) come back on exit."""
        with self._lock:
            previous = {key: self._services.get(key, _MISSING) for key in overrides}
            self._services.update(overrides)
        try:
            yield
        finally:
            with self._lock:
                for key, prior in previous.items():
                    if prior is _MISSING:
                        self._services.pop(key, None)
                    else:
                        self._services[key] = prior

    def unregister(self, key: str) -> None:
        with self._lock:
            self._services.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._services.clear()


# Process-wide instance
services = ServiceLocator()
