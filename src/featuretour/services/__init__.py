"""Service layer exports.

Responsibilities:
 - Dependency/service locator (`services`)
 - EventBus publish/subscribe core
 - Action registry backing tour hooks and doables
 - Diagnostics ring buffer over the `featuretour` loggers
"""

from .service_locator import services, ServiceLocator  # noqa: F401
from .event_bus import EventBus, TourEvent  # noqa: F401
from .action_repository import ActionRepository, ReleaseHandle  # noqa: F401
from .diagnostics import DiagnosticsService, get_diagnostics_service  # noqa: F401

__all__ = [
    "services",
    "ServiceLocator",
    "EventBus",
    "TourEvent",
    "ActionRepository",
    "ReleaseHandle",
    "DiagnosticsService",
    "get_diagnostics_service",
]
