"""Tour session context.

A ``TourContext`` owns everything that used to be process-wide in a tour
engine: the hook registry, the doable registry, the pointer to the run that is
currently shown and the factory creating the popup's view-model. Hosts that
want isolation create their own context and hand it to ``start_tour`` and
``FeatureTour.get_navigator``; everybody else shares the default context kept
in the service locator.

At most one run is current per context. Making a new run current closes the
previous one first (last writer wins), immediately, even when that happens
from one of the previous run's own hooks.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Hashable, Optional, TYPE_CHECKING

from featuretour.models import Step
from featuretour.services.action_repository import ActionRepository
from featuretour.services.event_bus import EventBus
from featuretour.services.service_locator import EVENT_BUS, TOUR_CONTEXT, services
from featuretour.viewmodels.tour_viewmodel import TourViewModel

if TYPE_CHECKING:  # pragma: no cover
    from featuretour.tour_run import TourRun

__all__ = [
    "HookCategory",
    "TourContext",
    "ViewModelFactory",
    "hook_key",
    "get_tour_context",
    "reset_tour_context",
]

_logger = logging.getLogger(__name__)

ViewModelFactory = Callable[["TourRun"], TourViewModel]


class HookCategory(str, Enum):
    ENTERING = "entering"
    ENTERED = "entered"
    LEFT = "left"
    CLOSED = "closed"
    DOABLE = "doable"


def hook_key(step_id: Optional[str], category: HookCategory) -> Hashable:
    return (step_id, category)


class TourContext:
    def __init__(self, *, event_bus: Optional[EventBus] = None) -> None:
        self.hooks = ActionRepository()
        self.doables = ActionRepository()
        self.event_bus = event_bus or EventBus()
        self._current_run: Optional["TourRun"] = None
        self._view_model_factory: Optional[ViewModelFactory] = None

    # Current run --------------------------------------------------
    @property
    def current_run(self) -> Optional["TourRun"]:
        return self._current_run

    @property
    def current_step(self) -> Optional[Step]:
        run = self._current_run
        return run.current_step if run is not None else None

    def set_current_run(self, run: Optional["TourRun"]) -> None:
        previous = self._current_run
        if previous is not None and previous is not run:
            previous.close_now()
        self._current_run = run

    def clear_current_run(self, run: "TourRun") -> None:
        if self._current_run is run:
            self._current_run = None

    # View-model factory -------------------------------------------
    def set_view_model_factory(self, factory: Optional[ViewModelFactory]) -> None:
        """Install a factory for sub-classed view-models; None restores the default."""
        self._view_model_factory = factory

    def create_view_model(self, run: "TourRun") -> TourViewModel:
        factory = self._view_model_factory
        return TourViewModel(run) if factory is None else factory(run)

    # Hook dispatch ------------------------------------------------
    def _fire(self, category: HookCategory, step: Optional[Step]) -> None:
        if step is None:
            return
        key = hook_key(step.id, category)
        _logger.debug("on_step_%s: '%s'", category.value, step.id)
        self.hooks.execute(key, step)

    def fire_entering(self, step: Optional[Step]) -> None:
        self._fire(HookCategory.ENTERING, step)

    def fire_entered(self, step: Optional[Step]) -> None:
        self._fire(HookCategory.ENTERED, step)

    def fire_left(self, step: Optional[Step]) -> None:
        self._fire(HookCategory.LEFT, step)

    def fire_closed(self, step: Optional[Step]) -> None:
        _logger.debug("on_closed")
        self.hooks.execute(hook_key(None, HookCategory.CLOSED), step)

    def has_entering(self, step: Step) -> bool:
        return self.hooks.contains(hook_key(step.id, HookCategory.ENTERING))

    # Doables ------------------------------------------------------
    def do(self, step: Step) -> None:
        _logger.debug("do: '%s'", step.id)
        self.doables.execute(hook_key(step.id, HookCategory.DOABLE), step)

    def can_do(self, step: Step) -> bool:
        return self.doables.can_execute(hook_key(step.id, HookCategory.DOABLE), step)

    def has_doable(self, step: Step) -> bool:
        return self.doables.contains(hook_key(step.id, HookCategory.DOABLE))

    def clear(self) -> None:
        """Drop every registered hook and doable."""
        self.hooks.clear()
        self.doables.clear()


def get_tour_context() -> TourContext:
    return services.get_or_create(
        TOUR_CONTEXT, lambda: TourContext(event_bus=services.try_get(EVENT_BUS))
    )


def reset_tour_context() -> TourContext:
    """Close the current run of the default context and replace the context."""
    old: Any = services.try_get(TOUR_CONTEXT)
    if old is not None:
        old.set_current_run(None)
    services.unregister(TOUR_CONTEXT)
    return get_tour_context()
