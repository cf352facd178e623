"""Hook facade handed to application code.

``FeatureTour.get_navigator()`` is how view-models and commands take part in
a tour without holding a reference to the run:

    navigator = FeatureTour.get_navigator()
    handle = navigator.on_step_entering("open-settings").execute(lambda step: open_settings())
    navigator.if_current_step_equals("open-settings").go_next()
    handle.release()

Hook callbacks receive the ``Step`` they were fired for. Registration with an
empty step id yields a null object that accepts calls and does nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TYPE_CHECKING

from featuretour.models import Step
from featuretour.services.action_repository import ReleaseHandle

from .context import HookCategory, TourContext, get_tour_context, hook_key

if TYPE_CHECKING:  # pragma: no cover
    from featuretour.tour_run import TourRun

__all__ = [
    "FeatureTour",
    "TourExecution",
    "NullTourExecution",
    "TourDoable",
    "NullTourDoable",
    "TourNavigator",
    "NullTourNavigator",
]

_logger = logging.getLogger(__name__)

StepCallback = Callable[[Optional[Step]], Any]
StepPredicate = Callable[[Optional[Step]], bool]


class TourExecution:
    def __init__(self, context: TourContext, step_id: Optional[str], category: HookCategory):
        self._context = context
        self._key = hook_key(step_id, category)

    def execute(self, callback: StepCallback) -> ReleaseHandle:
        return self._context.hooks.add_execute(self._key, callback)


class NullTourExecution(TourExecution):
    def __init__(self) -> None:
        pass

    def execute(self, callback: StepCallback) -> ReleaseHandle:
        return ReleaseHandle.EMPTY


class TourDoable:
    def __init__(self, context: TourContext, step_id: str):
        self._context = context
        self._key = hook_key(step_id, HookCategory.DOABLE)

    def attach_doable(
        self, action: StepCallback, can_do: Optional[StepPredicate] = None
    ) -> ReleaseHandle:
        """Offer a "Do it!" action for the step; without ``can_do`` it is always enabled."""
        guard = can_do if can_do is not None else (lambda _step: True)
        return self._context.doables.add_execute_with_guard(self._key, action, guard)


class NullTourDoable(TourDoable):
    def __init__(self) -> None:
        pass

    def attach_doable(
        self, action: StepCallback, can_do: Optional[StepPredicate] = None
    ) -> ReleaseHandle:
        return ReleaseHandle.EMPTY


class TourNavigator:
    """Navigation on a specific run, obtained through ``if_current_step_equals``."""

    def __init__(self, run: "TourRun"):
        self._run = run

    def go_next(self) -> bool:
        return self._run.next_step()

    def go_previous(self) -> bool:
        return self._run.previous_step()

    def close(self) -> None:
        self._run.close()


class NullTourNavigator(TourNavigator):
    def __init__(self) -> None:
        pass

    def go_next(self) -> bool:
        return False

    def go_previous(self) -> bool:
        return False

    def close(self) -> None:
        return None


class FeatureTour:
    """Facade over a ``TourContext`` (the default one unless given)."""

    def __init__(self, context: TourContext):
        self._context = context

    @classmethod
    def get_navigator(cls, context: Optional[TourContext] = None) -> "FeatureTour":
        return cls(context or get_tour_context())

    @property
    def context(self) -> TourContext:
        return self._context

    @property
    def current_step(self) -> Optional[Step]:
        return self._context.current_step

    # Hooks ----------------------------------------------------------
    def _execution(self, step_id: Optional[str], category: HookCategory) -> TourExecution:
        if not step_id:
            return NullTourExecution()
        return TourExecution(self._context, step_id, category)

    def on_step_entering(self, step_id: Optional[str]) -> TourExecution:
        return self._execution(step_id, HookCategory.ENTERING)

    def on_step_entered(self, step_id: Optional[str]) -> TourExecution:
        return self._execution(step_id, HookCategory.ENTERED)

    def on_step_left(self, step_id: Optional[str]) -> TourExecution:
        return self._execution(step_id, HookCategory.LEFT)

    def on_closed(self) -> TourExecution:
        return TourExecution(self._context, None, HookCategory.CLOSED)

    def for_step(self, step_id: Optional[str]) -> TourDoable:
        if not step_id:
            return NullTourDoable()
        return TourDoable(self._context, step_id)

    # Navigation -------------------------------------------------------
    def if_current_step_equals(self, step_id: Optional[str]) -> TourNavigator:
        run = self._context.current_run
        if run is None or not step_id:
            return NullTourNavigator()
        step = run.current_step
        if step is None or step.id != step_id:
            _logger.debug("if_current_step_equals: '%s' is not the current step", step_id)
            return NullTourNavigator()
        return TourNavigator(run)

    def close(self) -> bool:
        run = self._context.current_run
        if run is None:
            return False
        run.close()
        return True
