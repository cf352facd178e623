"""Tour run state machine.

A ``TourRun`` walks a ``Tour`` step by step: it fires the navigator hooks,
resolves each step's anchor, points the overlay at it and fills the popup's
view-model. It also follows window activation so the popup moves to (or hides
from) dialogs that open during the tour.

Lifecycle: ``NOT_STARTED -> ACTIVE -> CLOSED``. A closed run cannot be
restarted; build a new one.

Re-entrancy: hooks run synchronously inside a transition and often navigate
(an "entering" hook that closes the tour, a dialog opened by an "entered" hook
that activates another window). Such requests are queued and executed in
order once the running transition has finished. Queued requests are
discarded when the run closes.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Hashable, List, Optional

from featuretour import i18n

from .anchors import AnchorResolver
from .models import Step, StepNode, Tour, TourValidationError, build_step_chain
from .models import WindowTransitionBehavior as Behavior
from .navigation.context import TourContext, get_tour_context
from .overlay import OverlayPresenter
from .services.event_bus import Subscription, TourEvent
from .viewmodels.tour_viewmodel import TourViewModel
from .windows import WindowActivationChanged, WindowCoordinator

__all__ = ["RunState", "TransitionResult", "TourRun", "start_tour"]

_logger = logging.getLogger(__name__)


class RunState(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    CLOSED = "closed"


class TransitionResult(Enum):
    SHOW = "show"
    HIDE = "hide"
    NOTHING = "nothing"


class TourRun:
    def __init__(
        self,
        tour: Tour,
        resolver: AnchorResolver,
        windows: WindowCoordinator,
        overlay: OverlayPresenter,
        context: Optional[TourContext] = None,
    ) -> None:
        if tour is None:
            raise TourValidationError("tour must not be None")
        tour.validate()
        for name, value in (("resolver", resolver), ("windows", windows), ("overlay", overlay)):
            if value is None:
                raise ValueError(f"{name} must not be None")
        self._tour = tour
        self._resolver = resolver
        self._windows = windows
        self._overlay = overlay
        self._context = context or get_tour_context()

        self._first = build_step_chain(tour.steps)
        self._current: StepNode = self._first
        self._total = len(tour.steps)
        self._state = RunState.NOT_STARTED
        self._view_model: Optional[TourViewModel] = None

        self._pending: Deque[Callable[[], Any]] = deque()
        self._in_transition = False

        self._window_id: Optional[Hashable] = windows.active_window_id()
        self._subscriptions: List[Subscription] = [
            windows.subscribe_activated(self._on_window_activated),
            windows.subscribe_deactivated(self._on_window_deactivated),
            windows.subscribe_removed(self._on_window_removed),
        ]

    # Accessors --------------------------------------------------------
    @property
    def tour(self) -> Tour:
        return self._tour

    @property
    def context(self) -> TourContext:
        return self._context

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is RunState.ACTIVE

    @property
    def current_node(self) -> StepNode:
        return self._current

    @property
    def current_step(self) -> Step:
        return self._current.step

    @property
    def current_step_no(self) -> int:
        return self._current.step_no

    @property
    def total_steps(self) -> int:
        return self._total

    @property
    def view_model(self) -> Optional[TourViewModel]:
        return self._view_model

    @property
    def current_window_id(self) -> Optional[Hashable]:
        return self._window_id

    # Lifecycle --------------------------------------------------------
    def start(self) -> bool:
        """Show the first step. Returns False (and closes the run) if it cannot be shown."""
        if self._state is not RunState.NOT_STARTED:
            raise RuntimeError(
                f"Tour '{self._tour.name}' can only be started once (state={self._state.value})"
            )
        _logger.info("Starting tour '%s' (%d steps)", self._tour.name, self._total)
        self._view_model = self._context.create_view_model(self)
        self._overlay.begin_tour(self._view_model)
        self._state = RunState.ACTIVE
        self._context.event_bus.publish(TourEvent.TOUR_STARTED, self)
        shown = self._transition(lambda: self._set_step(self._first))
        if not shown and self.is_active:
            _logger.warning("Tour '%s' could not show its first step; closing", self._tour.name)
            self.close()
            return False
        return self.is_active

    def close(self) -> None:
        if self._state is RunState.CLOSED:
            return
        self._transition(self._close)

    def close_now(self) -> None:
        """Close at once, even from inside a running transition; queued requests are dropped.

        Used when another run takes over the overlay.
        """
        self._pending.clear()
        self._close()

    def _close(self) -> bool:
        if self._state is RunState.CLOSED:
            return False
        was_started = self._state is RunState.ACTIVE
        self._state = RunState.CLOSED
        self._pending.clear()
        if was_started:
            self._overlay.end_tour()
        for sub in self._subscriptions:
            self._windows.unsubscribe(sub)
        self._subscriptions.clear()
        step = self._current.step
        self._context.fire_left(step)
        self._context.fire_closed(step)
        self._context.clear_current_run(self)
        _logger.info("Tour '%s' closed at step '%s'", self._tour.name, step.id)
        self._context.event_bus.publish(TourEvent.TOUR_CLOSED, self)
        return True

    # Navigation -------------------------------------------------------
    def next_step(self, include_unloaded: bool = False) -> bool:
        return self._transition(lambda: self._set_step(self._current.next, include_unloaded))

    def previous_step(self) -> bool:
        return self._transition(lambda: self._set_step(self._current.previous))

    def set_step(self, target: Optional[StepNode], include_unloaded: bool = False) -> bool:
        return self._transition(lambda: self._set_step(target, include_unloaded))

    def go_to(self, step_id: str) -> bool:
        """Jump to the step with ``step_id``; False if the tour has no such step."""
        node: Optional[StepNode] = self._first
        while node is not None and node.step.id != step_id:
            node = node.next
        if node is None:
            _logger.debug("go_to: tour '%s' has no step '%s'", self._tour.name, step_id)
            return False
        return self.set_step(node)

    def can_next_step(self) -> bool:
        return self._can_go_to(self._current.next)

    def can_previous_step(self) -> bool:
        return self._can_go_to(self._current.previous)

    def _can_go_to(self, node: Optional[StepNode]) -> bool:
        if node is None:
            return False
        if self._tour.enable_next_button_always:
            return True
        if self._context.has_entering(node.step):
            # the hook is expected to make the anchor available
            return True
        anchor = self._resolver.resolve(node.step.anchor_id, True)
        return anchor is not None and anchor.window_id == self._window_id

    # Doables ----------------------------------------------------------
    def do_it(self) -> None:
        self._context.do(self._current.step)

    def can_do_it(self) -> bool:
        return self._context.can_do(self._current.step)

    def show_do_it(self) -> bool:
        return self._context.has_doable(self._current.step)

    # Transitions ------------------------------------------------------
    def _transition(self, action: Callable[[], Any]) -> Any:
        if self._in_transition:
            _logger.debug("Transition in progress; request deferred")
            self._pending.append(action)
            return False
        self._in_transition = True
        try:
            result = action()
        except BaseException:
            self._pending.clear()
            raise
        finally:
            self._in_transition = False
        self._drain_pending()
        return result

    def _drain_pending(self) -> None:
        while self._pending and not self._in_transition:
            self._transition(self._pending.popleft())

    def _set_step(self, target: Optional[StepNode], include_unloaded: bool = False) -> bool:
        if self._state is not RunState.ACTIVE:
            _logger.debug("set_step ignored; tour '%s' is %s", self._tour.name, self._state.value)
            return False
        if target is None:
            _logger.debug("set_step: no target step")
            return False
        if target is not self._current:
            self._context.fire_left(self._current.step)
            self._current = target
        node = self._current
        step = node.step
        _logger.debug("set_step: '%s' (%d/%d)", step.id, node.step_no, self._total)
        self._context.fire_entering(step)
        if self._state is not RunState.ACTIVE:
            # a hook started another tour; the overlay is no longer ours
            return False

        anchor = self._resolver.resolve(step.anchor_id, include_unloaded)
        if anchor is None:
            _logger.warning(
                "Step '%s' of tour '%s': anchor '%s' could not be resolved",
                step.id,
                self._tour.name,
                step.anchor_id,
            )
            self._context.event_bus.publish(TourEvent.STEP_UNRESOLVED, step)
            return False

        with self._overlay.move_to(anchor):
            self._populate_view_model(node, anchor)
            self._context.fire_entered(step)
        if self._state is not RunState.ACTIVE:
            return False
        self._context.event_bus.publish(TourEvent.STEP_CHANGED, step)
        return True

    def _populate_view_model(self, node: StepNode, anchor: Any) -> None:
        vm = self._view_model
        if vm is None:
            return
        step = node.step
        vm.header = step.header
        vm.content = step.content
        vm.header_template = anchor.find_template(step.header_template_key)
        vm.content_template = anchor.find_template(step.content_template_key)
        vm.steps_label = i18n.t(i18n.STEPS, current=node.step_no, total=self._total)
        vm.current_step_no = node.step_no
        vm.total_steps_count = self._total
        vm.show_do_it = self.show_do_it()
        if step.show_next_button is not None:
            vm.show_next = step.show_next_button
        else:
            vm.show_next = self._tour.show_next_button_default
        if node.next is None:
            vm.set_close_text()
        else:
            vm.set_next_text()
        vm.placement = anchor.placement

    # Window notifications -------------------------------------------
    def _on_window_activated(self, args: WindowActivationChanged) -> None:
        if self._state is not RunState.ACTIVE:
            return
        previous = self._window_id
        if args.window_id == previous:
            return
        self._window_id = args.window_id
        _logger.debug("Window activated: '%s' (was '%s')", args.window_id, previous)
        if self._in_transition:
            self._pending.append(lambda: self._apply(self._handle_window_transition(previous)))
            return
        result = self._transition(lambda: self._handle_window_transition(previous))
        if result is TransitionResult.SHOW:
            args.allow_show = True
        elif result is TransitionResult.HIDE:
            args.allow_show = False

    def _on_window_deactivated(self, args: WindowActivationChanged) -> None:
        _logger.debug("Window deactivated: '%s'", args.window_id)

    def _on_window_removed(self, args: WindowActivationChanged) -> None:
        if args.window_id == self._window_id:
            self._window_id = self._windows.active_window_id()

    def _apply(self, result: TransitionResult) -> TransitionResult:
        if self._state is not RunState.ACTIVE:
            return result
        if result is TransitionResult.SHOW:
            self._overlay.show()
        elif result is TransitionResult.HIDE:
            self._overlay.hide()
        return result

    def _handle_window_transition(self, previous_window: Optional[Hashable]) -> TransitionResult:
        if self._state is not RunState.ACTIVE:
            return TransitionResult.NOTHING
        node = self._current
        window_id = self._window_id
        anchor = self._resolver.resolve(node.step.anchor_id, False)
        if anchor is None:
            _logger.warning(
                "Window transition: anchor '%s' of the current step is gone", node.step.anchor_id
            )
            return TransitionResult.NOTHING
        if anchor.window_id == window_id:
            return TransitionResult.SHOW

        behavior = anchor.transition
        if behavior is Behavior.NONE:
            return TransitionResult.NOTHING
        if behavior is Behavior.AUTOMATIC:
            if self._windows.is_ancestor_window(previous_window, window_id):
                behavior = Behavior.NEXT_HIDE
            else:
                behavior = Behavior.NEXT_PREVIOUS_HIDE
        _logger.debug("Window transition for step '%s' using %s", node.step.id, behavior.value)

        if behavior.tries_next and node.next is not None:
            next_anchor = self._resolver.resolve(node.next.step.anchor_id, True)
            if next_anchor is not None and next_anchor.window_id == window_id:
                self._set_step(node.next, True)
                return TransitionResult.SHOW

        if behavior.tries_previous:
            candidate = node.previous
            while candidate is not None:
                prev_anchor = self._resolver.resolve(candidate.step.anchor_id, True)
                if prev_anchor is not None and prev_anchor.window_id == window_id:
                    self._set_step(candidate)
                    return TransitionResult.SHOW
                candidate = candidate.previous

        return TransitionResult.HIDE


def start_tour(
    tour: Tour,
    resolver: AnchorResolver,
    windows: WindowCoordinator,
    overlay: OverlayPresenter,
    *,
    context: Optional[TourContext] = None,
) -> TourRun:
    """Create a run, make it the context's current run and start it.

    Any run that was current before is closed first. Check ``run.is_active``
    to find out whether the first step could be shown.
    """
    ctx = context or get_tour_context()
    run = TourRun(tour, resolver, windows, overlay, ctx)
    ctx.set_current_run(run)
    run.start()
    return run
