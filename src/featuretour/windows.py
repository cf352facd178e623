"""Window coordination contract and a headless window manager.

The tour run needs three things from the windowing layer: the id of the
currently active window, whether one window is an ancestor of another (to
decide what an ``AUTOMATIC`` transition means) and notifications when windows
get activated, deactivated or removed.

``WindowManager`` implements that contract without any toolkit: the host
forwards its native focus events to ``activate`` / ``deactivate`` /
``remove_window``. Activation handlers may veto or request showing the popup
through the mutable ``allow_show`` flag of ``WindowActivationChanged``; the
final value is applied to the attached overlay. ``None`` means no handler
decided and the overlay keeps its visibility.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Protocol

from featuretour import settings

from .overlay import OverlayPresenter
from .services.event_bus import EventBus, Subscription, TourEvent

__all__ = [
    "WindowActivationChanged",
    "WindowHandler",
    "WindowCoordinator",
    "WindowManager",
]

_logger = logging.getLogger(__name__)


@dataclass
class WindowActivationChanged:
    window_id: Hashable
    allow_show: Optional[bool] = None


WindowHandler = Callable[[WindowActivationChanged], None]


class WindowCoordinator(Protocol):
    def active_window_id(self) -> Hashable: ...

    def is_ancestor_window(self, ancestor: Hashable, descendant: Hashable) -> bool: ...

    def subscribe_activated(self, handler: WindowHandler) -> Subscription: ...

    def subscribe_deactivated(self, handler: WindowHandler) -> Subscription: ...

    def subscribe_removed(self, handler: WindowHandler) -> Subscription: ...

    def unsubscribe(self, subscription: Subscription) -> None: ...


class WindowManager:
    """Tracks known windows, the active one and their ancestry.

    Ancestry: a window registered with an explicit ``parent`` is a descendant
    of every window on its parent chain. Windows registered without a parent
    fall back to registration order (earlier windows are ancestors of later
    ones), matching how dialogs are opened on top of the main window.
    """

    def __init__(
        self,
        *,
        main_window_id: Hashable = settings.MAIN_WINDOW_ID,
        overlay: Optional[OverlayPresenter] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._bus = event_bus or EventBus()
        self._overlay = overlay
        self._order: List[Hashable] = []
        self._parents: Dict[Hashable, Optional[Hashable]] = {}
        self._active: Optional[Hashable] = None
        self.register_window(main_window_id)
        self._active = main_window_id

    def attach_overlay(self, overlay: Optional[OverlayPresenter]) -> None:
        self._overlay = overlay

    # Registry -----------------------------------------------------
    def register_window(self, window_id: Hashable, parent: Optional[Hashable] = None) -> None:
        if window_id in self._parents:
            return
        self._order.append(window_id)
        self._parents[window_id] = parent

    def known_windows(self) -> List[Hashable]:
        return list(self._order)

    def remove_window(self, window_id: Hashable) -> None:
        if window_id not in self._parents:
            return
        self._order.remove(window_id)
        del self._parents[window_id]
        if self._active == window_id:
            self._active = None
        _logger.debug("Window '%s' removed", window_id)
        self._bus.publish(TourEvent.WINDOW_REMOVED, WindowActivationChanged(window_id, False))

    # Coordinator contract -------------------------------------------
    def active_window_id(self) -> Optional[Hashable]:
        return self._active

    def is_ancestor_window(self, ancestor: Hashable, descendant: Hashable) -> bool:
        if ancestor not in self._parents or descendant not in self._parents:
            return False
        if ancestor == descendant:
            return False
        parent = self._parents[descendant]
        if parent is not None:
            seen = set()
            while parent is not None and parent not in seen:
                if parent == ancestor:
                    return True
                seen.add(parent)
                parent = self._parents.get(parent)
            return False
        return self._order.index(ancestor) < self._order.index(descendant)

    def subscribe_activated(self, handler: WindowHandler) -> Subscription:
        return self._bus.subscribe(TourEvent.WINDOW_ACTIVATED, lambda evt: handler(evt.payload))

    def subscribe_deactivated(self, handler: WindowHandler) -> Subscription:
        return self._bus.subscribe(TourEvent.WINDOW_DEACTIVATED, lambda evt: handler(evt.payload))

    def subscribe_removed(self, handler: WindowHandler) -> Subscription:
        return self._bus.subscribe(TourEvent.WINDOW_REMOVED, lambda evt: handler(evt.payload))

    def unsubscribe(self, subscription: Subscription) -> None:
        self._bus.unsubscribe(subscription)

    def subscriber_count(self, event: TourEvent) -> int:
        return self._bus.subscriber_count(event)

    # Host notifications ---------------------------------------------
    def activate(self, window_id: Hashable) -> Optional[bool]:
        """Mark ``window_id`` active and apply the handlers' show/hide decision.

        Returns ``None`` when no handler decided; the overlay is left as it is.
        """
        if window_id in self._parents:
            self._active = window_id
        show = self._notify(TourEvent.WINDOW_ACTIVATED, window_id, None)
        self._apply(show)
        return show

    def deactivate(self, window_id: Hashable) -> Optional[bool]:
        # The popup stays on top of other applications, so it is hidden unless a handler objects
        show = self._notify(TourEvent.WINDOW_DEACTIVATED, window_id, False)
        self._apply(show)
        return show

    def notify_geometry_changed(self) -> None:
        """Forward window move / resize so the popup can follow its anchor."""
        if self._overlay is not None:
            self._overlay.reposition_if_needed()

    def _notify(
        self, event: TourEvent, window_id: Hashable, default: Optional[bool]
    ) -> Optional[bool]:
        if window_id not in self._parents:
            _logger.debug("Ignoring %s for unknown window '%s'", event.value, window_id)
            return default
        args = WindowActivationChanged(window_id, default)
        self._bus.publish(event, args)
        return args.allow_show

    def _apply(self, show: Optional[bool]) -> None:
        if self._overlay is None or show is None:
            return
        if show:
            self._overlay.show()
        else:
            self._overlay.hide()
