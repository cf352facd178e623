"""Overlay presenter contract and a headless overlay state.

The run never draws anything. It tells an ``OverlayPresenter`` where the
popup should point (``move_to``) and whether it should be visible. The
repositioning scope returned by ``move_to`` shows the popup when it exits, on
every exit path, so an exception inside a hook cannot leave the popup hidden.

``OverlayState`` records what a real popup would display. Hosts without a
popup widget (tests, terminal front ends) can render from it directly.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Optional, Protocol

from .models import AnchorDescriptor, Placement

__all__ = ["OverlayPresenter", "OverlayState"]

_logger = logging.getLogger(__name__)


class OverlayPresenter(Protocol):
    def begin_tour(self, view_model: Any) -> None: ...

    def move_to(self, anchor: AnchorDescriptor) -> ContextManager[None]: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def end_tour(self) -> None: ...

    def reposition_if_needed(self) -> None: ...


class OverlayState:
    """Headless ``OverlayPresenter`` tracking visibility and target."""

    def __init__(self) -> None:
        self.view_model: Any = None
        self.anchor: Optional[AnchorDescriptor] = None
        self.visible = False
        self.show_count = 0
        self.hide_count = 0
        self.reposition_count = 0

    @property
    def active(self) -> bool:
        return self.view_model is not None

    @property
    def anchor_id(self) -> Optional[str]:
        return self.anchor.anchor_id if self.anchor is not None else None

    @property
    def placement(self) -> Optional[Placement]:
        return self.anchor.placement if self.anchor is not None else None

    def begin_tour(self, view_model: Any) -> None:
        self._release()
        self.view_model = view_model

    def end_tour(self) -> None:
        if not self.active:
            _logger.warning("end_tour: unable to exit tour - tour has not been started")
            return
        self._release()

    @contextmanager
    def _moved(self) -> Iterator[None]:
        try:
            yield
        finally:
            self.show()

    def move_to(self, anchor: AnchorDescriptor) -> ContextManager[None]:
        self.hide()
        _logger.debug("move_to: %s", anchor.anchor_id)
        if anchor.is_alive():
            self.anchor = anchor
        else:
            _logger.warning(
                "move_to: could not find placement target with anchor id '%s'", anchor.anchor_id
            )
            self.anchor = None
        return self._moved()

    def show(self) -> None:
        if not self.active:
            return
        if self.anchor is None or not self.anchor.is_alive():
            self.visible = False
            return
        self.visible = True
        self.show_count += 1

    def hide(self) -> None:
        if not self.active:
            return
        self.visible = False
        self.hide_count += 1

    def reposition_if_needed(self) -> None:
        if not self.active:
            return
        self.reposition_count += 1
        if self.anchor is not None and not self.anchor.is_alive():
            # anchor vanished while the popup was open
            self.visible = False

    def _release(self) -> None:
        self.visible = False
        self.anchor = None
        self.view_model = None
