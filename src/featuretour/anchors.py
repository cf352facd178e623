"""Anchor resolver contract and an in-memory anchor registry.

Presentation code registers every UI element a tour may point at under an
anchor id, together with the window it lives in. Elements on hidden tabs or
collapsed panels stay registered as *unloaded*: they are only returned when a
caller explicitly asks for unloaded anchors (e.g. to check whether the next
step could become visible).

Descriptors are built fresh on every call; the registry keeps only the
liveness probe supplied at registration, never the descriptor itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional, Protocol

from .models import AnchorDescriptor, Placement, WindowTransitionBehavior, _always_alive
from .services.event_bus import Subscription

__all__ = ["AnchorResolver", "AnchorRegistry"]

_logger = logging.getLogger(__name__)


class AnchorResolver(Protocol):
    def resolve(self, anchor_id: str, include_unloaded: bool = False) -> Optional[AnchorDescriptor]: ...

    def resolve_all(self, include_unloaded: bool = False) -> List[AnchorDescriptor]: ...


@dataclass
class _AnchorRecord:
    anchor_id: str
    window_id: Hashable
    placement: Placement
    transition: WindowTransitionBehavior
    loaded: bool
    liveness: Callable[[], bool]
    template_lookup: Optional[Callable[[str], Any]]

    def describe(self) -> AnchorDescriptor:
        return AnchorDescriptor(
            anchor_id=self.anchor_id,
            window_id=self.window_id,
            placement=self.placement,
            transition=self.transition,
            loaded=self.loaded,
            liveness=self.liveness,
            template_lookup=self.template_lookup,
        )


class AnchorRegistry:
    """Headless ``AnchorResolver`` keyed by anchor id (last registration wins)."""

    def __init__(self) -> None:
        self._records: Dict[str, _AnchorRecord] = {}
        self._removed_sub: Optional[Subscription] = None

    def attach(self, windows: Any) -> None:
        """Drop anchors of windows the coordinator reports as removed."""
        self._removed_sub = windows.subscribe_removed(lambda args: self.remove_window(args.window_id))

    def register(
        self,
        anchor_id: str,
        window_id: Hashable,
        *,
        placement: Placement = Placement.TOP_LEFT,
        transition: WindowTransitionBehavior = WindowTransitionBehavior.AUTOMATIC,
        loaded: bool = True,
        liveness: Optional[Callable[[], bool]] = None,
        template_lookup: Optional[Callable[[str], Any]] = None,
    ) -> None:
        if not anchor_id:
            raise ValueError("anchor_id must not be empty")
        self._prune()
        self._records[anchor_id] = _AnchorRecord(
            anchor_id=anchor_id,
            window_id=window_id,
            placement=placement,
            transition=transition,
            loaded=loaded,
            liveness=liveness or _always_alive,
            template_lookup=template_lookup,
        )
        _logger.debug("Anchor '%s' registered on window '%s'", anchor_id, window_id)

    def unregister(self, anchor_id: str) -> None:
        self._records.pop(anchor_id, None)

    def set_loaded(self, anchor_id: str, loaded: bool) -> None:
        record = self._records.get(anchor_id)
        if record is None:
            _logger.debug("set_loaded: unknown anchor '%s'", anchor_id)
            return
        record.loaded = loaded

    def update(self, anchor_id: str, **changes: Any) -> None:
        """Change placement / transition / window of a registered anchor."""
        record = self._records.get(anchor_id)
        if record is None:
            return
        for key in ("placement", "transition", "window_id"):
            if key in changes:
                setattr(record, key, changes[key])

    def remove_window(self, window_id: Hashable) -> None:
        for anchor_id in [a for a, r in self._records.items() if r.window_id == window_id]:
            del self._records[anchor_id]

    def __len__(self) -> int:
        return len(self._records)

    # Resolver contract ----------------------------------------------
    def resolve(self, anchor_id: str, include_unloaded: bool = False) -> Optional[AnchorDescriptor]:
        record = self._records.get(anchor_id)
        if record is None or not record.liveness():
            return None
        if not record.loaded and not include_unloaded:
            return None
        return record.describe()

    def resolve_all(self, include_unloaded: bool = False) -> List[AnchorDescriptor]:
        # unloaded anchors stay registered; a hidden tab may come back
        return [
            r.describe()
            for r in list(self._records.values())
            if r.liveness() and (r.loaded or include_unloaded)
        ]

    def _prune(self) -> None:
        for anchor_id in [a for a, r in self._records.items() if not r.liveness()]:
            del self._records[anchor_id]
