"""Action Repository Service.

Name-keyed registry of *execute* callbacks and optional *can-execute* guards.
The tour navigator routes every lifecycle hook (entering / entered / left /
closed) and every doable action through an instance of this class.

Behavior:
 - String names compare case-insensitively (``str.casefold``). Other hashable
   keys (the navigator uses ``(step_id, HookCategory)`` tuples) compare by
   plain equality.
 - A second registration under the same name overwrites the first and logs
   a warning.
 - Every registration returns a ``ReleaseHandle``. Releasing removes an entry
   only if it is still the one that registration stored, so a stale handle
   never removes a newer registration.
 - Execute and can-execute mappings are independent: either side of a guarded
   registration can be replaced or released without touching the other.

Thread-safety: not thread-safe; access from the UI thread only.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional

__all__ = ["ActionRepository", "ReleaseHandle", "ExecuteAction", "CanExecuteAction"]

_logger = logging.getLogger(__name__)

ExecuteAction = Callable[[Any], None]
CanExecuteAction = Callable[[Any], bool]

_tokens = itertools.count(1)


class ReleaseHandle:
    """Undo handle for a single registration.

    ``release()`` runs the bound callback at most once.
    """

    EMPTY: "ReleaseHandle"

    def __init__(self, action: Optional[Callable[[], None]] = None) -> None:
        self._action = action
        self._released = False

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._action is not None:
            self._action()

    @property
    def released(self) -> bool:
        return self._released


ReleaseHandle.EMPTY = ReleaseHandle()


@dataclass(frozen=True)
class _Entry:
    token: int
    callback: Callable[..., Any]


def _normalize(name: Hashable) -> Hashable:
    if isinstance(name, str):
        return name.casefold()
    return name


class ActionRepository:
    def __init__(self) -> None:
        self._execute: Dict[Hashable, _Entry] = {}
        self._can_execute: Dict[Hashable, _Entry] = {}

    # Registration -------------------------------------------------
    def add_execute(self, name: Hashable, callback: ExecuteAction) -> ReleaseHandle:
        if callback is None:
            raise ValueError("callback must not be None")
        key = _normalize(name)
        if key in self._execute:
            _logger.warning("Action with name '%s' already exists. Will be overwritten!", name)
        entry = _Entry(next(_tokens), callback)
        self._execute[key] = entry
        _logger.debug("ActionRepository: action '%s' added", name)
        return ReleaseHandle(lambda: self._remove_if_current(self._execute, key, entry))

    def add_execute_with_guard(
        self, name: Hashable, callback: ExecuteAction, predicate: CanExecuteAction
    ) -> ReleaseHandle:
        if callback is None:
            raise ValueError("callback must not be None")
        if predicate is None:
            raise ValueError("predicate must not be None")
        key = _normalize(name)
        if key in self._execute:
            _logger.warning("Action with name '%s' already exists. Will be overwritten!", name)
        entry = _Entry(next(_tokens), callback)
        guard = _Entry(next(_tokens), predicate)
        self._execute[key] = entry
        self._can_execute[key] = guard
        _logger.debug("ActionRepository: action '%s' added (with can-execute)", name)

        def _release() -> None:
            self._remove_if_current(self._execute, key, entry)
            self._remove_if_current(self._can_execute, key, guard)

        return ReleaseHandle(_release)

    @staticmethod
    def _remove_if_current(table: Dict[Hashable, _Entry], key: Hashable, entry: _Entry) -> None:
        stored = table.get(key)
        if stored is not None and stored.token == entry.token:
            del table[key]

    # Query / execution --------------------------------------------
    def contains(self, name: Hashable) -> bool:
        return _normalize(name) in self._execute

    def execute(self, name: Hashable, step: Any) -> None:
        entry = self._execute.get(_normalize(name))
        if entry is None:
            _logger.debug("ActionRepository: action '%s' not available", name)
            return
        entry.callback(step)

    def can_execute(self, name: Hashable, step: Any) -> bool:
        guard = self._can_execute.get(_normalize(name))
        if guard is None:
            return False
        return bool(guard.callback(step))

    def clear(self) -> None:
        self._execute.clear()
        self._can_execute.clear()

    # Introspection --------------------------------------------------
    @property
    def execute_count(self) -> int:
        return len(self._execute)

    @property
    def can_execute_count(self) -> int:
        return len(self._can_execute)
