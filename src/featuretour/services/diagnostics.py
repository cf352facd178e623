"""Diagnostics service.

Captures recent records of the ``featuretour`` logger hierarchy into a ring
buffer so a host can show why a tour did not appear (unresolved anchors,
overwritten hooks, missing templates). Each captured record is also published
as ``TourEvent.LOG_RECORD_ADDED`` on the registered EventBus.

Design goals:
 - Headless testability (no toolkit dependency)
 - Observational only: never alters control flow of the run
 - Filtering by level name or logger name substring
 - Capacity-bound ring buffer with O(1) append
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from threading import RLock
from typing import Deque, List, Optional

from featuretour import settings

from .event_bus import EventBus, TourEvent
from .service_locator import DIAGNOSTICS, EVENT_BUS, services

__all__ = [
    "LogEntry",
    "DiagnosticsService",
    "get_diagnostics_service",
]


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float
    lineno: int


class _RingBufferHandler(logging.Handler):
    def __init__(self, svc: "DiagnosticsService") -> None:
        super().__init__()
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        self._svc._ingest_record(record)


class DiagnosticsService:
    def __init__(
        self, capacity: int = settings.DIAGNOSTICS_CAPACITY, logger_name: str = settings.LOGGER_NAME
    ) -> None:
        self._capacity = capacity
        self._logger_name = logger_name
        self._lock = RLock()
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._handler = _RingBufferHandler(self)
        self._handler.setLevel(logging.DEBUG)
        self._attached = False
        self._publishing = False

    # Lifecycle --------------------------------------------------------
    def attach(self) -> None:
        if self._attached:
            return
        logger = logging.getLogger(self._logger_name)
        logger.addHandler(self._handler)
        if logger.level == logging.NOTSET or logger.level > logging.DEBUG:
            logger.setLevel(logging.DEBUG)
        self._attached = True

    def detach(self) -> None:
        if not self._attached:
            return
        logging.getLogger(self._logger_name).removeHandler(self._handler)
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    # Internal ingestion -----------------------------------------------
    def _ingest_record(self, record: logging.LogRecord) -> None:
        entry = LogEntry(
            level=record.levelname,
            name=record.name,
            message=record.getMessage(),
            created=record.created,
            lineno=record.lineno,
        )
        with self._lock:
            self._entries.append(entry)
        bus = services.try_get(EVENT_BUS)
        if not isinstance(bus, EventBus) or self._publishing:
            # records logged by the bus while publishing are buffered only
            return
        self._publishing = True
        try:
            bus.publish(
                TourEvent.LOG_RECORD_ADDED,
                {"level": entry.level, "name": entry.name, "message": entry.message[:120]},
            )
        finally:
            self._publishing = False

    # Query ------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        with self._lock:
            data = list(self._entries)
        return data[-limit:] if limit is not None else data

    def filter(
        self, *, level: str | None = None, name_contains: str | None = None
    ) -> List[LogEntry]:
        out: List[LogEntry] = []
        for e in self.recent():
            if level and e.level != level:
                continue
            if name_contains and name_contains not in e.name:
                continue
            out.append(e)
        return out

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # Export ------------------------------------------------------------
    def export_jsonl(self, path: str | Path, *, level: str | None = None) -> int:
        """Write (optionally filtered) entries as JSON Lines; returns lines written."""
        entries = self.filter(level=level)
        with open(path, "w", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(asdict(e), sort_keys=True) + "\n")
        return len(entries)


def get_diagnostics_service() -> DiagnosticsService:
    return services.get_or_create(DIAGNOSTICS, DiagnosticsService)
