from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from sarlink.config import settings

logger = logging.getLogger(__name__)

LOG_LEVELS = ("INFO", "WARN", "ERROR", "DEBUG")

_PY_LEVELS = {
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "DEBUG": logging.DEBUG,
}

LogListener = Callable[["LogEntry"], None]


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    source: str
    level: str  # INFO | WARN | ERROR | DEBUG
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "source": self.source,
            "level": self.level,
            "message": self.message,
        }


class LogStore:
    """Operator-visible event journal, capped to the most recent entries."""

    def __init__(self, capacity: int = 50) -> None:
        self.capacity = capacity
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._listeners: list[LogListener] = []

    def add_listener(self, listener: LogListener) -> None:
        self._listeners.append(listener)

    def append(self, message: str, level: str = "INFO", source: str = "SYS") -> LogEntry:
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=source,
            level=level,
            message=message,
        )
        self._entries.append(entry)
        logger.log(_PY_LEVELS[level], "[%s] %s", source, message)
        for listener in self._listeners:
            try:
                listener(entry)
            except Exception:
                logger.exception("Error in log listener")
        return entry

    def entries(self, limit: int | None = None) -> list[LogEntry]:
        items = list(self._entries)
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return items

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


log_store = LogStore(capacity=settings.log_capacity)
