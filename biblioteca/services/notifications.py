"""Transient page messages (toast) with auto-dismiss."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

SUCCESS = "success"
ERROR = "error"
INFO = "info"
SEVERITIES = (SUCCESS, ERROR, INFO)

DEFAULT_TIMEOUT_MS = 3000


@dataclass(frozen=True)
class Notification:
    message: str
    severity: str
    created_at: float
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def expired(self, now: float) -> bool:
        return (now - self.created_at) * 1000 >= self.timeout_ms


class Notifier:
    """Holds at most one visible notification; a new one replaces the old."""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS, clock: Callable[[], float] = time.monotonic) -> None:
        self.timeout_ms = timeout_ms
        self._clock = clock
        self._current: Optional[Notification] = None

    def notify(self, message: str, severity: str = INFO) -> Notification:
        if severity not in SEVERITIES:
            raise ValueError(f"unknown severity: {severity}")
        self._current = Notification(
            message=message,
            severity=severity,
            created_at=self._clock(),
            timeout_ms=self.timeout_ms,
        )
        return self._current

    def success(self, message: str) -> Notification:
        return self.notify(message, SUCCESS)

    def error(self, message: str) -> Notification:
        return self.notify(message, ERROR)

    def info(self, message: str) -> Notification:
        return self.notify(message, INFO)

    @property
    def current(self) -> Optional[Notification]:
        if self._current and self._current.expired(self._clock()):
            self._current = None
        return self._current

    def dismiss(self) -> None:
        self._current = None
