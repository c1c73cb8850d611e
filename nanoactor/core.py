"""Shared enumerations, the package error type and a shutdown flag."""

from __future__ import annotations

import enum
import threading

__all__ = ["Status", "ExitReason", "TaskResult", "CafError", "ShutdownNotifier"]


class Status(enum.IntEnum):
    """Outcome codes carried by errors and by failed futures."""

    OK = 0
    FAILED = enum.auto()
    NULL_PTR = enum.auto()
    NULL_ACTOR = enum.auto()
    INVALID_ARG = enum.auto()
    OUT_OF_MEM = enum.auto()
    CLOSED = enum.auto()
    BLOCKED = enum.auto()
    TIMEOUT = enum.auto()
    DISCARDED = enum.auto()


class ExitReason(enum.IntEnum):
    """Why an actor stopped."""

    NORMAL = 0
    ABNORMAL = 1
    SHUTDOWN = 2
    UNKNOWN = 3


class TaskResult(enum.Enum):
    """Whether a scheduled task wants to run again."""

    SUSPENDED = enum.auto()
    DONE = enum.auto()


class CafError(Exception):
    """Raised when an operation fails; ``status`` tells why."""

    def __init__(self, status: Status, message: str = "") -> None:
        self.status = Status(status)
        self.message = message or self.status.name
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.message == self.status.name:
            return self.message
        return f"{self.status.name}: {self.message}"


class ShutdownNotifier:
    """A one-way flag that other threads can observe."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def notify_shutdown(self) -> None:
        """Raise the flag."""
        self._event.set()

    def shutdown_notified(self) -> bool:
        """Return whether the flag has been raised."""
        return self._event.is_set()