"""Single-assignment future objects, their observers and chainable futures."""

from __future__ import annotations

import abc
import enum
import threading
from collections import deque
from typing import Any, Callable

from .core import CafError, Status

__all__ = ["FutureObserver", "FutureObject", "Future"]

FailHandler = Callable[[Status], None]


class FutureObserver(abc.ABC):
    """Receives the outcome of a future object once it is committed."""

    @abc.abstractmethod
    def on_future_ready(self, value: Any) -> None:
        """Called with the value of a successful future."""

    @abc.abstractmethod
    def on_future_fail(self, cause: Status) -> None:
        """Called with the cause of a failed future."""


class _Ready(enum.Enum):
    PENDING = enum.auto()
    READY = enum.auto()
    TIMEOUT = enum.auto()


class _Kind(enum.Enum):
    EMPTY = enum.auto()
    VALUE = enum.auto()
    FAILED = enum.auto()


class FutureObject:
    """Holds a value or a failure cause, set once and published on commit.

    Setting the outcome only records it; observers and the fail handler are
    told when ``commit`` runs. Observers registered after the outcome is
    known are told at once.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ready = _Ready.PENDING
        self._kind = _Kind.EMPTY
        self._outcome: Any = None
        self._observers: deque[FutureObserver] = deque()
        self._on_fail: FailHandler | None = None

    def _is_ready(self) -> bool:
        with self._lock:
            return self._ready is not _Ready.PENDING

    def _settle(self, kind: _Kind, outcome: Any) -> bool:
        with self._lock:
            if self._ready is not _Ready.PENDING:
                return False
            self._kind = kind
            self._outcome = outcome
            self._ready = _Ready.READY
            return True

    def register_observer(self, observer: FutureObserver) -> None:
        """Add an observer, or notify it at once if the outcome is known."""
        if self._is_ready():
            self._notify_observer(observer)
        else:
            self._observers.append(observer)

    def set_fail_handler(self, handler: FailHandler) -> None:
        """Install the handler called on failure; call it now if already failed."""
        if not self._is_ready():
            self._on_fail = handler
        elif self._kind is _Kind.FAILED:
            handler(self._outcome)

    def set_value(self, value: Any = None) -> bool:
        """Record a value; False if the outcome was already decided."""
        return self._settle(_Kind.VALUE, value)

    def on_fail(self, cause: Status) -> bool:
        """Record a failure; False if the outcome was already decided."""
        return self._settle(_Kind.FAILED, Status(cause))

    def on_timeout(self) -> bool:
        """Mark the future as timed out; False if it was already decided."""
        with self._lock:
            if self._ready is not _Ready.PENDING:
                return False
            self._ready = _Ready.TIMEOUT
            return True

    def present(self) -> bool:
        """Return whether a value has been recorded."""
        return self._kind is _Kind.VALUE

    def value(self) -> Any:
        """Return the recorded value; raise CafError if there is none."""
        if self._kind is _Kind.VALUE:
            return self._outcome
        if self._kind is _Kind.FAILED:
            raise CafError(self._outcome, "future failed")
        raise CafError(Status.FAILED, "future has no value")

    def commit(self) -> None:
        """Publish the outcome to the fail handler and the observers."""
        with self._lock:
            ready = self._ready
        if ready is _Ready.TIMEOUT:
            self._notify_error(Status.TIMEOUT)
            self._notify_timeout()
        elif ready is _Ready.READY:
            if self._kind is _Kind.FAILED:
                self._notify_error(self._outcome)
            if self._kind is not _Kind.EMPTY:
                self._notify_observers()

    def _notify_observer(self, observer: FutureObserver) -> None:
        if self._kind is _Kind.VALUE:
            observer.on_future_ready(self._outcome)
        elif self._kind is _Kind.FAILED:
            observer.on_future_fail(self._outcome)

    def _notify_observers(self) -> None:
        observers, self._observers = self._observers, deque()
        for observer in observers:
            self._notify_observer(observer)

    def _notify_timeout(self) -> None:
        observers, self._observers = self._observers, deque()
        for observer in observers:
            observer.on_future_fail(Status.TIMEOUT)

    def _notify_error(self, status: Status) -> None:
        handler, self._on_fail = self._on_fail, None
        if handler is not None:
            handler(status)


class _CallbackObject(FutureObject, FutureObserver):
    """Runs a callback on an upstream value and becomes its result.

    A ``None`` value stands for "no value": the callback is then called
    without arguments. If the callback returns a Future, the observers of
    this object are handed over to that future instead.
    """

    def __init__(self, callback: Callable[..., Any]) -> None:
        super().__init__()
        self._callback = callback

    def on_future_ready(self, value: Any) -> None:
        result = self._callback() if value is None else self._callback(value)
        if isinstance(result, Future):
            if not result:
                self.on_future_fail(Status.NULL_PTR)
                return
            inner = result._object
            observers, self._observers = self._observers, deque()
            for observer in observers:
                inner.register_observer(observer)
            return
        self.set_value(result)
        self.commit()

    def on_future_fail(self, cause: Status) -> None:
        self.on_fail(cause)
        self.commit()


class Future:
    """A handle to a future object, with chaining and failure handling."""

    def __init__(self, obj: FutureObject | None = None) -> None:
        self._object = obj
        self._status = Status.OK if obj is not None else Status.NULL_PTR
        self._forward = False

    @classmethod
    def forward(cls, status: Status = Status.OK) -> Future:
        """A marker meaning the request was forwarded; empty if status is not OK."""
        future = cls()
        if status == Status.OK:
            future._forward = True
        return future

    @classmethod
    def by(cls, cause: Status) -> Future:
        """An empty future that reports ``cause``."""
        future = cls()
        future._status = Status(cause)
        return future

    @classmethod
    def of(cls, value: Any) -> Future:
        """A future already holding ``value``."""
        obj = FutureObject()
        obj.set_value(value)
        return cls(obj)

    def __bool__(self) -> bool:
        return self._object is not None

    def status(self) -> Status:
        """OK while the future holds an object, else why it does not."""
        return self._status

    def is_forward(self) -> bool:
        return self._forward

    def then(self, callback: Callable[..., Any]) -> Future:
        """Chain ``callback`` on the value; its result becomes the new future.

        When the value is ``None`` (a future without a value) the callback is
        called without arguments. If it returns a Future, the returned future
        follows that one.
        """
        if self._object is None:
            return Future.by(self._status)
        chained = _CallbackObject(callback)
        self._object.register_observer(chained)
        return Future(chained)

    def fail(self, handler: FailHandler) -> Future:
        """Install a failure handler; call it now if this future is empty."""
        if self._object is None:
            handler(self._status)
        else:
            self._object.set_fail_handler(handler)
        return self

    def release(self) -> None:
        """Drop the held object."""
        if self._object is not None:
            self._object = None
            self._status = Status.NULL_PTR