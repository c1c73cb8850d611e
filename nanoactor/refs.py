"""Reference-counted handles with weak references and exit synchronisation."""

from __future__ import annotations

import threading
from typing import Any, Callable

from .core import CafError, ExitReason, Status

__all__ = ["ControlBlock", "SharedPtr", "WeakPtr", "make_shared"]


class ControlBlock:
    """Strong and weak counts for a shared object, plus an optional exit slot.

    A new block holds one strong reference. When the strong count falls to
    zero the object is dropped and ``on_destroy`` is called with it.
    """

    def __init__(self, obj: Any, on_destroy: Callable[[Any], None] | None = None) -> None:
        self._lock = threading.Lock()
        self._obj = obj
        self._on_destroy = on_destroy
        self._strong = 1
        self._weak = 0
        self._sync: threading.Event | None = None
        self._exit_reason: ExitReason | None = None

    @property
    def object(self) -> Any:
        """The shared object, or None once it has been destroyed."""
        return self._obj

    def add_ref(self) -> None:
        with self._lock:
            if self._strong == 0:
                raise CafError(Status.NULL_PTR, "object already destroyed")
            self._strong += 1

    def release(self) -> None:
        """Drop a strong reference, destroying the object on the last one."""
        with self._lock:
            if self._strong == 0:
                raise CafError(Status.FAILED, "no strong reference to release")
            self._strong -= 1
            if self._strong > 0:
                return
            obj, self._obj = self._obj, None
            on_destroy = self._on_destroy
        if on_destroy is not None:
            on_destroy(obj)

    def add_weak_ref(self) -> None:
        with self._lock:
            self._weak += 1

    def release_weak_ref(self) -> None:
        with self._lock:
            if self._weak == 0:
                raise CafError(Status.FAILED, "no weak reference to release")
            self._weak -= 1

    def lock(self) -> bool:
        """Take a strong reference if the object is still alive."""
        with self._lock:
            if self._strong == 0:
                return False
            self._strong += 1
            return True

    def use_count(self) -> int:
        with self._lock:
            return self._strong

    def weak_count(self) -> int:
        with self._lock:
            return self._weak

    def enable_sync(self) -> None:
        """Allow ``wait`` to block until ``on_exit`` reports a reason."""
        with self._lock:
            self._sync = threading.Event()
            self._exit_reason = None

    def on_exit(self, reason: ExitReason) -> None:
        """Record the exit reason once and wake waiters."""
        with self._lock:
            sync = self._sync
            if sync is None or sync.is_set():
                return
            self._exit_reason = ExitReason(reason)
            sync.set()

    def wait(self) -> ExitReason:
        """Block until the exit reason is known; CafError if sync is off."""
        sync = self._sync
        if sync is None:
            raise CafError(Status.FAILED, "exit synchronisation not enabled")
        sync.wait()
        assert self._exit_reason is not None
        return self._exit_reason


class SharedPtr:
    """A strong handle to a control block."""

    def __init__(self, block: ControlBlock | None = None, add_ref: bool = True) -> None:
        self._block = block
        if block is not None and add_ref:
            block.add_ref()

    @property
    def block(self) -> ControlBlock | None:
        return self._block

    def get(self) -> Any:
        """The shared object, or None for an empty handle."""
        return None if self._block is None else self._block.object

    def copy(self) -> SharedPtr:
        """Another strong handle to the same object."""
        return SharedPtr(self._block)

    def release(self) -> None:
        """Give up this handle's reference; the handle becomes empty."""
        block, self._block = self._block, None
        if block is not None:
            block.release()

    def use_count(self) -> int:
        return 0 if self._block is None else self._block.use_count()

    def __bool__(self) -> bool:
        return self._block is not None

    def __eq__(self, other: object) -> bool:
        if other is None:
            return self._block is None
        if not isinstance(other, SharedPtr):
            return NotImplemented
        return self._block is other._block

    def __hash__(self) -> int:
        return id(self._block)

    def __enter__(self) -> SharedPtr:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


class WeakPtr:
    """A handle that does not keep the object alive."""

    def __init__(self, shared: SharedPtr | None = None) -> None:
        self._block = None if shared is None else shared.block
        if self._block is not None:
            self._block.add_weak_ref()

    @property
    def block(self) -> ControlBlock | None:
        return self._block

    def lock(self) -> SharedPtr:
        """A strong handle if the object is alive, else an empty one."""
        if self._block is None or not self._block.lock():
            return SharedPtr()
        return SharedPtr(self._block, add_ref=False)

    def use_count(self) -> int:
        return 0 if self._block is None else self._block.use_count()

    def expired(self) -> bool:
        return self.use_count() == 0

    def reset(self) -> None:
        """Drop the weak reference; the handle becomes empty."""
        block, self._block = self._block, None
        if block is not None:
            block.release_weak_ref()

    def __bool__(self) -> bool:
        return self._block is not None

    def __eq__(self, other: object) -> bool:
        if other is None:
            return self._block is None
        if not isinstance(other, WeakPtr):
            return NotImplemented
        return self._block is other._block

    def __hash__(self) -> int:
        return id(self._block)


def make_shared(obj: Any, on_destroy: Callable[[Any], None] | None = None) -> SharedPtr:
    """Wrap ``obj`` in a new control block and return its first handle."""
    return SharedPtr(ControlBlock(obj, on_destroy), add_ref=False)