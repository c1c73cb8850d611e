"""Messages, the lock-protected inbox and the two-priority mailbox."""

from __future__ import annotations

import enum
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from .core import CafError, Status, TaskResult

__all__ = ["Category", "Message", "LifoQueue", "MailBox"]


class Category(enum.Enum):
    """Delivery priority of a message."""

    NORMAL = enum.auto()
    URGENT = enum.auto()


@dataclass(eq=False)
class Message:
    """A unit of work delivered to an actor."""

    msg_id: Hashable
    body: Any = None
    category: Category = Category.NORMAL
    sender: Any = None
    on_discard: Callable[[Message], None] | None = None

    def discard(self) -> None:
        """Run the discard hook once; later calls do nothing."""
        handler, self.on_discard = self.on_discard, None
        if handler is not None:
            handler(self)


class _State(enum.Enum):
    OPEN = enum.auto()
    BLOCKED = enum.auto()
    CLOSED = enum.auto()


class LifoQueue:
    """Multi-producer inbox that can be blocked (consumer asleep) or closed.

    A new queue starts out blocked.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = _State.BLOCKED
        self._pending: list[Message] = []

    def enqueue(self, msg: Message) -> bool:
        """Add a message.

        Returns True when the queue was blocked, meaning the consumer has to be
        woken. Raises CafError(CLOSED) after discarding the message if the
        queue is closed.
        """
        with self._lock:
            state = self._state
            if state is not _State.CLOSED:
                self._pending.append(msg)
                self._state = _State.OPEN
        if state is _State.CLOSED:
            msg.discard()
            raise CafError(Status.CLOSED, "queue is closed")
        return state is _State.BLOCKED

    def take_all(self) -> list[Message]:
        """Remove and return every pending message, oldest first."""
        with self._lock:
            if self._state is not _State.OPEN:
                return []
            taken, self._pending = self._pending, []
            return taken

    def try_block(self) -> bool:
        """Mark the queue blocked if it is empty; True if it is now blocked."""
        with self._lock:
            if self._state is _State.OPEN and not self._pending:
                self._state = _State.BLOCKED
            return self._state is _State.BLOCKED

    def close(self) -> None:
        """Close the queue and discard what is pending, newest first."""
        with self._lock:
            if self._state is _State.CLOSED:
                return
            self._state = _State.CLOSED
            pending, self._pending = self._pending, []
        for msg in reversed(pending):
            msg.discard()

    def is_closed(self) -> bool:
        with self._lock:
            return self._state is _State.CLOSED

    def is_blocked(self) -> bool:
        with self._lock:
            return self._state is _State.BLOCKED


def _process(
    queue: deque[Message], remain: int, consumer: Callable[[Message], TaskResult]
) -> tuple[TaskResult, int]:
    while remain > 0:
        if not queue:
            return TaskResult.SUSPENDED, remain
        if consumer(queue.popleft()) is TaskResult.DONE:
            return TaskResult.DONE, remain
        remain -= 1
    return TaskResult.SUSPENDED, remain


class MailBox(LifoQueue):
    """Inbox that delivers urgent messages before normal ones."""

    def __init__(self) -> None:
        super().__init__()
        self._urgent: deque[Message] = deque()
        self._normal: deque[Message] = deque()

    def send(self, msg: Message) -> bool:
        """Deliver a message; True when the consumer has to be woken."""
        return self.enqueue(msg)

    def reload(self) -> bool:
        """Move pending messages into the priority queues; True if any moved."""
        taken = self.take_all()
        for msg in taken:
            target = self._urgent if msg.category is Category.URGENT else self._normal
            target.append(msg)
        return bool(taken)

    def is_empty(self) -> bool:
        return not self._urgent and not self._normal

    def consume(
        self, quota: int, consumer: Callable[[Message], TaskResult]
    ) -> TaskResult:
        """Hand up to ``quota`` messages to ``consumer``.

        Returns SUSPENDED when messages remain after the quota is spent, and
        DONE when the mailbox went to sleep, was closed, or the consumer asked
        to stop (in which case the mailbox is closed).
        """
        remain = quota
        while True:
            while not self.reload() and self.is_empty():
                if self.is_closed() or self.try_block():
                    return TaskResult.DONE

            if remain == 0:
                return TaskResult.SUSPENDED

            result, remain = _process(self._urgent, remain, consumer)
            if result is TaskResult.DONE:
                break
            if remain == 0:
                continue

            result, remain = _process(self._normal, remain, consumer)
            if result is TaskResult.DONE:
                break

        self.close()
        return TaskResult.DONE

    def close(self) -> None:
        """Close the mailbox and discard every undelivered message."""
        super().close()
        for queue in (self._urgent, self._normal):
            while queue:
                queue.popleft().discard()