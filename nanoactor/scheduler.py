"""Work-sharing task scheduler: resumable tasks, workers and the actor system."""

from __future__ import annotations

import abc
import threading
from collections import deque

from .core import CafError, Status, TaskResult

__all__ = ["Resumable", "WorkSharingQueue", "Worker", "Coordinator", "ActorSystem"]


class Resumable(abc.ABC):
    """A task that runs in slices until it reports it is done."""

    @abc.abstractmethod
    def resume(self) -> TaskResult:
        """Run one slice; DONE when the task needs no more scheduling."""

    def add_ref(self) -> None:
        """Called when the task is handed to a scheduler queue."""

    def release(self) -> None:
        """Called when the scheduler no longer holds the task."""


class WorkSharingQueue:
    """FIFO of tasks shared by every worker thread."""

    def __init__(self) -> None:
        self._tasks: deque[Resumable] = deque()
        self._cv = threading.Condition()
        self._shutdown = False

    def reschedule(self, task: Resumable) -> None:
        """Put a task back without taking a new reference."""
        with self._cv:
            self._tasks.append(task)
            self._cv.notify()

    def enqueue(self, task: Resumable) -> None:
        """Take a reference to the task and queue it."""
        task.add_ref()
        self.reschedule(task)

    def dequeue(self) -> Resumable | None:
        """Block until a task is available; None once shut down."""
        with self._cv:
            self._cv.wait_for(lambda: bool(self._tasks) or self._shutdown)
            if self._shutdown:
                return None
            return self._tasks.popleft()

    def shutdown(self) -> None:
        """Wake every waiting worker and make further dequeues return None."""
        with self._cv:
            if self._shutdown:
                return
            self._shutdown = True
            self._cv.notify_all()

    def clean_up(self) -> None:
        """Release every task still queued."""
        with self._cv:
            tasks, self._tasks = self._tasks, deque()
        for task in tasks:
            task.release()

    def is_empty(self) -> bool:
        with self._cv:
            return not self._tasks


class Worker:
    """A thread that takes tasks from a shared queue and runs them."""

    def __init__(self, tasks: WorkSharingQueue) -> None:
        self._tasks = tasks
        self._thread: threading.Thread | None = None

    def _schedule_task(self, task: Resumable) -> None:
        while True:
            if task.resume() is TaskResult.DONE:
                task.release()
                return
            if not self._tasks.is_empty():
                self._tasks.reschedule(task)
                return

    def _run(self) -> None:
        while (task := self._tasks.dequeue()) is not None:
            self._schedule_task(task)

    def launch(self) -> None:
        """Start the worker thread."""
        self._thread = threading.Thread(target=self._run, name="nanoactor-worker", daemon=True)
        self._thread.start()

    def wait_done(self) -> None:
        """Wait for the worker thread to finish."""
        if self._thread is not None:
            self._thread.join()
            self._thread = None


class Coordinator:
    """Owns the shared queue and the pool of workers."""

    def __init__(self) -> None:
        self._pending: WorkSharingQueue | None = None
        self._workers: list[Worker] = []
        self._working = False

    def start_up(self, num_workers: int) -> None:
        """Start ``num_workers`` workers (at least one); no-op if running."""
        if self._working:
            return
        self._pending = WorkSharingQueue()
        self._workers = [Worker(self._pending) for _ in range(max(num_workers, 1))]
        for worker in self._workers:
            worker.launch()
        self._working = True

    def schedule(self, task: Resumable) -> None:
        """Queue a task; raise CafError(CLOSED) when not running."""
        if not self._working or self._pending is None:
            raise CafError(Status.CLOSED, "coordinator is not running")
        self._pending.enqueue(task)

    def shutdown(self) -> None:
        """Stop every worker and release the tasks left in the queue."""
        if not self._working or self._pending is None:
            return
        self._pending.shutdown()
        for worker in self._workers:
            worker.wait_done()
        self._workers.clear()
        self._pending.clean_up()
        self._pending = None
        self._working = False


class ActorSystem:
    """Process-wide scheduler shared by all non-blocking actors."""

    _instance: ActorSystem | None = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._impl: Coordinator | None = None

    @classmethod
    def instance(cls) -> ActorSystem:
        """Return the single shared system."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def start_up(self, num_workers: int) -> None:
        """Start the workers unless the system is already running."""
        with self._lock:
            if self._impl is None:
                impl = Coordinator()
                impl.start_up(num_workers)
                self._impl = impl

    def shutdown(self) -> None:
        """Stop the workers; no-op if the system is not running."""
        with self._lock:
            impl, self._impl = self._impl, None
        if impl is not None:
            impl.shutdown()

    def schedule(self, task: Resumable) -> None:
        """Queue a task; raise CafError(NULL_PTR) when not started."""
        impl = self._impl
        if impl is None:
            raise CafError(Status.NULL_PTR, "actor system is not started")
        impl.schedule(task)