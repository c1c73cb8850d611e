import threading

import pytest

from nanoactor.core import CafError, Status, TaskResult
from nanoactor.scheduler import (
    ActorSystem,
    Coordinator,
    Resumable,
    WorkSharingQueue,
    Worker,
)


class DummyTask(Resumable):
    def __init__(self, task_id, suspensions=0):
        self.id = task_id
        self.refs = 0
        self.runs = 0
        self.suspensions = suspensions
        self.done = threading.Event()
        self.released = threading.Event()

    def resume(self):
        self.runs += 1
        if self.runs <= self.suspensions:
            return TaskResult.SUSPENDED
        self.done.set()
        return TaskResult.DONE

    def add_ref(self):
        self.refs += 1

    def release(self):
        self.refs -= 1
        self.released.set()


def test_work_sharing_queue_enqueue():
    queue = WorkSharingQueue()
    got = [None, None]

    def take(slot):
        task = queue.dequeue()
        got[slot] = task
        task.release()

    threads = [threading.Thread(target=take, args=(i,)) for i in range(2)]
    for t in threads:
        t.start()
    first = DummyTask(1)
    second = DummyTask(2)
    queue.enqueue(first)
    queue.enqueue(second)
    for t in threads:
        t.join(5)

    assert queue.is_empty() is True
    assert sorted(task.id for task in got) == [1, 2]
    assert first.refs == 0
    assert second.refs == 0


def test_work_sharing_queue_shutdown():
    queue = WorkSharingQueue()
    results = ["x", "x"]

    def take(slot):
        results[slot] = queue.dequeue()

    threads = [threading.Thread(target=take, args=(i,)) for i in range(2)]
    for t in threads:
        t.start()
    queue.shutdown()
    for t in threads:
        t.join(5)

    assert queue.dequeue() is None
    assert results == [None, None]


def test_dequeue_after_shutdown_returns_none_even_with_tasks():
    queue = WorkSharingQueue()
    queue.enqueue(DummyTask(1))
    queue.shutdown()
    assert queue.dequeue() is None
    assert not queue.is_empty()


def test_clean_up_releases_queued_tasks():
    queue = WorkSharingQueue()
    tasks = [DummyTask(i) for i in range(3)]
    for task in tasks:
        queue.enqueue(task)
    assert [t.refs for t in tasks] == [1, 1, 1]
    queue.clean_up()
    assert queue.is_empty()
    assert [t.refs for t in tasks] == [0, 0, 0]


def test_reschedule_does_not_add_reference():
    queue = WorkSharingQueue()
    task = DummyTask(7)
    queue.reschedule(task)
    assert task.refs == 0
    assert queue.dequeue() is task


def test_worker_runs_task_until_done():
    queue = WorkSharingQueue()
    worker = Worker(queue)
    worker.launch()
    task = DummyTask(1, suspensions=3)
    queue.enqueue(task)
    assert task.released.wait(5)
    queue.shutdown()
    worker.wait_done()
    assert task.runs == 4
    assert task.refs == 0


def test_coordinator_schedules_tasks():
    coordinator = Coordinator()
    coordinator.start_up(2)
    try:
        tasks = [DummyTask(i, suspensions=i % 3) for i in range(10)]
        for task in tasks:
            coordinator.schedule(task)
        assert all(task.released.wait(5) for task in tasks)
        assert all(task.refs == 0 for task in tasks)
    finally:
        coordinator.shutdown()


def test_coordinator_zero_workers_still_runs():
    coordinator = Coordinator()
    coordinator.start_up(0)
    try:
        task = DummyTask(1)
        coordinator.schedule(task)
        assert task.done.wait(5)
    finally:
        coordinator.shutdown()


def test_coordinator_schedule_before_start_raises_closed():
    coordinator = Coordinator()
    with pytest.raises(CafError) as info:
        coordinator.schedule(DummyTask(1))
    assert info.value.status is Status.CLOSED


def test_coordinator_schedule_after_shutdown_raises_closed():
    coordinator = Coordinator()
    coordinator.start_up(1)
    coordinator.shutdown()
    with pytest.raises(CafError) as info:
        coordinator.schedule(DummyTask(1))
    assert info.value.status is Status.CLOSED


def test_actor_system_is_singleton():
    first = ActorSystem.instance()
    second = ActorSystem.instance()
    assert first is second


def test_actor_system_schedule_without_start_raises():
    system = ActorSystem.instance()
    system.shutdown()
    with pytest.raises(CafError) as info:
        system.schedule(DummyTask(1))
    assert info.value.status is Status.NULL_PTR


def test_actor_system_runs_tasks():
    system = ActorSystem.instance()
    system.start_up(1)
    try:
        task = DummyTask(5, suspensions=2)
        system.schedule(task)
        assert task.released.wait(5)
        assert task.runs == 3
    finally:
        system.shutdown()