# nanoactor

Building blocks for an actor framework: a two-priority mailbox, single-assignment
futures that publish their outcome on commit, reference-counted handles with weak
references and exit synchronisation, and a work-sharing scheduler that runs
resumable tasks on a pool of worker threads.

The package uses only the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `nanoactor.core`: the `Status`, `ExitReason` and `TaskResult` enumerations,
  the `CafError` exception (its `status` attribute says why an operation
  failed) and `ShutdownNotifier`, a one-way flag readable from any thread.
- `nanoactor.mailbox`: `Message`, `Category` (`NORMAL` or `URGENT`),
  `LifoQueue` and `MailBox`. A queue starts out blocked; sending to a blocked
  queue returns `True` so the sender knows to wake the consumer. Sending to a
  closed queue discards the message and raises `CafError(Status.CLOSED)`.
  `MailBox.consume` hands urgent messages to the consumer before normal ones.
- `nanoactor.future`: `FutureObject`, the abstract `FutureObserver` and
  `Future`. An outcome set with `set_value`, `on_fail` or `on_timeout` is only
  published when `commit` runs. Observers registered after that are told at
  once. `Future.then` chains a callback and `Future.fail` installs a failure
  handler.
- `nanoactor.scheduler`: `Resumable`, `WorkSharingQueue`, `Worker`,
  `Coordinator` and the process-wide `ActorSystem`.
- `nanoactor.refs`: `ControlBlock`, `SharedPtr`, `WeakPtr` and `make_shared`.

## Examples

### Mailbox

```python
from nanoactor.core import TaskResult
from nanoactor.mailbox import Category, MailBox, Message

box = MailBox()
print(box.send(Message("a")))                            # True: the box was asleep
print(box.send(Message("b", category=Category.URGENT)))  # False

seen = []

def consumer(msg):
    seen.append(msg.msg_id)
    return TaskResult.SUSPENDED

print(box.consume(10, consumer))  # TaskResult.DONE: the box went back to sleep
print(seen)                       # ['b', 'a']
```

`consume` returns `SUSPENDED` when messages remain after the quota is spent.
When the consumer returns `DONE`, the mailbox is closed, and every message
still undelivered is discarded through its `on_discard` hook.

### Futures

```python
from nanoactor.core import Status
from nanoactor.future import Future, FutureObject

obj = FutureObject()
results = []
Future(obj).then(lambda v: v * 2).then(results.append)

obj.set_value(21)
print(results)  # []: nothing is published before commit
obj.commit()
print(results)  # [42]

failing = FutureObject()
Future(failing).fail(lambda cause: print("failed:", cause.name))
failing.on_fail(Status.CLOSED)
failing.commit()  # failed: CLOSED
```

A callback passed to `then` receives no argument when the upstream value is
`None`. When the callback returns a `Future`, the chained future follows that
one.

### Scheduler

```python
import threading

from nanoactor.core import TaskResult
from nanoactor.scheduler import ActorSystem, Resumable


class Job(Resumable):
    def __init__(self):
        self.done = threading.Event()

    def resume(self):
        self.done.set()
        return TaskResult.DONE


system = ActorSystem.instance()
system.start_up(2)
job = Job()
system.schedule(job)
job.done.wait()
system.shutdown()
```

A task that returns `SUSPENDED` runs again. It goes back to the shared queue
when other tasks are waiting there; otherwise it keeps the same worker.
`ActorSystem.schedule` raises `CafError(Status.NULL_PTR)` before `start_up`.

### Shared and weak handles

```python
from nanoactor.refs import WeakPtr, make_shared

destroyed = []
shared = make_shared({"name": "demo"}, on_destroy=destroyed.append)
weak = WeakPtr(shared)

strong = weak.lock()
print(strong.use_count())  # 2
strong.release()
shared.release()
print(weak.expired(), destroyed)  # True [{'name': 'demo'}]
```

`ControlBlock.enable_sync` lets `ControlBlock.wait` block until
`ControlBlock.on_exit` records an `ExitReason`.

## What this package does not do

This package has no actor classes. It has no way to spawn an actor, attach
message handlers or behaviors to it, send it requests or wait for its replies.
It has no timers. You get the mailbox, future, handle and scheduler pieces that
an actor runtime is built from, and you assemble an actor from them yourself.