import threading

import pytest

from nanoactor.core import CafError, ExitReason, ShutdownNotifier, Status


def test_caf_error_carries_status():
    err = CafError(Status.CLOSED, "mailbox closed")
    assert err.status is Status.CLOSED
    assert "mailbox closed" in str(err)


def test_caf_error_without_message_uses_status_name():
    err = CafError(Status.TIMEOUT)
    assert str(err) == Status.TIMEOUT.name
    assert err.message == Status.TIMEOUT.name


def test_caf_error_accepts_raw_status_value():
    err = CafError(int(Status.DISCARDED), "gone")
    assert err.status is Status.DISCARDED


def test_caf_error_is_caught_as_exception():
    err = CafError(Status.FAILED)
    with pytest.raises(Exception) as info:
        raise err
    assert info.value is err
    assert err.status is Status.FAILED


def test_caf_error_round_trips_every_status():
    for status in Status:
        err = CafError(status)
        assert err.status is status
        assert bool(err.status) is (status is not Status.OK)


def test_exit_reason_members_are_distinct():
    values = [r.value for r in ExitReason]
    assert len(set(values)) == len(values)
    assert ExitReason(ExitReason.ABNORMAL.value) is ExitReason.ABNORMAL


def test_shutdown_notifier_starts_clear():
    notifier = ShutdownNotifier()
    assert notifier.shutdown_notified() is False


def test_shutdown_notifier_set_is_sticky():
    notifier = ShutdownNotifier()
    notifier.notify_shutdown()
    notifier.notify_shutdown()
    assert notifier.shutdown_notified() is True


def test_shutdown_notifier_visible_across_threads():
    notifier = ShutdownNotifier()
    thread = threading.Thread(target=notifier.notify_shutdown)
    thread.start()
    thread.join()
    assert notifier.shutdown_notified() is True