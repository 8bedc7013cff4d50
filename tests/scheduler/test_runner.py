"""Tests for the recurring task."""

import threading
import time

import pytest

from sensex_app.scheduler.runner import RecurringTask


class TestRecurringTask:
    """Test fixed-interval execution."""

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            RecurringTask(0, lambda: None)

    def test_run_once_counts_failures(self):
        def fail():
            raise RuntimeError("boom")

        task = RecurringTask(60, fail)
        assert task.run_once() is False
        assert task.runs == 1
        assert task.failures == 1

    def test_keeps_firing_after_failures(self):
        calls = []
        done = threading.Event()

        def callback():
            calls.append(1)
            if len(calls) >= 3:
                done.set()
            raise RuntimeError("upstream exploded")

        task = RecurringTask(0.01, callback, name="test-task")
        task.start()
        try:
            assert done.wait(timeout=5)
        finally:
            task.stop()

        assert len(calls) >= 3
        assert task.failures == task.runs
        assert task.is_running is False

    def test_run_immediately(self):
        fired = threading.Event()

        task = RecurringTask(3600, fired.set, run_immediately=True)
        task.start()
        try:
            assert fired.wait(timeout=5)
        finally:
            task.stop()

    def test_waits_one_interval_before_first_run(self):
        fired = threading.Event()

        task = RecurringTask(3600, fired.set)
        task.start()
        try:
            assert fired.wait(timeout=0.2) is False
        finally:
            task.stop()

    def test_start_is_idempotent(self):
        task = RecurringTask(3600, lambda: None)
        task.start()
        thread = task._thread
        task.start()
        try:
            assert task._thread is thread
        finally:
            task.stop()

    def test_slow_callback_does_not_drift(self):
        start = time.monotonic()
        offsets = []
        done = threading.Event()

        def slow():
            offsets.append(time.monotonic() - start)
            if len(offsets) >= 6:
                done.set()
            time.sleep(0.1)

        task = RecurringTask(0.2, slow)
        task.start()
        try:
            assert done.wait(timeout=5)
        finally:
            task.stop()

        assert offsets[5] == pytest.approx(1.2, abs=0.15)

    def test_overrun_skips_missed_slots(self):
        start = time.monotonic()
        offsets = []
        done = threading.Event()

        def overrun():
            offsets.append(time.monotonic() - start)
            if len(offsets) >= 2:
                done.set()
            else:
                time.sleep(0.25)

        task = RecurringTask(0.1, overrun)
        task.start()
        try:
            assert done.wait(timeout=5)
        finally:
            task.stop()

        # First run at 0.1 overruns past 0.2 and 0.3; next slot is 0.4
        assert offsets[1] == pytest.approx(0.4, abs=0.08)

    def test_restart_after_timed_out_stop(self):
        entered = threading.Event()
        release = threading.Event()

        def blocking():
            entered.set()
            release.wait(timeout=5)

        task = RecurringTask(3600, blocking, run_immediately=True)
        task.start()
        assert entered.wait(timeout=5)
        old_thread = task._thread

        task.stop(timeout=0.05)
        assert old_thread.is_alive()

        task.start()
        try:
            assert task._thread is not old_thread
            release.set()
            old_thread.join(timeout=5)
            assert not old_thread.is_alive()
            assert task.is_running
        finally:
            task.stop()
