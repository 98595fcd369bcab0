"""
Unit tests for ConnectionWorkers.
"""

import logging
import threading

from rawhttpd.core.workers import ConnectionWorkers


class TestConnectionWorkers:
    """Tests for the thread-per-connection runner."""

    def test_spawn_runs_function(self):
        workers = ConnectionWorkers()
        done = threading.Event()
        received = []

        def task(value):
            received.append(value)
            done.set()

        thread = workers.spawn(task, 42, name="conn-test")

        assert done.wait(5.0)
        assert received == [42]
        assert thread.daemon
        assert thread.name == "conn-test"
        assert workers.spawned == 1

    def test_blocked_task_does_not_block_others(self):
        """One stuck connection leaves the rest running."""
        workers = ConnectionWorkers()
        release = threading.Event()
        finished = threading.Event()

        workers.spawn(release.wait)
        quick = workers.spawn(finished.set)

        assert finished.wait(5.0)
        quick.join(5.0)
        assert workers.active_count == 1

        release.set()
        assert workers.join_all(timeout=5.0)
        assert workers.active_count == 0

    def test_join_all_timeout(self):
        """join_all() reports threads still running after the timeout."""
        workers = ConnectionWorkers()
        release = threading.Event()
        workers.spawn(release.wait)

        assert workers.join_all(timeout=0.1) is False

        release.set()
        assert workers.join_all(timeout=5.0) is True

    def test_exception_is_logged(self, caplog):
        """A failing task is logged and doesn't propagate."""
        workers = ConnectionWorkers()

        def boom():
            raise RuntimeError("kaboom")

        with caplog.at_level(logging.ERROR, logger="rawhttpd.core.workers"):
            workers.spawn(boom, name="conn-boom")
            assert workers.join_all(timeout=5.0)

        assert "kaboom" in caplog.text
        assert "conn-boom" in caplog.text
