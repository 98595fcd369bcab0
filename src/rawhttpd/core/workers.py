"""
=============================================================================
CONNECTION WORKERS
=============================================================================

One thread per accepted connection.

    accept loop                         worker threads
    ───────────                         ──────────────
    conn A ──► spawn(handle, A) ──►     [conn-a1b2] handle(A) → exit
    conn B ──► spawn(handle, B) ──►     [conn-c3d4] handle(B) → exit
    conn C ──► spawn(handle, C) ──►     [conn-e5f6] handle(C) → exit

Every connection gets its own thread the moment it is accepted, so a
client that connects and never sends anything (or a slow file read) only
ties up its own thread. A fixed-size pool can't promise that: N stalled
clients would occupy all N workers and queue everyone else.

The read timeout on each Connection bounds how long a thread can live
waiting on a silent client.

Threads are daemons: an interpreter exit never hangs on a stuck client.
join_all() is the polite path used on shutdown.

=============================================================================
"""

import threading
import time
import logging
from typing import Callable, List, Optional


logger = logging.getLogger(__name__)


class ConnectionWorkers:
    """
    Tracks the threads serving in-flight connections.

    Usage:
        workers = ConnectionWorkers()
        workers.spawn(handle_connection, conn, name=f"conn-{conn.id}")
        ...
        workers.join_all(timeout=5.0)
    """

    def __init__(self):
        self._threads: List[threading.Thread] = []
        self._lock = threading.Lock()  # Protects _threads
        self.spawned = 0

    def spawn(self, func: Callable, *args, name: Optional[str] = None) -> threading.Thread:
        """
        Run func(*args) on a new daemon thread.

        Exceptions escaping func are logged, never propagated: the accept
        loop must keep running whatever one connection does.
        """
        thread = threading.Thread(
            target=self._run,
            args=(func, args),
            name=name,
            daemon=True,
        )

        with self._lock:
            # Forget finished threads so the list doesn't grow forever
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
            self.spawned += 1

        thread.start()
        return thread

    def _run(self, func: Callable, args: tuple):
        try:
            func(*args)
        except Exception as e:
            logger.exception(f"Connection worker {threading.current_thread().name} failed: {e}")

    @property
    def active_count(self) -> int:
        """Threads still serving a connection."""
        with self._lock:
            return sum(1 for t in self._threads if t.is_alive())

    def join_all(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for in-flight connections to finish.

        Args:
            timeout: Total seconds to wait across all threads. None waits
                     as long as it takes.

        Returns:
            True if every thread finished, False if some were still
            running when the timeout ran out.
        """
        with self._lock:
            threads = list(self._threads)

        deadline = None if timeout is None else time.time() + timeout

        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.time())
            thread.join(remaining)

        still_running = sum(1 for t in threads if t.is_alive())
        if still_running:
            logger.warning(f"{still_running} connection(s) still open after {timeout}s")
            return False
        return True
