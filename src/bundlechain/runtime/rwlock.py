"""Readers-writer lock guarding Translator configuration.

Lookups (translate, has_translation, get_keys) share the lock; setters and
reload() take it exclusively. Writers are preferred: once a writer is
waiting, new readers queue behind it, so a steady stream of lookups cannot
starve a locale switch.

Rules:
    - Read locks are reentrant per thread.
    - A thread holding the read lock cannot take the write lock (RuntimeError).
    - A thread holding the write lock cannot take either lock (RuntimeError).

Python 3.13+.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = ["RWLock"]


class RWLock:
    """Shared/exclusive lock with writer preference.

    Example:
        >>> lock = RWLock()
        >>> with lock.read():
        ...     pass
        >>> with lock.write(timeout=1.0):
        ...     pass
    """

    __slots__ = ("_condition", "_readers", "_waiting_writers", "_writer")

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        # thread id -> reentrant read depth
        self._readers: dict[int, int] = {}
        self._writer: int | None = None
        self._waiting_writers = 0

    @contextmanager
    def read(self, timeout: float | None = None) -> Generator[None]:
        """Hold the lock in shared mode for the duration of the block.

        Args:
            timeout: Seconds to wait, None to wait forever

        Raises:
            RuntimeError: If the calling thread holds the write lock
            TimeoutError: If the lock is not acquired in time
            ValueError: If timeout is negative
        """
        self._acquire_read(timeout)
        try:
            yield
        finally:
            self._release_read()

    @contextmanager
    def write(self, timeout: float | None = None) -> Generator[None]:
        """Hold the lock exclusively for the duration of the block.

        Args:
            timeout: Seconds to wait, None to wait forever

        Raises:
            RuntimeError: If the calling thread already holds the lock
            TimeoutError: If the lock is not acquired in time
            ValueError: If timeout is negative
        """
        self._acquire_write(timeout)
        try:
            yield
        finally:
            self._release_write()

    @staticmethod
    def _deadline(timeout: float | None) -> float | None:
        if timeout is None:
            return None
        if timeout < 0:
            msg = f"Timeout must be non-negative, got {timeout}"
            raise ValueError(msg)
        return time.monotonic() + timeout

    def _wait(self, deadline: float | None, what: str) -> None:
        """Wait on the condition once; raise when the deadline has passed."""
        if deadline is None:
            self._condition.wait()
            return
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            msg = f"Timed out waiting for {what} lock"
            raise TimeoutError(msg)
        self._condition.wait(timeout=remaining)

    def _acquire_read(self, timeout: float | None) -> None:
        deadline = self._deadline(timeout)
        me = threading.get_ident()
        with self._condition:
            if me in self._readers:
                self._readers[me] += 1
                return
            if self._writer == me:
                msg = "Cannot acquire read lock while holding write lock"
                raise RuntimeError(msg)
            while self._writer is not None or self._waiting_writers:
                self._wait(deadline, "read")
            self._readers[me] = 1

    def _release_read(self) -> None:
        me = threading.get_ident()
        with self._condition:
            depth = self._readers.get(me)
            if depth is None:
                msg = "Thread does not hold read lock"
                raise RuntimeError(msg)
            if depth > 1:
                self._readers[me] = depth - 1
                return
            del self._readers[me]
            if not self._readers:
                self._condition.notify_all()

    def _acquire_write(self, timeout: float | None) -> None:
        deadline = self._deadline(timeout)
        me = threading.get_ident()
        with self._condition:
            if me in self._readers:
                msg = "Cannot upgrade read lock to write lock"
                raise RuntimeError(msg)
            if self._writer == me:
                msg = "Write lock is not reentrant"
                raise RuntimeError(msg)
            self._waiting_writers += 1
            try:
                while self._readers or self._writer is not None:
                    self._wait(deadline, "write")
                self._writer = me
            finally:
                self._waiting_writers -= 1
                # Readers blocked on a waiting writer must re-check after a timeout.
                self._condition.notify_all()

    def _release_write(self) -> None:
        with self._condition:
            if self._writer != threading.get_ident():
                msg = "Thread does not hold write lock"
                raise RuntimeError(msg)
            self._writer = None
            self._condition.notify_all()

    @property
    def reader_count(self) -> int:
        """Number of distinct threads holding the read lock."""
        with self._condition:
            return len(self._readers)

    @property
    def writer_active(self) -> bool:
        """True while some thread holds the write lock."""
        with self._condition:
            return self._writer is not None
