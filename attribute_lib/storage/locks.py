"""Per-record locks for read-modify-write sequences.

A record lock has two layers. Threads of this process queue on a re-entrant
lock kept per key; the thread that gets it then takes an exclusive `flock`
on a lock file named after the key, which serializes other processes using
the same lock directory. Waiting is bounded: after `timeout` seconds
`LockTimeoutError` is raised. Lock files only coordinate; they hold no data
and are left in place.

Requires a POSIX platform (`fcntl`).
"""
from __future__ import annotations
import fcntl
import logging
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Dict, Iterator, Optional

from attribute_lib.errors import LockTimeoutError
from .base import record_key

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0
POLL_INTERVAL = 0.05
# Default lock directory inside the storage root. Record names only use `%`
# before two hex digits, so no record can collide with it.
LOCK_DIR_NAME = "%locks"


class _KeyLock:
    __slots__ = ("rlock", "depth", "handle")

    def __init__(self) -> None:
        self.rlock = threading.RLock()
        self.depth = 0
        self.handle: Optional[IO[str]] = None


class LockManager:
    def __init__(self, lock_dir: str | Path, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.lock_dir = Path(lock_dir)
        self.timeout = timeout
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, _KeyLock] = {}

    @staticmethod
    def lock_key(namespace: str, user: str) -> str:
        return f"{namespace}.{user}"

    def _entry(self, key: str) -> _KeyLock:
        # Keyed by the encoded record key, which unlike the display key is unambiguous.
        with self._registry_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            return entry

    def _lock_path(self, namespace: str, user: str) -> Path:
        # Raw keys may contain path separators; reuse the record file encoding.
        return self.lock_dir / (record_key(namespace, user) + ".lock")

    def _acquire_file(self, path: Path, key: str, deadline: float, wait: float) -> IO[str]:
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        f = open(path, "a+")
        try:
            while True:
                try:
                    fcntl.flock(f, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    return f
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise LockTimeoutError(key, wait)
                    time.sleep(POLL_INTERVAL)
        except BaseException:
            f.close()
            raise

    @staticmethod
    def _release_file(f: IO[str]) -> None:
        try:
            fcntl.flock(f, fcntl.LOCK_UN)
        finally:
            f.close()

    @contextmanager
    def lock(self, namespace: str, user: str, timeout: Optional[float] = None) -> Iterator[None]:
        """Hold the lock for (namespace, user) for the duration of the block.

        Re-entrant for the holding thread. Raises `LockTimeoutError` if the
        lock is not obtained within `timeout` (default: the manager's).
        """
        key = self.lock_key(namespace, user)
        wait = self.timeout if timeout is None else timeout
        deadline = time.monotonic() + wait
        entry = self._entry(record_key(namespace, user))

        if not entry.rlock.acquire(timeout=wait):
            logger.warning("Timed out waiting for in-process lock %r", key)
            raise LockTimeoutError(key, wait)
        try:
            if entry.depth == 0:
                entry.handle = self._acquire_file(self._lock_path(namespace, user), key, deadline, wait)
                logger.debug("Acquired lock %r", key)
            entry.depth += 1
            try:
                yield
            finally:
                entry.depth -= 1
                if entry.depth == 0 and entry.handle is not None:
                    handle, entry.handle = entry.handle, None
                    self._release_file(handle)
                    logger.debug("Released lock %r", key)
        finally:
            entry.rlock.release()

    def is_locked(self, namespace: str, user: str) -> bool:
        """Return True when a thread of this process currently holds the lock."""
        with self._registry_lock:
            entry = self._locks.get(record_key(namespace, user))
        return entry is not None and entry.depth > 0
