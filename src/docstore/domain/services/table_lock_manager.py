"""Per-table mutual exclusion for read-modify-write cycles.

Every record operation reads the whole table file, changes it in memory
and writes it back. Two callers doing this concurrently on the same file
would lose one of the updates, so each cycle runs while holding a lock
keyed by the resolved table path.

Lock Scope:
    - One ``threading.Lock`` per table path, created on first use
    - Locks on different tables never contend
    - Multi-table acquisition (rename) happens in sorted path order
    - An entry is dropped once no thread holds or waits for it, so the
      registry only holds tables that are currently in use

Thread Safety:
    The registry itself is guarded by an internal lock. Locks are not
    reentrant; a thread must not re-acquire a table it already holds.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator

from docstore.domain.errors import LockTimeoutError


@dataclass
class _LockEntry:
    """A table lock and the number of threads holding or waiting for it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class TableLockManager:
    """Registry of per-table locks.

    Attributes:
        default_timeout: Seconds to wait for a lock when the caller
            gives no explicit timeout. ``None`` waits forever.
    """

    def __init__(self, default_timeout: float | None = 30.0) -> None:
        """Initialize the lock manager.

        Args:
            default_timeout: Default acquisition timeout in seconds.
        """
        self._lock = threading.Lock()
        self._locks: Dict[str, _LockEntry] = {}
        self.default_timeout = default_timeout

    @staticmethod
    def _key(path: Path) -> str:
        return str(path)

    def _checkout(self, path: Path) -> threading.Lock:
        key = self._key(path)
        with self._lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = _LockEntry()
                self._locks[key] = entry
            entry.users += 1
            return entry.lock

    def _checkin(self, key: str, entry: _LockEntry) -> None:
        # Caller holds self._lock
        entry.users -= 1
        if entry.users == 0:
            del self._locks[key]

    def acquire(self, path: Path, timeout: float | None = None) -> float:
        """Acquire the lock for a table.

        Args:
            path: Resolved table path.
            timeout: Seconds to wait; falls back to ``default_timeout``.

        Returns:
            Seconds spent waiting.

        Raises:
            LockTimeoutError: If the lock was not acquired in time.
        """
        if timeout is None:
            timeout = self.default_timeout

        lock = self._checkout(path)
        start = time.perf_counter()
        acquired = lock.acquire(timeout=timeout) if timeout is not None else lock.acquire()
        waited = time.perf_counter() - start

        if not acquired:
            key = self._key(path)
            with self._lock:
                self._checkin(key, self._locks[key])
            raise LockTimeoutError(
                f"Timed out after {timeout}s waiting for table lock",
                path=path,
            )
        return waited

    def release(self, path: Path) -> None:
        """Release the lock for a table.

        Raises:
            RuntimeError: If the lock is not held.
        """
        key = self._key(path)
        with self._lock:
            entry = self._locks.get(key)
            if entry is None or not entry.lock.locked():
                raise RuntimeError(f"Table lock for {path} is not held")
            entry.lock.release()
            self._checkin(key, entry)

    def is_locked(self, path: Path) -> bool:
        """Check whether a table's lock is currently held."""
        with self._lock:
            entry = self._locks.get(self._key(path))
        return entry is not None and entry.lock.locked()

    @contextmanager
    def hold(self, *paths: Path, timeout: float | None = None) -> Iterator[float]:
        """Hold the locks of one or more tables for the duration of a block.

        Locks are acquired in sorted order and released on every exit
        path, including exceptions.

        Yields:
            Total seconds spent waiting for the locks.
        """
        ordered = sorted(set(paths), key=self._key)
        held: list[Path] = []
        waited = 0.0
        try:
            for path in ordered:
                waited += self.acquire(path, timeout)
                held.append(path)
            yield waited
        finally:
            for path in reversed(held):
                self.release(path)

    def active_count(self) -> int:
        """Number of tables whose lock is currently held or awaited."""
        with self._lock:
            return len(self._locks)


# Global lock manager shared by repositories that are not given one
_lock_manager: TableLockManager | None = None
_lock_manager_guard = threading.Lock()


def get_lock_manager() -> TableLockManager:
    """Get the process-wide lock manager."""
    global _lock_manager
    with _lock_manager_guard:
        if _lock_manager is None:
            _lock_manager = TableLockManager()
        return _lock_manager
