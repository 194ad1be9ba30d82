"""Unit tests for TableLockManager."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from docstore.domain.errors import LockTimeoutError
from docstore.domain.services import TableLockManager, get_lock_manager


@pytest.mark.unit
class TestTableLockManager:
    """Basic lock manager tests."""

    @pytest.fixture
    def locks(self) -> TableLockManager:
        """Create a lock manager with a short default timeout."""
        return TableLockManager(default_timeout=0.2)

    def test_acquire_release(self, locks: TableLockManager) -> None:
        """A free table lock can be acquired and released."""
        path = Path("/data/shop/orders")

        waited = locks.acquire(path)
        assert waited >= 0
        assert locks.is_locked(path)

        locks.release(path)
        assert not locks.is_locked(path)

    def test_timeout(self, locks: TableLockManager) -> None:
        """A held lock times out for a second acquirer."""
        path = Path("/data/shop/orders")
        locks.acquire(path)

        with pytest.raises(LockTimeoutError, match="Timed out"):
            locks.acquire(path, timeout=0.05)

        locks.release(path)

    def test_different_tables_independent(self, locks: TableLockManager) -> None:
        """Locks on different tables do not contend."""
        with locks.hold(Path("/data/shop/orders")):
            with locks.hold(Path("/data/shop/users")):
                assert locks.is_locked(Path("/data/shop/orders"))
                assert locks.is_locked(Path("/data/shop/users"))
                assert locks.active_count() == 2

    def test_hold_releases_on_error(self, locks: TableLockManager) -> None:
        """Locks are released when the block raises."""
        path = Path("/data/shop/orders")

        with pytest.raises(RuntimeError):
            with locks.hold(path):
                raise RuntimeError("boom")

        assert not locks.is_locked(path)

    def test_hold_multiple_dedupes(self, locks: TableLockManager) -> None:
        """Holding the same path twice in one call does not self-deadlock."""
        path = Path("/data/shop/orders")

        with locks.hold(path, path):
            assert locks.is_locked(path)

        assert not locks.is_locked(path)

    def test_hold_partial_failure_releases(self, locks: TableLockManager) -> None:
        """If one of several locks times out, the acquired ones are released."""
        a, b = Path("/data/shop/a"), Path("/data/shop/b")
        locks.acquire(b)

        with pytest.raises(LockTimeoutError):
            with locks.hold(a, b, timeout=0.05):
                pass

        assert not locks.is_locked(a)
        locks.release(b)

    def test_blocks_other_thread(self, locks: TableLockManager) -> None:
        """A second thread waits until the holder releases."""
        path = Path("/data/shop/orders")
        order: list[str] = []
        entered = threading.Event()

        def worker() -> None:
            entered.set()
            with locks.hold(path, timeout=2.0):
                order.append("worker")

        with locks.hold(path):
            thread = threading.Thread(target=worker)
            thread.start()
            entered.wait(1.0)
            order.append("main")

        thread.join(2.0)
        assert order == ["main", "worker"]

    def test_release_unheld_raises(self, locks: TableLockManager) -> None:
        """Releasing a lock that is not held is an error."""
        with pytest.raises(RuntimeError):
            locks.release(Path("/data/shop/orders"))

    def test_registry_drops_unused_entries(self, locks: TableLockManager) -> None:
        """Entries disappear once nobody holds or waits for them."""
        for name in ("a", "b", "c"):
            with locks.hold(Path(f"/data/shop/{name}")):
                assert locks.active_count() == 1

        assert locks.active_count() == 0

    def test_timed_out_waiter_leaves_no_entry(self, locks: TableLockManager) -> None:
        """A failed acquisition does not keep the entry alive after release."""
        path = Path("/data/shop/orders")
        locks.acquire(path)
        with pytest.raises(LockTimeoutError):
            locks.acquire(path, timeout=0.05)

        locks.release(path)

        assert locks.active_count() == 0
        assert not locks.is_locked(path)

    def test_empty_manager_is_truthy(self) -> None:
        """A manager with no locks in use still counts as a real object."""
        assert TableLockManager()


@pytest.mark.unit
class TestLockManagerSingleton:
    """Tests for get_lock_manager."""

    def test_same_instance(self) -> None:
        """The process-wide manager is created once."""
        assert get_lock_manager() is get_lock_manager()
