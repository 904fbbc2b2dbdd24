"""Fake in-memory lock store for testing."""

from copy import deepcopy
from pathlib import Path

from pwin.core.errors import StorageError
from pwin.core.lock_file import LockFile
from pwin.core.lock_store.abc import LockStore


class FakeLockStore(LockStore):
    """In-memory fake implementation for testing.

    load() hands out a copy so that unsaved mutations stay invisible, the
    same as with a file on disk.
    """

    def __init__(self, lock: LockFile | None = None, *, fail_on_save: bool = False) -> None:
        """Create FakeLockStore.

        Args:
            lock: Initial persisted state (None = nothing persisted yet)
            fail_on_save: Raise StorageError from save() to simulate a full disk
        """
        self._lock = lock
        self._fail_on_save = fail_on_save
        self._save_count = 0

    @property
    def lock(self) -> LockFile | None:
        """Get the persisted lock file for test assertions."""
        return deepcopy(self._lock)

    @property
    def save_count(self) -> int:
        """Number of successful save() calls."""
        return self._save_count

    def load(self) -> LockFile:
        if self._lock is None:
            return LockFile()
        return deepcopy(self._lock)

    def save(self, lock: LockFile) -> None:
        if self._fail_on_save:
            raise StorageError(f"Could not write lock file {self.path()}")
        self._lock = deepcopy(lock)
        self._save_count += 1

    def path(self) -> Path:
        return Path("/fake/home/.pwin.lock")
