"""Persistence of the lock file."""

from pwin.core.lock_store.abc import LockStore
from pwin.core.lock_store.fake import FakeLockStore
from pwin.core.lock_store.real import RealLockStore

__all__ = ["FakeLockStore", "LockStore", "RealLockStore"]
