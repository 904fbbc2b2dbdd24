"""Abstract base class for lock file persistence."""

from abc import ABC, abstractmethod
from pathlib import Path

from pwin.core.lock_file import LockFile


class LockStore(ABC):
    """Abstract interface for reading and writing the lock file.

    Implementations include:
    - RealLockStore: TOML file in the user's home directory
    - FakeLockStore: In-memory for testing
    """

    @abstractmethod
    def load(self) -> LockFile:
        """Load the lock file.

        Returns:
            The persisted LockFile, or an empty one if nothing was persisted

        Raises:
            StorageError: If the stored lock file exists but cannot be read
        """
        ...

    @abstractmethod
    def save(self, lock: LockFile) -> None:
        """Persist the whole lock file, replacing what was stored.

        Raises:
            StorageError: If the lock file cannot be written
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Location of the lock file, for messages."""
        ...
