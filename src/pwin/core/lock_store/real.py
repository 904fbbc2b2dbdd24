"""TOML-file lock store implementation."""

import logging
import os
import tempfile
import tomllib
from pathlib import Path

import tomli_w

from pwin.core.errors import StorageError
from pwin.core.lock_file import LockFile, lock_from_dict, lock_to_dict
from pwin.core.lock_store.abc import LockStore

logger = logging.getLogger(__name__)


def default_lock_path() -> Path:
    return Path.home() / ".pwin.lock"


class RealLockStore(LockStore):
    """Production lock store backed by ~/.pwin.lock."""

    def __init__(self, lock_path: Path | None = None) -> None:
        """Create RealLockStore.

        Args:
            lock_path: Lock file location (defaults to ~/.pwin.lock)
        """
        self._path = lock_path if lock_path is not None else default_lock_path()

    def path(self) -> Path:
        return self._path

    def load(self) -> LockFile:
        logger.debug('Looking for lock file at path "%s"', self._path)
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return LockFile()
        except OSError as e:
            raise StorageError(f"Could not open lock file {self._path}: {e}") from e

        try:
            return lock_from_dict(tomllib.loads(content))
        except (tomllib.TOMLDecodeError, ValueError) as e:
            raise StorageError(f"Could not parse lock file {self._path}: {e}") from e

    def save(self, lock: LockFile) -> None:
        """Write the lock file atomically.

        The document is written to a sibling temporary file that then replaces
        the lock file, so an interrupted write leaves the previous version.
        """
        content = tomli_w.dumps(lock_to_dict(lock))
        parent = self._path.parent

        try:
            parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise StorageError(f"Could not write lock file {self._path}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Could not write lock file {self._path}: {e}") from e

        logger.debug("Wrote %d entries to %s", len(lock), self._path)
