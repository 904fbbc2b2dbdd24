"""In-memory model of ~/.pwin.lock, the record of installed PHP versions."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from pwin.core.errors import DuplicateVersionError
from pwin.core.platform import Arch, ThreadSafety
from pwin.core.version import PhpVersion


@dataclass(frozen=True)
class InstalledEntry:
    """One installed PHP version, as recorded in the lock file."""

    version: PhpVersion
    thread_safety: ThreadSafety
    arch: Arch


@dataclass
class LockFile:
    """Ordered set of installed entries, unique by major.minor.

    Mutated in memory during an operation and persisted by a LockStore once
    the operation has succeeded.
    """

    versions: list[InstalledEntry] = field(default_factory=list)

    def has(self, version: PhpVersion) -> bool:
        return self.get(version) is not None

    def get(self, version: PhpVersion) -> InstalledEntry | None:
        for entry in self.versions:
            if entry.version.matches_major_minor(version):
                return entry
        return None

    def add(self, entry: InstalledEntry) -> None:
        """Append an entry.

        Raises:
            DuplicateVersionError: If an entry for the same major.minor exists
        """
        existing = self.get(entry.version)
        if existing is not None:
            raise DuplicateVersionError(
                f"Version {entry.version.minor_key()} is already recorded as {existing.version}"
            )
        self.versions.append(entry)

    def replace(self, entry: InstalledEntry) -> None:
        """Swap the entry for the same major.minor, keeping its position.

        Raises:
            KeyError: If no entry for that major.minor exists
        """
        for index, current in enumerate(self.versions):
            if current.version.matches_major_minor(entry.version):
                self.versions[index] = entry
                return
        raise KeyError(entry.version.minor_key())

    def remove(self, version: PhpVersion) -> int:
        """Drop every entry equivalent to version and return how many went."""
        kept = [e for e in self.versions if not e.version.matches_major_minor(version)]
        removed = len(self.versions) - len(kept)
        self.versions = kept
        return removed

    def entries(self) -> list[InstalledEntry]:
        return list(self.versions)

    def __iter__(self) -> Iterator[InstalledEntry]:
        return iter(self.versions)

    def __len__(self) -> int:
        return len(self.versions)


def lock_to_dict(lock: LockFile) -> dict[str, Any]:
    """Convert to the TOML document shape of ~/.pwin.lock."""
    versions: list[dict[str, Any]] = []
    for entry in lock:
        version: dict[str, int] = {"major": entry.version.major, "minor": entry.version.minor}
        if entry.version.patch is not None:
            version["patch"] = entry.version.patch
        versions.append(
            {
                "version": version,
                "thread_safety": entry.thread_safety.value,
                "arch": entry.arch.value,
            }
        )
    return {"versions": versions}


def lock_from_dict(data: dict[str, Any]) -> LockFile:
    """Build a LockFile from a parsed ~/.pwin.lock document.

    Raises:
        ValueError: If an entry is malformed or two entries share a major.minor
    """
    raw_versions = data.get("versions", [])
    if not isinstance(raw_versions, list):
        raise ValueError("'versions' must be an array of tables")

    lock = LockFile()
    for index, raw in enumerate(raw_versions):
        try:
            raw_version = raw["version"]
            version = PhpVersion(
                major=int(raw_version["major"]),
                minor=int(raw_version["minor"]),
                patch=int(raw_version["patch"]) if "patch" in raw_version else None,
            )
            entry = InstalledEntry(
                version=version,
                thread_safety=ThreadSafety(raw["thread_safety"]),
                arch=Arch(raw["arch"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid entry at index {index}: {e}") from e

        try:
            lock.add(entry)
        except DuplicateVersionError as e:
            raise ValueError(str(e)) from e
    return lock
