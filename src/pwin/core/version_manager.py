"""Install, remove and update PHP versions.

Every operation loads the lock file and configuration first, and persists the
lock file only as the last step of a successful sequence. A failed install
therefore never leaves an entry behind, and a failed removal leaves the entry
describing the directory that still exists.
"""

import hashlib
import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

from pwin.core.archive import extract_zip
from pwin.core.config_store import PwinConfig
from pwin.core.context import PwinContext
from pwin.core.errors import ChecksumMismatchError, DeleteFailedError, StorageError
from pwin.core.lock_file import InstalledEntry
from pwin.core.platform import Arch, ThreadSafety
from pwin.core.releases import (
    Download,
    Release,
    ReleaseCatalog,
    find_release,
    parse_releases,
    select_build,
)
from pwin.core.version import PhpVersion

logger = logging.getLogger(__name__)


class InstallStatus(Enum):
    INSTALLED = "installed"
    ALREADY_INSTALLED = "already_installed"
    NO_MATCHING_BUILD = "no_matching_build"


@dataclass(frozen=True)
class InstallResult:
    status: InstallStatus
    version: PhpVersion  # Canonical version when resolved, else the requested one
    thread_safety: ThreadSafety
    arch: Arch
    variant: str | None = None
    install_dir: Path | None = None


class RemoveStatus(Enum):
    REMOVED = "removed"
    NOT_INSTALLED = "not_installed"


@dataclass(frozen=True)
class RemoveResult:
    status: RemoveStatus
    version: PhpVersion


class UpdateStatus(Enum):
    UPDATED = "updated"
    WOULD_UPDATE = "would_update"
    UP_TO_DATE = "up_to_date"
    NOT_IN_CATALOG = "not_in_catalog"
    NO_MATCHING_BUILD = "no_matching_build"
    NOT_INSTALLED = "not_installed"


@dataclass(frozen=True)
class UpdateAction:
    """Outcome for one targeted version.

    thread_safety and arch are set for NO_MATCHING_BUILD, naming the build
    that was looked for.
    """

    status: UpdateStatus
    installed: PhpVersion
    available: PhpVersion | None = None
    thread_safety: ThreadSafety | None = None
    arch: Arch | None = None


@dataclass(frozen=True)
class _Materialized:
    variant: str
    install_dir: Path


def _fetch_catalog(ctx: PwinContext) -> ReleaseCatalog:
    return parse_releases(ctx.win_php.get_releases())


def _verify_checksum(archive_path: Path, download: Download) -> None:
    if not download.sha256:
        logger.debug("No checksum published for %s", download.path)
        return

    digest = hashlib.sha256()
    with archive_path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)

    actual = digest.hexdigest()
    if actual.lower() != download.sha256.lower():
        raise ChecksumMismatchError(download.path, download.sha256, actual)


def _remove_archive(archive_path: Path) -> None:
    try:
        archive_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove ZIP file %s: %s", archive_path, e)


def _materialize(
    ctx: PwinContext,
    config: PwinConfig,
    release: Release,
    thread_safety: ThreadSafety,
    arch: Arch,
) -> _Materialized | None:
    """Download and extract the matching build of release.

    Returns None, having touched nothing, when no variant matches. The
    downloaded archive is deleted whether or not extraction succeeds.
    """
    match = select_build(release, thread_safety, arch)
    if match is None:
        return None
    variant, build = match
    logger.debug("Selected build %s for %s", variant, release.version)

    base = config.install_path
    if not base.exists():
        logger.debug('Will create install path "%s"', base)
        try:
            base.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Could not create install directory {base}: {e}") from e

    archive_path = base / PurePosixPath(build.zip.path).name
    install_dir = base / release.version.format()
    try:
        ctx.win_php.download(build.zip.path, archive_path)
        _verify_checksum(archive_path, build.zip)
        extract_zip(archive_path, install_dir)
    finally:
        _remove_archive(archive_path)

    return _Materialized(variant=variant, install_dir=install_dir)


def _delete_install_dir(install_dir: Path) -> None:
    if not install_dir.exists():
        logger.warning("Install directory %s is already gone", install_dir)
        return
    try:
        shutil.rmtree(install_dir)
    except OSError as e:
        raise DeleteFailedError(f"Failed to delete version folder {install_dir}: {e}") from e


def install(ctx: PwinContext, version: PhpVersion) -> InstallResult:
    """Install the current release of version's major.minor line.

    Raises:
        CatalogError: If the catalog or archive cannot be fetched or verified
        VersionNotFoundError: If the catalog has no such release line
        ExtractError: If the archive cannot be extracted
        StorageError: If the lock file or install directory cannot be written
    """
    lock = ctx.lock_store.load()
    config = ctx.config_store.load()
    thread_safety = config.thread_safety
    logger.debug("Thread safety %s, Arch %s", thread_safety.label, ctx.arch.token)

    existing = lock.get(version)
    if existing is not None:
        return InstallResult(
            status=InstallStatus.ALREADY_INSTALLED,
            version=existing.version,
            thread_safety=existing.thread_safety,
            arch=existing.arch,
        )

    release = find_release(_fetch_catalog(ctx), version)
    materialized = _materialize(ctx, config, release, thread_safety, ctx.arch)
    if materialized is None:
        return InstallResult(
            status=InstallStatus.NO_MATCHING_BUILD,
            version=release.version,
            thread_safety=thread_safety,
            arch=ctx.arch,
        )

    lock.add(InstalledEntry(version=release.version, thread_safety=thread_safety, arch=ctx.arch))
    ctx.lock_store.save(lock)
    logger.info("Installed %s into %s", release.version, materialized.install_dir)

    return InstallResult(
        status=InstallStatus.INSTALLED,
        version=release.version,
        thread_safety=thread_safety,
        arch=ctx.arch,
        variant=materialized.variant,
        install_dir=materialized.install_dir,
    )


def remove(ctx: PwinContext, version: PhpVersion) -> RemoveResult:
    """Delete the installed version of version's major.minor line.

    Raises:
        DeleteFailedError: If the install directory cannot be deleted; the
            lock file is left unchanged so the removal can be retried
        StorageError: If the lock file cannot be read or written
    """
    lock = ctx.lock_store.load()
    config = ctx.config_store.load()

    entry = lock.get(version)
    if entry is None:
        return RemoveResult(status=RemoveStatus.NOT_INSTALLED, version=version)

    _delete_install_dir(config.install_path / entry.version.format())
    lock.remove(entry.version)
    ctx.lock_store.save(lock)
    logger.info("Removed %s", entry.version)

    return RemoveResult(status=RemoveStatus.REMOVED, version=entry.version)


def update(ctx: PwinContext, version: PhpVersion | None, dry_run: bool) -> list[UpdateAction]:
    """Move installed versions to the latest patch of their line.

    Targets the installed entry matching version, or every entry when version
    is None. The new build is installed next to the old one before the old
    directory is deleted, and it keeps the entry's thread safety and arch.
    Under dry_run only the planned actions are returned.

    Raises:
        Same as install() and remove()
    """
    lock = ctx.lock_store.load()
    config = ctx.config_store.load()

    if version is None:
        targets = lock.entries()
    else:
        entry = lock.get(version)
        if entry is None:
            return [UpdateAction(status=UpdateStatus.NOT_INSTALLED, installed=version)]
        targets = [entry]

    if not targets:
        return []

    catalog = _fetch_catalog(ctx)
    actions: list[UpdateAction] = []
    for entry in targets:
        release = catalog.get(entry.version.minor_key())
        if release is None:
            actions.append(
                UpdateAction(status=UpdateStatus.NOT_IN_CATALOG, installed=entry.version)
            )
            continue

        if not release.version.is_newer_patch_than(entry.version):
            actions.append(
                UpdateAction(
                    status=UpdateStatus.UP_TO_DATE,
                    installed=entry.version,
                    available=release.version,
                )
            )
            continue

        if dry_run:
            actions.append(
                UpdateAction(
                    status=UpdateStatus.WOULD_UPDATE,
                    installed=entry.version,
                    available=release.version,
                )
            )
            continue

        materialized = _materialize(ctx, config, release, entry.thread_safety, entry.arch)
        if materialized is None:
            actions.append(
                UpdateAction(
                    status=UpdateStatus.NO_MATCHING_BUILD,
                    installed=entry.version,
                    available=release.version,
                    thread_safety=entry.thread_safety,
                    arch=entry.arch,
                )
            )
            continue

        _delete_install_dir(config.install_path / entry.version.format())
        updated = InstalledEntry(
            version=release.version, thread_safety=entry.thread_safety, arch=entry.arch
        )
        lock.replace(updated)
        ctx.lock_store.save(lock)
        logger.info("Updated %s to %s", entry.version, release.version)
        actions.append(
            UpdateAction(
                status=UpdateStatus.UPDATED,
                installed=entry.version,
                available=release.version,
            )
        )

    return actions


def info(ctx: PwinContext) -> list[InstalledEntry]:
    """Installed versions in lock file order."""
    return ctx.lock_store.load().entries()
