"""Zip extraction into an installation directory."""

import logging
import shutil
import zipfile
import zlib
from pathlib import Path, PurePosixPath, PureWindowsPath

from pwin.core.errors import (
    ArchiveFormatError,
    ArchiveIOError,
    DestinationNotDirectoryError,
    UnsafeArchivePathError,
)

logger = logging.getLogger(__name__)

# Raised while reading a member: zlib.error for corrupt deflate data, EOFError
# for a truncated member. Encrypted members raise RuntimeError.
_FORMAT_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError)


def _is_directory_entry(info: zipfile.ZipInfo) -> bool:
    return info.filename.endswith(("/", "\\"))


def _target_path(destination: Path, entry_name: str) -> Path:
    """Resolve where entry_name lands under destination.

    Raises:
        UnsafeArchivePathError: If the entry is absolute, drive-qualified, or
            resolves outside destination
    """
    normalized = entry_name.replace("\\", "/")
    if PurePosixPath(normalized).is_absolute() or PureWindowsPath(normalized).drive:
        raise UnsafeArchivePathError(entry_name)

    target = (destination / normalized).resolve()
    if target != destination and not target.is_relative_to(destination):
        raise UnsafeArchivePathError(entry_name)
    return target


def _prepare_destination(destination: Path) -> Path:
    if not destination.exists():
        logger.debug('Output directory "%s" does not exist, creating it', destination)
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveIOError(f"Could not create {destination}: {e}") from e

    if not destination.is_dir():
        raise DestinationNotDirectoryError(str(destination))
    return destination.resolve()


def extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract every entry of archive_path below destination.

    All entry names are checked before anything is written, so an archive
    containing a single escaping path (zip-slip) writes nothing. Existing
    files are overwritten, which makes a repeated extraction idempotent.
    A failure midway leaves whatever was already extracted in place.

    Raises:
        ArchiveIOError: On filesystem errors, including a missing archive
        ArchiveFormatError: If the archive is corrupt or unsupported
        DestinationNotDirectoryError: If destination exists and is not a directory
        UnsafeArchivePathError: If an entry would land outside destination
    """
    logger.debug("Opening ZIP file %s", archive_path)
    try:
        archive = zipfile.ZipFile(archive_path)
    except zipfile.BadZipFile as e:
        raise ArchiveFormatError(f"{archive_path} is not a valid zip archive: {e}") from e
    except OSError as e:
        raise ArchiveIOError(f"Could not open {archive_path}: {e}") from e

    with archive:
        root = _prepare_destination(destination)
        members = [(info, _target_path(root, info.filename)) for info in archive.infolist()]

        for index, (info, target) in enumerate(members):
            try:
                if _is_directory_entry(info):
                    logger.debug("ZIP: entry %d is directory %s", index, target)
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                logger.debug(
                    'ZIP: entry %d "%s" extracted to "%s" (%d bytes)',
                    index,
                    info.filename,
                    target,
                    info.file_size,
                )
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as source, target.open("wb") as sink:
                    shutil.copyfileobj(source, sink)
            except _FORMAT_ERRORS as e:
                message = f"Could not read {info.filename} from {archive_path}: {e}"
                raise ArchiveFormatError(message) from e
            except OSError as e:
                raise ArchiveIOError(f"Could not extract {info.filename} to {target}: {e}") from e

    logger.info("Extracted %d entries from %s into %s", len(members), archive_path, root)
