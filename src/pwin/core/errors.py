"""Exception hierarchy for pwin operations.

Every error the core raises derives from PwinError so the CLI error boundary
can turn it into a one-line message. Anything else is a bug and keeps its
traceback.
"""

from enum import Enum


class PwinError(Exception):
    """Base class for all expected pwin failures."""


class VersionParseErrorKind(Enum):
    EMPTY = "empty"
    BAD_LENGTH = "bad_length"
    INVALID_INTEGER = "invalid_integer"


class VersionParseError(PwinError, ValueError):
    """A version string is not `major.minor[.patch]`."""

    def __init__(self, text: str, kind: VersionParseErrorKind) -> None:
        self.text = text
        self.kind = kind
        match kind:
            case VersionParseErrorKind.EMPTY:
                detail = "version is empty"
            case VersionParseErrorKind.BAD_LENGTH:
                detail = "expected major.minor or major.minor.patch"
            case VersionParseErrorKind.INVALID_INTEGER:
                detail = "every part must be an integer between 0 and 255"
        super().__init__(f"Invalid version {text!r}: {detail}")


class DuplicateVersionError(PwinError):
    """The lock file already holds an entry for the same major.minor."""


class StorageError(PwinError):
    """The lock or config file cannot be read or written."""


class CatalogError(PwinError):
    """The release catalog or a download from it is unusable."""


class TransportError(CatalogError):
    """The request never produced a response."""


class HttpStatusError(CatalogError):
    """The server answered with a status other than 200."""

    def __init__(self, url: str, status_code: int) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"GET {url} returned HTTP {status_code}")


class ManifestError(CatalogError):
    """releases.json is not shaped as expected."""


class MissingFieldError(ManifestError):
    """A release object lacks its version or has no build variants."""

    def __init__(self, release_key: str, field: str) -> None:
        self.release_key = release_key
        self.field = field
        super().__init__(f"Release {release_key!r} in releases.json is missing {field!r}")


class ChecksumMismatchError(CatalogError):
    """A downloaded archive does not match the SHA-256 the catalog reports."""

    def __init__(self, path: str, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Checksum mismatch for {path}: expected {expected}, got {actual}")


class NotFoundError(PwinError):
    """Something the user asked for does not exist."""


class VersionNotFoundError(NotFoundError):
    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Version {version} not found in the release catalog")


class ExtractError(PwinError):
    """Archive extraction failed."""


class ArchiveIOError(ExtractError):
    pass


class ArchiveFormatError(ExtractError):
    pass


class DestinationNotDirectoryError(ExtractError):
    def __init__(self, destination: str) -> None:
        self.destination = destination
        super().__init__(f"Extraction target is not a directory: {destination}")


class UnsafeArchivePathError(ExtractError):
    """An entry would be written outside the extraction directory."""

    def __init__(self, entry_name: str) -> None:
        self.entry_name = entry_name
        super().__init__(f"Archive entry escapes the extraction directory: {entry_name}")


class DeleteFailedError(PwinError):
    """An installation directory could not be removed."""
