"""PHP version identifiers.

A version is `major.minor` with an optional `patch`. Installations are keyed
by `major.minor` alone: at most one 8.1.x can be installed at a time, so the
patch only tells which build of that line is on disk.
"""

from dataclasses import dataclass

from pwin.core.errors import VersionParseError, VersionParseErrorKind

_MAX_PART = 255


def _parse_part(text: str, part: str) -> int:
    if not (part.isascii() and part.isdigit()):
        raise VersionParseError(text, VersionParseErrorKind.INVALID_INTEGER)
    value = int(part)
    if value > _MAX_PART:
        raise VersionParseError(text, VersionParseErrorKind.INVALID_INTEGER)
    return value


@dataclass(frozen=True)
class PhpVersion:
    """Immutable `major.minor[.patch]` identifier.

    Dataclass equality compares all three fields; use matches_major_minor()
    for the looser equivalence the lock file is keyed on.
    """

    major: int
    minor: int
    patch: int | None = None

    @staticmethod
    def parse(text: str) -> "PhpVersion":
        """Parse `"8.1"` or `"8.1.17"`.

        Raises:
            VersionParseError: kind EMPTY, BAD_LENGTH or INVALID_INTEGER
        """
        if len(text) == 0:
            raise VersionParseError(text, VersionParseErrorKind.EMPTY)

        parts = text.split(".")
        if len(parts) < 2 or len(parts) > 3:
            raise VersionParseError(text, VersionParseErrorKind.BAD_LENGTH)

        major = _parse_part(text, parts[0])
        minor = _parse_part(text, parts[1])
        if len(parts) == 2:
            return PhpVersion(major=major, minor=minor)

        return PhpVersion(major=major, minor=minor, patch=_parse_part(text, parts[2]))

    def format(self) -> str:
        if self.patch is None:
            return f"{self.major}.{self.minor}"
        return f"{self.major}.{self.minor}.{self.patch}"

    def minor_key(self) -> str:
        """The `major.minor` text releases.json uses as its top-level keys."""
        return f"{self.major}.{self.minor}"

    def matches_major_minor(self, other: "PhpVersion") -> bool:
        return self.major == other.major and self.minor == other.minor

    def is_newer_patch_than(self, other: "PhpVersion") -> bool:
        """True if both are the same line and this one carries a later patch.

        A missing patch sorts below any concrete patch.
        """
        if not self.matches_major_minor(other):
            return False
        if self.patch is None:
            return False
        if other.patch is None:
            return True
        return self.patch > other.patch

    def __str__(self) -> str:
        return self.format()
