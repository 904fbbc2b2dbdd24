"""Decoding releases.json and picking the build to install."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from pwin.core.errors import (
    ManifestError,
    MissingFieldError,
    VersionNotFoundError,
    VersionParseError,
)
from pwin.core.platform import Arch, ThreadSafety
from pwin.core.releases.types import Build, Release, ReleaseCatalog
from pwin.core.version import PhpVersion

logger = logging.getLogger(__name__)

# Keys holding build variants contain this marker ("ts-vs16-x64", "nts-vs17-x86").
VARIANT_MARKER = "ts-"


def _parse_release(key: str, data: Any) -> Release:
    if not isinstance(data, dict):
        raise ManifestError(f"Release {key!r} in releases.json is not an object")

    raw_version: str | None = None
    builds: dict[str, Build] = {}
    for field_name, value in data.items():
        if VARIANT_MARKER in field_name:
            try:
                builds[field_name] = Build.model_validate(value)
            except ValidationError as e:
                raise ManifestError(f"Invalid build {key}/{field_name}: {e}") from e
        elif field_name == "version":
            if not isinstance(value, str):
                raise ManifestError(f"Release {key!r} has a non-string version")
            raw_version = value
        # "source", "test_pack" and anything else are not needed

    if not raw_version:
        raise MissingFieldError(key, "version")
    if not builds:
        raise MissingFieldError(key, "builds")

    try:
        version = PhpVersion.parse(raw_version)
    except VersionParseError as e:
        raise ManifestError(f"Release {key!r} has an unusable version: {e}") from e

    return Release(version=version, builds=builds)


def parse_releases(text: str) -> ReleaseCatalog:
    """Decode the releases.json document.

    Raises:
        MissingFieldError: If a release lacks "version" or has no build variants
        ManifestError: If the document is not valid JSON or not shaped as expected
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"releases.json is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError("releases.json must contain an object")

    catalog: ReleaseCatalog = {key: _parse_release(key, value) for key, value in data.items()}
    logger.debug("Catalog lists %d release lines: %s", len(catalog), ", ".join(catalog))
    return catalog


def find_release(catalog: ReleaseCatalog, version: PhpVersion) -> Release:
    """Look up the release line of version.

    The catalog is keyed by major.minor, so a patch in the requested version is
    ignored; the release's own version says which patch is current.

    Raises:
        VersionNotFoundError: If the catalog has no such release line
    """
    release = catalog.get(version.minor_key())
    if release is None:
        raise VersionNotFoundError(version.format())
    return release


def _matches(variant: str, thread_safety: ThreadSafety, arch: Arch) -> bool:
    if arch is Arch.UNSUPPORTED:
        return False
    if arch.token not in variant or thread_safety.token not in variant:
        return False
    # "nts" contains "ts"
    if thread_safety is ThreadSafety.SAFE and ThreadSafety.NON_SAFE.token in variant:
        return False
    return True


def select_build(
    release: Release, thread_safety: ThreadSafety, arch: Arch
) -> tuple[str, Build] | None:
    """Find the build variant for a thread-safety mode and architecture.

    A variant matches when its name contains both the thread-safety token and
    the architecture token. With several matches (e.g. vs16 and vs17 toolsets)
    the first in manifest order is returned; which one that is, is not part
    of the contract.

    Returns:
        (variant name, build), or None if no variant matches
    """
    for variant, build in release.builds.items():
        if _matches(variant, thread_safety, arch):
            return variant, build
    return None
