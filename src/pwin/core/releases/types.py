"""Types for the releases.json catalog."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from pwin.core.version import PhpVersion


class Download(BaseModel):
    """One downloadable archive of a build."""

    model_config = ConfigDict(frozen=True)

    path: str  # Relative to the releases base URL, e.g. "php-8.1.17-nts-Win32-vs16-x64.zip"
    size: str  # Human readable, e.g. "29.79MB"
    sha256: str


class Build(BaseModel):
    """A named build variant such as `nts-vs16-x64`.

    Only zip is used for installation; the debug and devel packs are kept for
    completeness.
    """

    model_config = ConfigDict(frozen=True)

    mtime: str
    zip: Download
    debug_pack: Download | None = None
    devel_pack: Download | None = None


@dataclass(frozen=True)
class Release:
    """Latest published release of one minor line.

    builds preserves the manifest's key order.
    """

    version: PhpVersion
    builds: dict[str, Build]


# Keyed by the manifest's top-level key text ("8.1").
ReleaseCatalog = dict[str, Release]
