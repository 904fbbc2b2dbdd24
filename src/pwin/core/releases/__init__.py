"""Release catalog published at windows.php.net."""

from pwin.core.releases.parsing import find_release, parse_releases, select_build
from pwin.core.releases.types import Build, Download, Release, ReleaseCatalog

__all__ = [
    "Build",
    "Download",
    "Release",
    "ReleaseCatalog",
    "find_release",
    "parse_releases",
    "select_build",
]
