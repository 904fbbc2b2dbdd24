"""Fake windows.php.net client for testing."""

from pathlib import Path

from pwin.core.errors import HttpStatusError
from pwin.core.win_php.abc import WinPhp


class FakeWinPhp(WinPhp):
    """In-memory fake implementation for testing.

    This class has NO public setup methods. All state is provided via
    constructor or captured during execution.
    """

    def __init__(
        self,
        *,
        releases_json: str = "{}",
        files: dict[str, bytes] | None = None,
        releases_error: Exception | None = None,
    ) -> None:
        """Create FakeWinPhp.

        Args:
            releases_json: Document returned by get_releases()
            files: Downloadable content keyed by release path; other paths answer 404
            releases_error: Raised from get_releases() instead of returning the document
        """
        self._releases_json = releases_json
        self._files = files or {}
        self._releases_error = releases_error
        self._releases_calls = 0
        self._closed = False
        self._download_calls: list[tuple[str, Path]] = []

    @property
    def releases_calls(self) -> int:
        """Number of get_releases() calls, for test assertions."""
        return self._releases_calls

    @property
    def download_calls(self) -> list[tuple[str, Path]]:
        """(path, destination) of each download() call, for test assertions."""
        return list(self._download_calls)

    @property
    def closed(self) -> bool:
        """Whether close() was called, for test assertions."""
        return self._closed

    @property
    def request_count(self) -> int:
        return self._releases_calls + len(self._download_calls)

    def get_releases(self) -> str:
        self._releases_calls += 1
        if self._releases_error is not None:
            raise self._releases_error
        return self._releases_json

    def download(self, path: str, destination: Path) -> None:
        self._download_calls.append((path, destination))
        if path not in self._files:
            raise HttpStatusError(f"https://fake.invalid/{path}", 404)
        destination.write_bytes(self._files[path])

    def close(self) -> None:
        self._closed = True
