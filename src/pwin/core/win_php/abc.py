"""Abstract base class for windows.php.net access."""

from abc import ABC, abstractmethod
from pathlib import Path


class WinPhp(ABC):
    """Abstract interface for fetching the release catalog and archives.

    Implementations include:
    - RealWinPhp: HTTP against windows.php.net
    - FakeWinPhp: Canned responses for testing
    """

    @abstractmethod
    def get_releases(self) -> str:
        """Fetch the raw releases.json document.

        Raises:
            TransportError: If no response was received
            HttpStatusError: If the server did not answer 200
        """
        ...

    @abstractmethod
    def download(self, path: str, destination: Path) -> None:
        """Download a release file to destination, overwriting it.

        Args:
            path: Path relative to the releases directory, as listed in releases.json
            destination: Local file to write

        Raises:
            TransportError: If the transfer failed
            HttpStatusError: If the server did not answer 200
            StorageError: If destination cannot be written
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release network resources. The client is unusable afterwards."""
        ...
