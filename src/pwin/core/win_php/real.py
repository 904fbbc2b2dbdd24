"""httpx implementation of the windows.php.net client."""

import logging
from pathlib import Path

import httpx

from pwin import __version__
from pwin.core.errors import HttpStatusError, StorageError, TransportError
from pwin.core.win_php.abc import WinPhp

logger = logging.getLogger(__name__)

BASE_URL = "https://windows.php.net/downloads/releases"
RELEASES_JSON = "releases.json"
USER_AGENT = f"pwin/{__version__}"
DEFAULT_TIMEOUT = httpx.Timeout(30.0)
_CHUNK_SIZE = 64 * 1024


def build_http_client(transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """Create the shared client with the User-Agent windows.php.net requires."""
    return httpx.Client(
        headers={"User-Agent": USER_AGENT},
        timeout=DEFAULT_TIMEOUT,
        follow_redirects=True,
        transport=transport,
    )


class RealWinPhp(WinPhp):
    """Production implementation using httpx."""

    def __init__(self, client: httpx.Client | None = None, base_url: str = BASE_URL) -> None:
        self._client = client if client is not None else build_http_client()
        self._base_url = base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def get_releases(self) -> str:
        url = self._url(RELEASES_JSON)
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}") from e

        logger.debug("Response code: %d", response.status_code)
        if response.status_code != httpx.codes.OK:
            raise HttpStatusError(url, response.status_code)
        return response.text

    def download(self, path: str, destination: Path) -> None:
        url = self._url(path)
        logger.debug("GET %s", url)
        written = 0
        try:
            with self._client.stream("GET", url) as response:
                logger.debug("Response code: %d", response.status_code)
                if response.status_code != httpx.codes.OK:
                    raise HttpStatusError(url, response.status_code)
                with destination.open("wb") as sink:
                    for chunk in response.iter_bytes(_CHUNK_SIZE):
                        sink.write(chunk)
                        written += len(chunk)
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}") from e
        except OSError as e:
            raise StorageError(f"Could not write {destination}: {e}") from e

        logger.debug("Downloaded %d bytes to %s", written, destination)

    def close(self) -> None:
        self._client.close()
