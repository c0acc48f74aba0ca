"""HTTP retrieval of manifests and plugin archives."""

from __future__ import annotations

import logging
import ssl
import urllib.error
import urllib.request
from collections.abc import Iterator
from contextlib import contextmanager
from http.client import HTTPResponse
from pathlib import Path

from marketplace_installer import __version__
from marketplace_installer.config import DEFAULT_TIMEOUT
from marketplace_installer.errors import FilesystemError, NetworkError

logger = logging.getLogger(__name__)

USER_AGENT = f"marketplace-installer/{__version__}"

# Bytes read from the response per write when downloading
CHUNK_SIZE = 64 * 1024


class HttpFetcher:
    """Fetches remote documents over HTTP(S).

    Any URL scheme urllib understands is accepted, so file:// manifests work
    for local testing of a marketplace.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Seconds before a request is abandoned.
        """
        self.timeout = timeout

    @classmethod
    def create(cls, timeout: float = DEFAULT_TIMEOUT) -> HttpFetcher:
        """Create a fetcher with the given timeout."""
        return cls(timeout=timeout)

    @contextmanager
    def _open(self, url: str) -> Iterator[HTTPResponse]:
        """Open a URL, mapping transport failures to NetworkError.

        Failures while reading the yielded response are mapped the same way.
        """
        logger.debug("Fetching %s", url)
        request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with urllib.request.urlopen(
                request, timeout=self.timeout, context=ssl.create_default_context()
            ) as response:
                status = getattr(response, "status", None)
                if status is not None and not 200 <= status < 300:
                    raise NetworkError(url, f"HTTP {status}")
                yield response
        except urllib.error.HTTPError as e:
            raise NetworkError(url, f"HTTP {e.code} {e.reason}") from e
        except urllib.error.URLError as e:
            raise NetworkError(url, str(e.reason)) from e
        except TimeoutError as e:
            raise NetworkError(url, f"timed out after {self.timeout:g}s") from e
        except OSError as e:
            raise NetworkError(url, str(e)) from e

    def fetch_bytes(self, url: str) -> bytes:
        """Fetch the body of a URL.

        Args:
            url: URL to fetch.

        Returns:
            Response body.

        Raises:
            NetworkError: On DNS/TLS/connection failure, timeout, or a non-2xx status.
        """
        with self._open(url) as response:
            return response.read()

    def download(self, url: str, dest: Path) -> Path:
        """Stream a URL into a local file, replacing its contents.

        A partially written file is removed if the transfer fails.

        Args:
            url: URL to fetch.
            dest: File to write.

        Returns:
            The destination path.

        Raises:
            NetworkError: If the fetch fails.
            FilesystemError: If the destination cannot be written.
        """
        size = 0
        with self._open(url) as response:
            try:
                out = dest.open("wb")
            except OSError as e:
                raise FilesystemError(dest, e.strerror or str(e)) from e
            try:
                with out:
                    while chunk := response.read(CHUNK_SIZE):
                        try:
                            out.write(chunk)
                        except OSError as e:
                            raise FilesystemError(dest, e.strerror or str(e)) from e
                        size += len(chunk)
            except Exception:
                dest.unlink(missing_ok=True)
                raise
        logger.debug("Downloaded %d bytes to %s", size, dest)
        return dest
