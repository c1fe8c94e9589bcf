"""Key retrieval from local files and URLs for sshbox."""

from __future__ import annotations

import logging
import os
import re
import time
from types import TracebackType

import httpx

from .crypto.keys import parse_private_key, parse_public_key
from .errors import KeySourceError
from .types import PrivateKeyMaterial, PublicKeyMaterial, SSHBoxConfig

logger = logging.getLogger("sshbox")

_REMOTE_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def is_remote(name: str) -> bool:
    """Check whether a key name is an HTTP(S) URL.

    Args:
        name: Key file path or URL.

    Returns:
        True if the key has to be fetched over HTTP.
    """
    return _REMOTE_PATTERN.match(name) is not None


class KeyFetcher:
    """HTTP client for remote public keys with automatic retry logic.

    Attributes:
        config: Fetch configuration.
    """

    def __init__(
        self,
        config: SSHBoxConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the key fetcher.

        Args:
            config: Timeout, retry and size settings.
            transport: Optional httpx transport, mainly for testing.
        """
        self.config = config or SSHBoxConfig()
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> KeyFetcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.config.timeout / 1000),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _backoff(self, attempt: int) -> None:
        delay = self.config.retry_delay * (2**attempt) / 1000
        logger.debug("Retrying key fetch in %.2fs (attempt %d)", delay, attempt + 1)
        time.sleep(delay)

    def fetch(self, url: str) -> bytes:
        """Fetch key material from a URL.

        Args:
            url: HTTP(S) URL of the key.

        Returns:
            The response body.

        Raises:
            KeySourceError: If the key cannot be fetched.
        """
        client = self._get_client()
        max_retries = self.config.max_retries
        max_size = self.config.max_key_size

        for attempt in range(max_retries + 1):
            try:
                logger.debug("Fetching key from %s", url)
                with client.stream("GET", url) as response:
                    if (
                        response.status_code in self.config.retry_on_status_codes
                        and attempt < max_retries
                    ):
                        self._backoff(attempt)
                        continue

                    if response.status_code >= 400:
                        raise KeySourceError(
                            f"Failed to fetch key: HTTP {response.status_code} from {url}"
                        )

                    body = bytearray()
                    for chunk in response.iter_bytes():
                        body.extend(chunk)
                        # Stop reading as soon as the limit is crossed
                        if len(body) > max_size:
                            raise KeySourceError(
                                f"Key from {url} is too large, limit is {max_size} bytes"
                            )
                    return bytes(body)

            except (httpx.TimeoutException, httpx.NetworkError) as e:
                if attempt < max_retries:
                    self._backoff(attempt)
                    continue
                raise KeySourceError(f"Failed to fetch key: {e}") from e
            except httpx.InvalidURL as e:
                raise KeySourceError(f"Invalid key URL {url!r}: {e}") from e
            except httpx.HTTPError as e:
                raise KeySourceError(f"Failed to fetch key: {e}") from e

        raise KeySourceError(
            f"Failed to fetch key after {max_retries} retries"
        )  # pragma: no cover


def read_local_key(path: str, config: SSHBoxConfig | None = None) -> bytes:
    """Read key material from a local file.

    Args:
        path: Path to the key file.
        config: Size settings.

    Returns:
        The file contents.

    Raises:
        KeySourceError: If the file is missing, unreadable or too large.
    """
    config = config or SSHBoxConfig()
    try:
        size = os.path.getsize(path)
        if size > config.max_key_size:
            raise KeySourceError(
                f"Key file {path} is {size} bytes, limit is {config.max_key_size}"
            )
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise KeySourceError(f"Failed to read key {path}: {e}") from e


def fetch_key(name: str, *, local: bool, config: SSHBoxConfig | None = None) -> bytes:
    """Retrieve raw key material from a file or URL.

    Args:
        name: Key file path or URL.
        local: Read from disk if True, fetch over HTTP otherwise.
        config: Fetch configuration.

    Returns:
        The raw key bytes.

    Raises:
        KeySourceError: If retrieval fails.
    """
    if local:
        return read_local_key(name, config)
    with KeyFetcher(config) as fetcher:
        return fetcher.fetch(name)


def load_public_key(name: str, config: SSHBoxConfig | None = None) -> PublicKeyMaterial:
    """Fetch and parse an ssh-rsa public key from a file or URL."""
    return parse_public_key(fetch_key(name, local=not is_remote(name), config=config))


def load_private_key(name: str, config: SSHBoxConfig | None = None) -> PrivateKeyMaterial:
    """Read and parse a local RSA private key.

    Raises:
        KeySourceError: If the name is a URL or the file cannot be read.
        InvalidKeyFormatError: If the file does not hold an RSA private key.
    """
    if is_remote(name):
        raise KeySourceError("Remotely fetching private keys is not allowed")
    return parse_private_key(fetch_key(name, local=True, config=config))
