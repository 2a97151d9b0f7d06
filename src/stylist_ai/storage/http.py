"""
HTTP object storage.

Downloads images from (pre-signed) URLs with httpx. Failures are raised as
``StorageError`` tagged with the kind that decides whether the download is
retried: missing and forbidden objects are not, outages and timeouts are.
"""

from __future__ import annotations

import base64
import binascii

import httpx

from stylist_ai.errors import ErrorKind, StorageError, ValidationError, classify_http_status
from stylist_ai.storage.base import ObjectStorage
from stylist_ai.telemetry import get_logger

logger = get_logger("stylist_ai.storage.http")

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_CONNECT_TIMEOUT = 10.0


def decode_data_url(url: str) -> bytes:
    """Decode an inline ``data:...;base64,`` URL.

    Raises:
        ValidationError: If the payload is not valid base64
    """
    _, _, payload = url.partition("base64,")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid inline image data", field="imageUrl") from e


class HttpObjectStorage(ObjectStorage):
    """Object storage reached over HTTP(S).

    Example:
        >>> storage = HttpObjectStorage()
        >>> image = await storage.download(presigned_url)
        >>> await storage.close()
    """

    def __init__(
        self,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize storage.

        Args:
            timeout: Request timeout in seconds
            client: Pre-built httpx client (not closed by ``close``)
        """
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=_DEFAULT_CONNECT_TIMEOUT),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def download(self, url: str) -> bytes:
        if url.startswith("data:") and "base64," in url:
            return decode_data_url(url)

        try:
            response = await self._get_client().get(url)
        except httpx.TimeoutException as e:
            raise StorageError("Image download timed out", kind=ErrorKind.TIMEOUT) from e
        except httpx.HTTPError as e:
            raise StorageError("Image download failed", kind=ErrorKind.NETWORK) from e

        if response.status_code >= 400:
            kind = classify_http_status(response.status_code)
            logger.warning("Image download rejected", status_code=response.status_code, kind=kind.value)
            raise StorageError(
                f"Image download failed with HTTP {response.status_code}",
                kind=kind,
                details={"status_code": response.status_code},
            )

        return response.content
