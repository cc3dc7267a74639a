"""
Async HTTP blob store.

Blobs are read with ``GET {base_url}/{path}`` and written with
``PUT {base_url}/{path}``. Failures are mapped onto the album exception
hierarchy and never retried.
"""

import asyncio
from typing import Any, Self
from urllib.parse import quote

import httpx
import structlog

from private_album.config import AlbumConfig
from private_album.exceptions import NotFoundError, TransportError

logger = structlog.get_logger(__name__)

_OCTET_STREAM = "application/octet-stream"


class HttpBlobStore:
    """Blob store backed by an HTTP object storage endpoint."""

    def __init__(
        self,
        config: AlbumConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration.
            transport: Optional transport for testing (mock transport).
        """
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self._config.base_url.rstrip("/") + "/",
                    timeout=self._config.timeout,
                    transport=self._transport,
                    headers={"User-Agent": self._config.user_agent},
                )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client. Idempotent."""
        async with self._client_lock:
            if self._client is None:
                logger.debug("Client not open.")
                return
            await self._client.aclose()
            self._client = None

    async def fetch(self, path: str) -> bytes:
        """
        Download a blob.

        Raises:
            NotFoundError: On HTTP 404.
            TransportError: On any other failure.
        """
        response = await self._send("GET", path)
        return response.content

    async def store(self, path: str, data: bytes) -> None:
        """
        Upload a blob, replacing any existing one.

        Raises:
            TransportError: If the request fails.
        """
        await self._send("PUT", path, content=data)
        logger.debug("Stored blob", path=path, size=len(data))

    async def _send(self, method: str, path: str, *, content: bytes | None = None) -> httpx.Response:
        client = await self._ensure_client()
        headers = {"Content-Type": _OCTET_STREAM} if content is not None else None
        try:
            response = await client.request(
                method, quote(path, safe="/"), content=content, headers=headers
            )
        except httpx.HTTPError as e:
            msg = f"{method} failed: {e}"
            raise TransportError(msg, path=path) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            msg = "Blob not found"
            raise NotFoundError(msg, path=path)
        if response.is_error:
            msg = f"{method} returned HTTP {response.status_code}"
            raise TransportError(msg, path=path, code=response.status_code)
        return response
