"""Tests for HttpBlobStore."""

import httpx
import pytest

from private_album.api.http_client import HttpBlobStore
from private_album.api.protocol import BlobStore
from private_album.config import AlbumConfig
from private_album.exceptions import NotFoundError, TransportError


class MockTransport(httpx.AsyncBaseTransport):
    """Mock transport serving an in-memory bucket."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self.status_override: int | None = None
        self.raise_error: Exception | None = None

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if self.status_override is not None:
            return httpx.Response(self.status_override, content=b"")

        path = request.url.path
        if request.method == "PUT":
            self.objects[path] = request.content
            return httpx.Response(httpx.codes.OK)
        if path not in self.objects:
            return httpx.Response(httpx.codes.NOT_FOUND)
        return httpx.Response(httpx.codes.OK, content=self.objects[path])


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


def test_http_blob_store_satisfies_protocol(config: AlbumConfig) -> None:
    assert isinstance(HttpBlobStore(config), BlobStore)


@pytest.mark.asyncio
async def test_store_then_fetch(config: AlbumConfig, mock_transport: MockTransport) -> None:
    async with HttpBlobStore(config, transport=mock_transport) as store:
        await store.store("abc123/filelist", b"\x01\x02\x03")
        data = await store.fetch("abc123/filelist")

    assert data == b"\x01\x02\x03"
    put = mock_transport.requests[0]
    assert put.method == "PUT"
    assert str(put.url) == "https://blobs.test/albums/abc123/filelist"
    assert put.headers["Content-Type"] == "application/octet-stream"
    assert put.headers["User-Agent"] == config.user_agent


@pytest.mark.asyncio
async def test_path_is_url_quoted(config: AlbumConfig, mock_transport: MockTransport) -> None:
    async with HttpBlobStore(config, transport=mock_transport) as store:
        await store.store("abc123/my photo.jpg", b"x")

    assert mock_transport.requests[0].url.raw_path == b"/albums/abc123/my%20photo.jpg"


@pytest.mark.asyncio
async def test_fetch_missing_raises_not_found(
    config: AlbumConfig, mock_transport: MockTransport
) -> None:
    async with HttpBlobStore(config, transport=mock_transport) as store:
        with pytest.raises(NotFoundError) as exc_info:
            await store.fetch("abc123/filelist")

    assert exc_info.value.path == "abc123/filelist"


@pytest.mark.asyncio
async def test_server_error_raises_transport_error(
    config: AlbumConfig, mock_transport: MockTransport
) -> None:
    mock_transport.status_override = httpx.codes.SERVICE_UNAVAILABLE

    async with HttpBlobStore(config, transport=mock_transport) as store:
        with pytest.raises(TransportError) as exc_info:
            await store.store("abc123/a.jpg", b"x")

    assert exc_info.value.code == 503


@pytest.mark.asyncio
async def test_network_error_raises_transport_error(
    config: AlbumConfig, mock_transport: MockTransport
) -> None:
    mock_transport.raise_error = httpx.ConnectError("Connection refused")

    async with HttpBlobStore(config, transport=mock_transport) as store:
        with pytest.raises(TransportError, match="GET failed") as exc_info:
            await store.fetch("abc123/a.jpg")

    assert exc_info.value.code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_close_is_idempotent(config: AlbumConfig, mock_transport: MockTransport) -> None:
    store = HttpBlobStore(config, transport=mock_transport)
    await store.__aenter__()

    await store.close()
    await store.close()

    assert store._client is None


@pytest.mark.asyncio
async def test_fetch_opens_client_lazily(config: AlbumConfig, mock_transport: MockTransport) -> None:
    store = HttpBlobStore(config, transport=mock_transport)
    mock_transport.objects["/albums/abc123/a.jpg"] = b"data"

    assert await store.fetch("abc123/a.jpg") == b"data"
    await store.close()
