import base64
import os

import pytest

from private_album.config import AlbumConfig
from private_album.crypto.key_material import KeyMaterial
from private_album.exceptions import NotFoundError, TransportError


class MemoryBlobStore:
    """In-memory blob store recording every call."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.stored: list[tuple[str, bytes]] = []
        self.fetched: list[str] = []
        self.fail_store: set[str] = set()
        self.fail_fetch: set[str] = set()

    async def fetch(self, path: str) -> bytes:
        self.fetched.append(path)
        if path in self.fail_fetch:
            raise TransportError("Connection refused", path=path)
        if path not in self.blobs:
            raise NotFoundError("Blob not found", path=path)
        return self.blobs[path]

    async def store(self, path: str, data: bytes) -> None:
        if path in self.fail_store:
            raise TransportError("Connection reset", path=path, code=503)
        self.stored.append((path, data))
        self.blobs[path] = data


def make_key_string() -> str:
    return base64.urlsafe_b64encode(os.urandom(32)).decode("ascii").rstrip("=")


@pytest.fixture
def key_string() -> str:
    return make_key_string()


@pytest.fixture
def key(key_string: str) -> KeyMaterial:
    return KeyMaterial(key_string)


@pytest.fixture
def config() -> AlbumConfig:
    return AlbumConfig(base_url="https://blobs.test/albums")


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def other_key() -> KeyMaterial:
    return KeyMaterial(make_key_string())
