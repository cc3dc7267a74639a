"""
Blob storage protocol definition.

The album core only decides which bytes go where; implementations decide how
they reach persistent storage.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BlobStore(Protocol):
    """Async key/value storage for opaque blobs addressed by ``album_id/name`` paths."""

    async def fetch(self, path: str) -> bytes:
        """
        Fetch a blob.

        Args:
            path: Blob path, e.g. ``"abc123/filelist"``.

        Returns:
            The stored bytes.

        Raises:
            NotFoundError: If nothing is stored at ``path``.
            TransportError: If the storage backend cannot be reached.
        """
        ...

    async def store(self, path: str, data: bytes) -> None:
        """
        Store a blob, overwriting any previous value.

        Raises:
            TransportError: If the write fails.
        """
        ...
