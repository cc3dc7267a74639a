"""
Per-item download and decryption.
"""

import asyncio
from collections.abc import Sequence

import structlog

from private_album.api.protocol import BlobStore
from private_album.config import AlbumConfig
from private_album.crypto.cipher import open_blob
from private_album.crypto.key_material import KeyMaterial
from private_album.exceptions import AlbumError
from private_album.models.album import DisplayableImage

logger = structlog.get_logger(__name__)


class ItemLoader:
    """
    Service for fetching and decrypting album items.

    Items load independently; a failure only leaves its own slot empty.
    """

    def __init__(self, blobs: BlobStore, config: AlbumConfig | None = None) -> None:
        """
        Args:
            blobs: Blob storage backend.
            config: Client configuration. Uses defaults if not provided.
        """
        self._blobs = blobs
        self._config = config or AlbumConfig()

    async def load(
        self, album_id: str, key: KeyMaterial, name: str, *, index: int = 0
    ) -> DisplayableImage:
        """
        Fetch and decrypt one item.

        Args:
            album_id: Album identifier.
            key: Album key.
            name: File name from the manifest.
            index: Position of ``name`` in the manifest.

        Returns:
            The decrypted image.

        Raises:
            NotFoundError: If the blob is missing.
            AuthenticationError: If the blob does not verify under ``key``.
            TransportError: If the storage backend cannot be reached.
        """
        blob = await self._blobs.fetch(f"{album_id}/{name}")
        data = open_blob(key.derive(), blob)
        return DisplayableImage(
            name=name, index=index, data=data, mime_type=self._config.image_mime_type
        )

    async def load_all(
        self, album_id: str, key: KeyMaterial, names: Sequence[str | None]
    ) -> list[DisplayableImage | None]:
        """
        Load every item of a manifest concurrently.

        Args:
            album_id: Album identifier.
            key: Album key.
            names: Manifest entries, in order.

        Returns:
            A list aligned with ``names``; failed or empty entries are None.
        """
        semaphore = asyncio.Semaphore(self._config.max_concurrent_loads)

        async def _load_one(index: int, name: str | None) -> DisplayableImage | None:
            if name is None:
                return None
            async with semaphore:
                try:
                    return await self.load(album_id, key, name, index=index)
                except AlbumError as e:
                    logger.warning(
                        "Failed to load item", album_id=album_id, name=name, index=index, error=str(e)
                    )
                    return None

        return list(await asyncio.gather(*(_load_one(i, n) for i, n in enumerate(names))))
