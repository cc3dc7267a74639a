"""
Encrypted album manifest.

The manifest is the JSON array of member file names, sealed under the album
key and stored at ``{album_id}/{manifest_name}``.
"""

import json

import structlog

from private_album.api.protocol import BlobStore
from private_album.config import AlbumConfig
from private_album.crypto.cipher import open_text, seal_text
from private_album.crypto.key_material import KeyMaterial
from private_album.exceptions import (
    AuthenticationError,
    InvalidManifestError,
    NotFoundError,
    ParseError,
)

logger = structlog.get_logger(__name__)


def parse_manifest(text: str) -> list[str]:
    """
    Parse decrypted manifest JSON.

    Raises:
        ParseError: If the text is not a JSON array of strings.
    """
    try:
        names = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Manifest is not valid JSON: {e.msg}"
        raise ParseError(msg) from e
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        msg = "Manifest must be a JSON array of strings"
        raise ParseError(msg)
    return names


class ManifestStore:
    """Loads and republishes the encrypted manifest of an album."""

    def __init__(self, blobs: BlobStore, config: AlbumConfig | None = None) -> None:
        """
        Args:
            blobs: Blob storage backend.
            config: Client configuration. Uses defaults if not provided.
        """
        self._blobs = blobs
        self._config = config or AlbumConfig()

    def path(self, album_id: str) -> str:
        return f"{album_id}/{self._config.manifest_name}"

    async def load(self, album_id: str, key: KeyMaterial) -> list[str] | None:
        """
        Fetch, authenticate and parse the manifest.

        Args:
            album_id: Album identifier.
            key: Album key.

        Returns:
            The list of file names, or None if the album has no manifest yet.

        Raises:
            InvalidManifestError: If the manifest exists but fails
                authentication or parsing.
            TransportError: If the storage backend cannot be reached.
        """
        path = self.path(album_id)
        try:
            blob = await self._blobs.fetch(path)
        except NotFoundError:
            logger.debug("No manifest yet", album_id=album_id)
            return None

        try:
            text = open_text(key.derive(), blob, self._config.manifest_encoding)
            names = parse_manifest(text)
        except AuthenticationError as e:
            msg = "Manifest failed authentication"
            raise InvalidManifestError(msg, album_id=album_id) from e
        except ParseError as e:
            msg = f"Manifest could not be parsed: {e.message}"
            raise InvalidManifestError(msg, album_id=album_id) from e

        logger.debug("Manifest loaded", album_id=album_id, count=len(names))
        return names

    async def save(self, album_id: str, key: KeyMaterial, manifest: list[str]) -> None:
        """
        Seal and store the manifest, overwriting the previous one.

        Raises:
            TransportError: If the write fails.
        """
        text = json.dumps(list(manifest), ensure_ascii=False)
        blob = seal_text(key.derive(), text, self._config.manifest_encoding)
        await self._blobs.store(self.path(album_id), blob)
        logger.debug("Manifest saved", album_id=album_id, count=len(manifest))
