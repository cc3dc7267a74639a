"""
Private album client facade.

This is the main entry point for users of the library. One client holds one
album session: it loads the encrypted manifest, decrypts the listed items and
feeds new local files through the upload pipeline.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Self

import httpx
import structlog

from private_album.api.http_client import HttpBlobStore
from private_album.api.protocol import BlobStore
from private_album.config import AlbumConfig
from private_album.crypto.key_material import KeyMaterial
from private_album.exceptions import (
    InvalidManifestError,
    TransportError,
    UploadNotPermittedError,
)
from private_album.models.album import (
    AlbumSession,
    DisplayableImage,
    ManifestState,
    UploadFailure,
    UploadItem,
)
from private_album.services.item_loader import ItemLoader
from private_album.services.manifest_store import ManifestStore
from private_album.services.upload_pipeline import UploadPipeline

logger = structlog.get_logger(__name__)


class AlbumClient:
    """
    Async client for one private album.

    Example:
        ```python
        async with AlbumClient(album_id="abc123", key=key_string) as album:
            await album.load_file_list()
            for image in album.image_list:
                if image is not None:
                    print(image.name, len(image.data))

            if album.uploadable:
                album.append([Path("holiday.jpg")])
                await album.wait_idle()
        ```

    Args:
        config: Client configuration. Uses defaults if not provided.
        album_id: Album identifier.
        key: Album key string (base64url AES-256 key).
        blob_store: Storage backend. An HTTP store is created if not provided.
        transport: Optional httpx transport for testing (mock transport).
    """

    def __init__(
        self,
        config: AlbumConfig | None = None,
        *,
        album_id: str | None = None,
        key: str | None = None,
        blob_store: BlobStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Raises:
            KeyFormatError: If ``key`` is not valid AES-256 key material.
        """
        self._config = config or AlbumConfig()
        self._http: HttpBlobStore | None = None
        if blob_store is None:
            self._http = HttpBlobStore(self._config, transport=transport)
            blob_store = self._http
        self._blobs = blob_store

        self._manifest_store = ManifestStore(self._blobs, self._config)
        self._item_loader = ItemLoader(self._blobs, self._config)

        self._album_id = album_id
        self._key = KeyMaterial(key) if key else None
        self._session: AlbumSession | None = None
        self._pipeline: UploadPipeline | None = None
        self._image_list: list[DisplayableImage | None] = []

    async def __aenter__(self) -> Self:
        """Enter async context."""
        if self._http is not None:
            await self._http.__aenter__()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    async def close(self) -> None:
        """Wait for pending uploads, wipe the key and release the transport."""
        try:
            await self._end_session()
        finally:
            if self._key is not None:
                self._key.clear()
                self._key = None
            if self._http is not None:
                await self._http.close()
            logger.debug("Client closed")

    async def set_album_id(self, album_id: str) -> None:
        """Switch to another album and reload its manifest."""
        await self._end_session()
        self._album_id = album_id
        await self.load_file_list()

    async def set_key(self, key: str) -> None:
        """
        Replace the album key and reload the manifest.

        Raises:
            KeyFormatError: If ``key`` is not valid AES-256 key material.
        """
        key_material = KeyMaterial(key)
        await self._end_session()
        if self._key is not None:
            self._key.clear()
        self._key = key_material
        await self.load_file_list()

    async def _end_session(self) -> None:
        try:
            if self._pipeline is not None:
                await self._pipeline.wait_idle()
        finally:
            self._session = None
            self._pipeline = None
            self._image_list = []

    def _ensure_session(self) -> AlbumSession | None:
        if not self._album_id or self._key is None:
            return None
        if self._session is None:
            self._session = AlbumSession(album_id=self._album_id, key=self._key)
            self._pipeline = UploadPipeline(self._session, self._blobs, self._manifest_store)
            self._image_list = []
        return self._session

    async def load_file_list(self) -> None:
        """
        Load the manifest and decrypt every listed item.

        No-op while a load is in flight, while uploads are running, or when
        the album id or key is missing. Manifest problems are reflected in
        ``manifest_state`` rather than raised.
        """
        session = self._ensure_session()
        if session is None or session.loading:
            return
        if self._pipeline is not None and self._pipeline.busy:
            logger.debug("Skipping manifest reload, uploads in progress", album_id=session.album_id)
            return

        session.loading = True
        try:
            names = await self._manifest_store.load(session.album_id, session.key)
        except InvalidManifestError as e:
            logger.warning("Manifest rejected", album_id=session.album_id, error=str(e))
            session.manifest_state = ManifestState.INVALID
            return
        except TransportError as e:
            logger.warning("Manifest unavailable", album_id=session.album_id, error=str(e))
            session.manifest_state = ManifestState.NOT_LOADED
            return
        finally:
            session.loading = False

        if names is None:
            session.manifest_state = ManifestState.ABSENT
            session.manifest = []
            if self._session is session:
                self._image_list = []
            return

        session.manifest_state = ManifestState.VALID
        session.manifest = names
        if self._session is session:
            self._image_list = [None] * len(names)
        loaded = await self._item_loader.load_all(session.album_id, session.key, list(names))

        # Album or key switched while items were decrypting.
        if self._session is not session:
            logger.debug("Dropping images of a replaced session", album_id=session.album_id)
            return
        images: list[DisplayableImage | None] = [None] * len(names)
        for image in loaded:
            if image is not None and image.index < len(images):
                images[image.index] = image
        self._image_list = images

    def append(self, files: Iterable[Path | tuple[str, bytes]]) -> None:
        """
        Queue files for upload.

        Args:
            files: Local paths, or ``(name, content)`` pairs already in memory.

        Raises:
            UploadNotPermittedError: If the album manifest is not verified.
        """
        session = self._ensure_session()
        if session is None or self._pipeline is None:
            return
        if not session.uploadable:
            msg = "Album manifest is not verified, refusing upload"
            raise UploadNotPermittedError(
                msg, album_id=session.album_id, manifest_state=str(session.manifest_state)
            )

        items = [
            UploadItem.from_path(f) if isinstance(f, Path) else UploadItem.from_bytes(*f)
            for f in files
        ]
        logger.debug("Queued files", album_id=session.album_id, count=len(items))
        self._pipeline.append(items)

    async def wait_idle(self) -> None:
        """Wait until all queued uploads have finished or failed."""
        if self._pipeline is not None:
            await self._pipeline.wait_idle()

    @property
    def album_id(self) -> str | None:
        return self._album_id

    @property
    def uploadable(self) -> bool:
        """Whether new files may be appended to the album."""
        return self._session is not None and self._session.uploadable

    @property
    def manifest_state(self) -> ManifestState:
        if self._session is None:
            return ManifestState.NOT_LOADED
        return self._session.manifest_state

    @property
    def completed_count(self) -> int:
        return 0 if self._session is None else self._session.completed_count

    @property
    def file_list(self) -> list[str]:
        return [] if self._session is None else list(self._session.manifest)

    @property
    def image_list(self) -> list[DisplayableImage | None]:
        """Decrypted images aligned with ``file_list``; missing entries are None."""
        return list(self._image_list)

    @property
    def failures(self) -> list[UploadFailure]:
        return [] if self._session is None else list(self._session.failures)
