"""
Read → encrypt → upload pipeline for new album files.

Each stage owns a FIFO queue drained by at most one driver task at a time.
Stages overlap (a file can be sealed while the next one is read) but items
inside a stage are handled strictly one after another, so manifest saves
never interleave.
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import replace

import structlog

from private_album.api.protocol import BlobStore
from private_album.crypto.cipher import seal_blob
from private_album.exceptions import AlbumError, ReadError
from private_album.models.album import (
    AlbumSession,
    PipelineStage,
    UploadFailure,
    UploadItem,
    UploadState,
)
from private_album.services.manifest_store import ManifestStore

logger = structlog.get_logger(__name__)

_NEXT_STAGE: dict[PipelineStage, PipelineStage | None] = {
    PipelineStage.READ: PipelineStage.ENCRYPT,
    PipelineStage.ENCRYPT: PipelineStage.UPLOAD,
    PipelineStage.UPLOAD: None,
}


class UploadPipeline:
    """
    Service moving local files into an album.

    A successful upload appends the file name to the session manifest and
    republishes the manifest before the next item is uploaded.
    """

    def __init__(
        self,
        session: AlbumSession,
        blobs: BlobStore,
        manifest_store: ManifestStore,
    ) -> None:
        """
        Args:
            session: Album session whose manifest and counters are updated.
            blobs: Blob storage backend.
            manifest_store: Store used to republish the manifest.
        """
        self._session = session
        self._blobs = blobs
        self._manifest_store = manifest_store

        self._queues: dict[PipelineStage, deque[UploadItem]] = {s: deque() for s in PipelineStage}
        self._running: dict[PipelineStage, bool] = dict.fromkeys(PipelineStage, False)
        self._tasks: dict[PipelineStage, asyncio.Task[None] | None] = dict.fromkeys(PipelineStage)
        self._handlers: dict[PipelineStage, Callable[[UploadItem], Awaitable[UploadItem]]] = {
            PipelineStage.READ: self._read,
            PipelineStage.ENCRYPT: self._encrypt,
            PipelineStage.UPLOAD: self._upload,
        }

    def append(self, items: Iterable[UploadItem]) -> None:
        """Queue items for reading, in order, and start the read driver."""
        queue = self._queues[PipelineStage.READ]
        for item in items:
            queue.append(item)
        self.start(PipelineStage.READ)

    def start(self, stage: PipelineStage) -> bool:
        """
        Start the driver of ``stage``.

        Returns:
            False if the driver is already active (nothing is started).
        """
        if self._running[stage]:
            return False
        self._running[stage] = True
        self._tasks[stage] = asyncio.create_task(self._drive(stage), name=f"album-{stage}")
        return True

    def is_running(self, stage: PipelineStage) -> bool:
        return self._running[stage]

    def pending(self, stage: PipelineStage) -> int:
        """Number of items waiting in ``stage``."""
        return len(self._queues[stage])

    @property
    def busy(self) -> bool:
        return any(self._running.values())

    async def wait_idle(self) -> None:
        """
        Wait until every stage driver has finished.

        Raises:
            Exception: The error that stopped a stage driver, if any. Items
                left in that stage stay queued until the stage is started again.
        """
        while True:
            tasks = [task for task in self._tasks.values() if task is not None and not task.done()]
            if not tasks:
                break
            await asyncio.gather(*tasks, return_exceptions=True)

        for stage, task in self._tasks.items():
            if task is None or task.cancelled() or task.exception() is None:
                continue
            self._tasks[stage] = None
            error = task.exception()
            logger.error(
                "Stage driver stopped", stage=str(stage), pending=self.pending(stage), error=str(error)
            )
            raise error

    async def _drive(self, stage: PipelineStage) -> None:
        queue = self._queues[stage]
        handler = self._handlers[stage]
        next_stage = _NEXT_STAGE[stage]
        try:
            while queue:
                item = queue.popleft()
                try:
                    result = await handler(item)
                except AlbumError as e:
                    self._record_failure(item, stage, e)
                    continue
                if next_stage is not None:
                    self._queues[next_stage].append(result)
                    self.start(next_stage)
        finally:
            self._running[stage] = False

    async def _read(self, item: UploadItem) -> UploadItem:
        payload = item.payload
        if item.source is not None:
            try:
                payload = await asyncio.to_thread(item.source.read_bytes)
            except OSError as e:
                msg = f"Cannot read {item.source}: {e.strerror or e}"
                raise ReadError(msg, name=item.name) from e
        return replace(item, state=UploadState.ENCRYPT_PENDING, payload=payload, source=None)

    async def _encrypt(self, item: UploadItem) -> UploadItem:
        key = self._session.key.derive()
        sealed = await asyncio.to_thread(seal_blob, key, item.payload)
        return replace(item, state=UploadState.UPLOAD_PENDING, payload=sealed)

    async def _upload(self, item: UploadItem) -> UploadItem:
        session = self._session
        await self._blobs.store(f"{session.album_id}/{item.name}", item.payload)
        session.manifest.append(item.name)
        await self._manifest_store.save(session.album_id, session.key, session.manifest)
        session.completed_count += 1
        logger.info(
            "Uploaded file",
            album_id=session.album_id,
            name=item.name,
            completed=session.completed_count,
        )
        return replace(item, state=UploadState.UPLOADED, payload=b"")

    def _record_failure(self, item: UploadItem, stage: PipelineStage, error: AlbumError) -> None:
        logger.warning(
            "Upload stage failed",
            album_id=self._session.album_id,
            stage=str(stage),
            name=item.name,
            error=str(error),
        )
        self._session.failures.append(UploadFailure(name=item.name, stage=stage, error=error))
