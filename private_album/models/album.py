"""
Album domain models.
"""

import base64
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from private_album.crypto.key_material import KeyMaterial
from private_album.exceptions import AlbumError


class ManifestState(StrEnum):
    """Outcome of the last manifest load."""

    NOT_LOADED = "not_loaded"
    ABSENT = "absent"
    VALID = "valid"
    INVALID = "invalid"


class UploadState(StrEnum):
    """Position of an item in the upload pipeline."""

    READ_PENDING = "read_pending"
    ENCRYPT_PENDING = "encrypt_pending"
    UPLOAD_PENDING = "upload_pending"
    UPLOADED = "uploaded"


class PipelineStage(StrEnum):
    """The three stage drivers of the upload pipeline."""

    READ = "read"
    ENCRYPT = "encrypt"
    UPLOAD = "upload"


@dataclass(frozen=True, kw_only=True)
class UploadItem:
    """
    A file travelling through the upload pipeline.

    Attributes:
        name: File name, used as blob name and manifest entry.
        state: Current pipeline position.
        payload: Raw bytes before the encrypt stage, sealed blob after it.
        source: Local path to read during the read stage, if not in memory yet.
    """

    name: str
    state: UploadState = UploadState.READ_PENDING
    payload: bytes = b""
    source: Path | None = None

    @classmethod
    def from_path(cls, path: Path) -> "UploadItem":
        return cls(name=path.name, source=path)

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "UploadItem":
        return cls(name=name, payload=data)


@dataclass(frozen=True, kw_only=True)
class UploadFailure:
    """An item dropped by a pipeline stage."""

    name: str
    stage: PipelineStage
    error: AlbumError


@dataclass(frozen=True, kw_only=True)
class DisplayableImage:
    """
    A decrypted album item ready for display.

    Attributes:
        name: File name from the manifest.
        index: Position of the file in the manifest.
        data: Decrypted file content.
        mime_type: MIME type used when rendering.
    """

    name: str
    index: int
    data: bytes
    mime_type: str = "image/jpeg"

    def to_data_url(self) -> str:
        """Encode the image as a ``data:`` URL."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(kw_only=True)
class AlbumSession:
    """
    Mutable state of one album viewing/upload session.

    Owned by the client and handed by reference to the services; only the
    upload pipeline's upload stage appends to ``manifest``.
    """

    album_id: str
    key: KeyMaterial
    manifest: list[str] = field(default_factory=list)
    manifest_state: ManifestState = ManifestState.NOT_LOADED
    loading: bool = False
    completed_count: int = 0
    failures: list[UploadFailure] = field(default_factory=list)

    @property
    def uploadable(self) -> bool:
        """
        True when no manifest load is in flight and the album either has no
        manifest yet or has one that authenticated under the session key.
        """
        if self.loading:
            return False
        return self.manifest_state in (ManifestState.ABSENT, ManifestState.VALID)
