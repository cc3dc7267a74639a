"""
Private album client.

An async Python client for end-to-end encrypted photo albums: the album's
member list and every file are sealed with AES-256-GCM under a key that never
leaves the client.

Example:
    ```python
    from pathlib import Path

    from private_album import AlbumClient

    async with AlbumClient(album_id="abc123", key=key_string) as album:
        await album.load_file_list()
        print(album.file_list)

        if album.uploadable:
            album.append([Path("beach.jpg"), Path("sunset.jpg")])
            await album.wait_idle()
            print(album.completed_count)
    ```
"""

from private_album.client import AlbumClient
from private_album.config import AlbumConfig
from private_album.exceptions import (
    AlbumError,
    AuthenticationError,
    BlobStoreError,
    CryptoError,
    InvalidManifestError,
    KeyFormatError,
    NotFoundError,
    ParseError,
    ReadError,
    TransportError,
    UploadNotPermittedError,
)
from private_album.models.album import (
    DisplayableImage,
    ManifestState,
    PipelineStage,
    UploadFailure,
    UploadItem,
    UploadState,
)

__version__ = "0.1.0"

__all__ = [
    # Main client
    "AlbumClient",
    "AlbumConfig",
    # Models
    "DisplayableImage",
    "ManifestState",
    "PipelineStage",
    "UploadFailure",
    "UploadItem",
    "UploadState",
    # Exceptions
    "AlbumError",
    "CryptoError",
    "KeyFormatError",
    "AuthenticationError",
    "ParseError",
    "InvalidManifestError",
    "BlobStoreError",
    "NotFoundError",
    "TransportError",
    "ReadError",
    "UploadNotPermittedError",
]
