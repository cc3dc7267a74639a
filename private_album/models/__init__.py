"""
Domain models for private albums.
"""

from private_album.models.album import (
    AlbumSession,
    DisplayableImage,
    ManifestState,
    PipelineStage,
    UploadFailure,
    UploadItem,
    UploadState,
)

__all__ = [
    "AlbumSession",
    "DisplayableImage",
    "ManifestState",
    "PipelineStage",
    "UploadFailure",
    "UploadItem",
    "UploadState",
]
