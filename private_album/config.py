"""
Private album client configuration.
"""

import codecs
from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class AlbumConfig:
    """
    Attributes:
        base_url: Base URL of the blob storage endpoint.
        timeout: Request timeout in seconds.
        user_agent: User-Agent header value.
        manifest_name: Blob name of the encrypted manifest inside an album.
        manifest_encoding: Codec used for the manifest JSON before encryption.
        image_mime_type: MIME type attached to decrypted images.
        max_concurrent_loads: Maximum number of images fetched concurrently.
    """

    base_url: str = "http://localhost:8080/albums"
    timeout: float = 30.0
    user_agent: str = "PrivateAlbum-Python/0.1"
    manifest_name: str = "filelist"
    manifest_encoding: str = "utf-8"
    image_mime_type: str = "image/jpeg"
    max_concurrent_loads: int = 4

    def __post_init__(self) -> None:
        if not self.base_url:
            msg = "base_url must not be empty"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        if not self.manifest_name or "/" in self.manifest_name:
            msg = "manifest_name must be a non-empty name without '/'"
            raise ValueError(msg)
        try:
            codecs.lookup(self.manifest_encoding)
        except LookupError:
            msg = f"Unknown manifest_encoding: {self.manifest_encoding}"
            raise ValueError(msg) from None
        if self.max_concurrent_loads <= 0:
            msg = "max_concurrent_loads must be positive"
            raise ValueError(msg)
