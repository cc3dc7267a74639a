"""
Private album exception hierarchy.

All exceptions inherit from AlbumError for easy catching.
"""

from typing import Any


class AlbumError(Exception):
    """Base exception for all private_album errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class CryptoError(AlbumError):
    """Cryptographic operation failed."""


class KeyFormatError(CryptoError):
    """Key string cannot be interpreted as AES-256 key material."""


class AuthenticationError(CryptoError):
    """Ciphertext failed its integrity check (wrong key, corrupted or truncated blob)."""


class ParseError(AlbumError):
    """Decrypted manifest is not a JSON array of strings."""


class InvalidManifestError(AlbumError):
    """A manifest blob exists but cannot be authenticated or parsed."""

    def __init__(self, message: str, *, album_id: str) -> None:
        super().__init__(message, album_id=album_id)
        self.album_id = album_id


class BlobStoreError(AlbumError):
    """Blob storage operation failed."""

    def __init__(self, message: str, *, path: str, **context: Any) -> None:
        super().__init__(message, path=path, **context)
        self.path = path


class NotFoundError(BlobStoreError):
    """Remote blob does not exist."""


class TransportError(BlobStoreError):
    """Network or server failure while talking to blob storage."""

    def __init__(self, message: str, *, path: str, code: int | None = None) -> None:
        super().__init__(message, path=path, code=code)
        self.code = code


class ReadError(AlbumError):
    """Local file could not be read."""


class UploadNotPermittedError(AlbumError):
    """Upload attempted while the album manifest is not verified."""
