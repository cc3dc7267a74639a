"""
Blob storage layer.

Provides the storage protocol and its async HTTP implementation.
"""

from private_album.api.http_client import HttpBlobStore
from private_album.api.protocol import BlobStore

__all__ = ["BlobStore", "HttpBlobStore"]
