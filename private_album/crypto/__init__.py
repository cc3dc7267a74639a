"""
Cryptographic operations for private albums.

This module provides:
- Album key parsing (AES-256-GCM, JWK ``k`` encoding)
- Sealing and opening of nonce-prefixed blobs
- Zeroing memory for key material
"""

from private_album.crypto.cipher import open_blob, open_text, seal_blob, seal_text
from private_album.crypto.key_material import KeyMaterial, derive
from private_album.crypto.secure_bytes import SecureBytes

__all__ = [
    "KeyMaterial",
    "SecureBytes",
    "derive",
    "open_blob",
    "open_text",
    "seal_blob",
    "seal_text",
]
