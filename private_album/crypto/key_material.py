"""
Album key handling.

The album key is supplied as the ``k`` member of an ``oct`` JSON Web Key with
``alg`` ``A256GCM``: unpadded base64url of 32 random bytes. A fresh ``AESGCM``
handle is built for every cryptographic operation; the decoded key bytes only
ever exist inside a zeroed buffer.
"""

import base64
import binascii

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from private_album.crypto.secure_bytes import SecureBytes
from private_album.exceptions import KeyFormatError

ALGORITHM = "A256GCM"
KEY_SIZE = 32


def _decode_key(key_string: str) -> SecureBytes:
    padded = key_string + "=" * (-len(key_string) % 4)
    try:
        if "+" in key_string or "/" in key_string:
            raise ValueError("standard base64 alphabet")
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (UnicodeEncodeError, binascii.Error, ValueError):
        msg = "Key is not valid base64url"
        raise KeyFormatError(msg, algorithm=ALGORITHM) from None
    decoded = SecureBytes(raw)
    if len(decoded) != KEY_SIZE:
        size = len(decoded)
        decoded.clear()
        msg = f"Key must decode to {KEY_SIZE} bytes, got {size}"
        raise KeyFormatError(msg, algorithm=ALGORITHM)
    return decoded


def derive(key_string: str) -> AESGCM:
    """
    Build an AES-256-GCM key object from the album key string.

    Args:
        key_string: Base64url key material (JWK ``k`` member).

    Returns:
        AESGCM instance ready for sealing and opening blobs.

    Raises:
        KeyFormatError: If the string is not 32 bytes of base64url.
    """
    with _decode_key(key_string) as raw:
        return AESGCM(bytes(raw))


class KeyMaterial:
    """
    Immutable holder for the caller-supplied album key string.

    The string is validated once on construction; ``derive()`` then rebuilds
    the cipher handle on each call instead of caching it.
    """

    __slots__ = ("_key_string",)

    def __init__(self, key_string: str) -> None:
        """
        Args:
            key_string: Base64url key material.

        Raises:
            KeyFormatError: If the string cannot be used as an AES-256 key.
        """
        _decode_key(key_string).clear()
        self._key_string = SecureBytes.from_string(key_string)

    def derive(self) -> AESGCM:
        """Return a fresh AESGCM handle for this key."""
        return derive(self._key_string.decode("ascii"))

    def clear(self) -> None:
        """Wipe the stored key string. The object is unusable afterwards."""
        self._key_string.clear()

    def __repr__(self) -> str:
        return f"KeyMaterial(<{ALGORITHM}>)"
