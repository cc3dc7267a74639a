"""
AES-GCM sealing of album blobs.

Wire format of every stored blob::

    nonce (12 bytes) || ciphertext || tag (16 bytes)
"""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from private_album.exceptions import AuthenticationError, ParseError

NONCE_SIZE = 12
TAG_SIZE = 16
OVERHEAD = NONCE_SIZE + TAG_SIZE


def seal_blob(key: AESGCM, plaintext: bytes) -> bytes:
    """
    Encrypt and authenticate a payload under a fresh random nonce.

    Args:
        key: AES-256-GCM key object.
        plaintext: Bytes to protect.

    Returns:
        ``nonce || ciphertext-with-tag``.
    """
    nonce = os.urandom(NONCE_SIZE)
    return nonce + key.encrypt(nonce, plaintext, None)


def open_blob(key: AESGCM, blob: bytes) -> bytes:
    """
    Verify and decrypt a sealed blob.

    Args:
        key: AES-256-GCM key object.
        blob: ``nonce || ciphertext-with-tag`` as produced by ``seal_blob``.

    Returns:
        The original plaintext.

    Raises:
        AuthenticationError: If the blob is truncated or the tag does not verify.
    """
    if len(blob) < OVERHEAD:
        msg = f"Blob too short: {len(blob)} < {OVERHEAD}"
        raise AuthenticationError(msg)

    nonce = blob[:NONCE_SIZE]
    ciphertext = blob[NONCE_SIZE:]
    try:
        return key.decrypt(nonce, ciphertext, None)
    except InvalidTag:
        msg = "Authentication tag mismatch, wrong key or corrupted data"
        raise AuthenticationError(msg) from None


def seal_text(key: AESGCM, text: str, encoding: str = "utf-8") -> bytes:
    """Seal a string encoded with ``encoding``."""
    return seal_blob(key, text.encode(encoding))


def open_text(key: AESGCM, blob: bytes, encoding: str = "utf-8") -> str:
    """
    Open a sealed string.

    Raises:
        AuthenticationError: If the blob does not verify.
        ParseError: If the plaintext is not valid in ``encoding``.
    """
    plaintext = open_blob(key, blob)
    try:
        return plaintext.decode(encoding)
    except UnicodeDecodeError as e:
        msg = f"Decrypted text is not valid {encoding}"
        raise ParseError(msg) from e
