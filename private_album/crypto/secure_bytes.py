"""Zeroing container for key material held in memory."""

import ctypes
import warnings
from typing import Self


def _secure_zero(data: bytearray) -> None:
    if len(data) == 0:
        return
    try:
        address = ctypes.addressof((ctypes.c_char * len(data)).from_buffer(data))
        ctypes.memset(address, 0, len(data))
    except (TypeError, ValueError, BufferError) as exc:
        warnings.warn(f"ctypes.memset failed, using fallback: {exc}", RuntimeWarning)
        for i in range(len(data)):
            data[i] = 0


class SecureBytes:
    """
    Bytes container whose buffer is overwritten with zeros when cleared.

    Use as context manager for guaranteed cleanup.
    """

    __slots__ = ("_data", "_cleared")

    def __init__(self, data: bytes | bytearray) -> None:
        self._data = bytearray(data)
        self._cleared = False

    def __del__(self) -> None:
        self.clear()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.clear()

    def clear(self) -> None:
        """Zero memory. Idempotent."""
        if self._cleared:
            return
        _secure_zero(self._data)
        self._cleared = True

    def __bytes__(self) -> bytes:
        """Warning: creates an insecure copy."""
        self._check_cleared()
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def decode(self, encoding: str = "utf-8") -> str:
        """Warning: returned string is not securely managed."""
        self._check_cleared()
        return self._data.decode(encoding)

    def _check_cleared(self) -> None:
        if self._cleared:
            raise RuntimeError("SecureBytes has been cleared")

    @classmethod
    def from_string(cls, s: str, encoding: str = "utf-8") -> Self:
        """Create from string. Zeros intermediate bytearray."""
        encoded = bytearray(s, encoding)
        try:
            return cls(encoded)
        finally:
            _secure_zero(encoded)
