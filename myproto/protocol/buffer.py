from __future__ import annotations

from typing import Optional


class InputBuffer:
    """
    Accumulates inbound bytes across calls and hands out exact-length tokens.

    Only unconsumed bytes are kept: a successful take drops the prefix it
    returned, a short take leaves the buffer untouched.
    """

    def __init__(self) -> None:
        self._data = bytearray()

    def append(self, data: bytes) -> None:
        self._data += data

    def try_take_exact(self, size: int) -> Optional[bytes]:
        """Return and consume the first ``size`` bytes, or None if fewer are buffered."""
        if size < 0:
            raise ValueError("size must be non-negative")
        if len(self._data) < size:
            return None
        token = bytes(self._data[:size])
        del self._data[:size]
        return token

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)


__all__ = ["InputBuffer"]
