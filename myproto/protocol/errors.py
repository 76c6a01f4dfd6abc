from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Reasons a connection leaves the normal flow."""

    MALFORMED_HEADER = "malformed_header"
    MALFORMED_LENGTH = "malformed_length"
    TIMEOUT = "timeout"
    PEER_CLOSED = "peer_closed"


class ProtocolError(Exception):
    """Structured protocol exception carrying the error kind and a message."""

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        self.kind = kind
        self.message = message
        super().__init__(f"{kind.name}: {message}" if message else kind.name)

    def to_payload(self) -> dict:
        """Map error into a dict suitable for logs and diagnostics."""
        return {"kind": self.kind.value, "message": self.message}


__all__ = ["ErrorKind", "ProtocolError"]
