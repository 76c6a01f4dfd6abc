from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import ENCODING, MAX_FRAME_BODY_SIZE, MAX_PROTOCOL_VERSION
from .errors import ErrorKind, ProtocolError


class FrameType(StrEnum):
    """
    Frame types documented by the protocol.

    Informational only: the engine delivers frames of any single ASCII type.
    """

    STRING = "S"
    IMAGE = "I"


class NegotiationResponse(StrEnum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


class VersionHeader(BaseModel):
    """Peer version announced in the opening ``MYPROTO:VER:`` header."""

    model_config = ConfigDict(frozen=True)

    version: int = Field(..., ge=0, le=MAX_PROTOCOL_VERSION, description="Announced protocol version")


class Frame(BaseModel):
    """One message-phase frame: a type character and an opaque body."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1, max_length=1, description="Single ASCII type character")
    body: bytes = Field(default=b"", max_length=MAX_FRAME_BODY_SIZE, description="Opaque payload")

    @field_validator("type")
    @classmethod
    def _ascii_type(cls, value: str) -> str:
        if not value.isascii():
            raise ValueError("frame type must be an ASCII character")
        return value

    @property
    def length(self) -> int:
        return len(self.body)

    @property
    def text(self) -> str:
        return self.body.decode(ENCODING)

    @classmethod
    def build(cls, frame_type: str, body: bytes) -> "Frame":
        try:
            return cls(type=frame_type, body=body)
        except ValidationError as exc:
            raise ProtocolError(ErrorKind.MALFORMED_HEADER, f"Invalid frame: {exc}") from exc


__all__ = ["Frame", "FrameType", "NegotiationResponse", "VersionHeader"]
