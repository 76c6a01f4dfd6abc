from __future__ import annotations

from .constants import (
    ACCEPT,
    ENCODING,
    FRAME_LENGTH_DIGITS,
    FRAME_SEPARATOR,
    MAX_FRAME_BODY_SIZE,
    MAX_PROTOCOL_VERSION,
    REJECT,
    VERSION_DIGITS,
    VERSION_PREFIX,
)
from .errors import ErrorKind, ProtocolError
from .messages import Frame


def encode_version_header(version: int) -> bytes:
    """Encode the opening handshake, e.g. ``MYPROTO:VER:000001``."""
    if not (0 <= version <= MAX_PROTOCOL_VERSION):
        raise ProtocolError(ErrorKind.MALFORMED_HEADER, f"Version must be 0-{MAX_PROTOCOL_VERSION}, got {version}")
    return VERSION_PREFIX + f"{version:0{VERSION_DIGITS}d}".encode(ENCODING)


def encode_negotiation(accept: bool) -> bytes:
    return ACCEPT if accept else REJECT


def encode_frame(frame_type: str, body: bytes) -> bytes:
    """
    Encode a message frame: 1 type char + ':' + 5-digit length + ':' + body.
    """
    if len(body) > MAX_FRAME_BODY_SIZE:
        raise ProtocolError(
            ErrorKind.MALFORMED_LENGTH, f"Frame body of {len(body)} bytes exceeds {MAX_FRAME_BODY_SIZE}"
        )
    frame = Frame.build(frame_type, body)
    length = f"{frame.length:0{FRAME_LENGTH_DIGITS}d}".encode(ENCODING)
    return frame.type.encode(ENCODING) + FRAME_SEPARATOR + length + FRAME_SEPARATOR + frame.body


def encode_text_frame(text: str) -> bytes:
    """Encode an ``S`` frame carrying ASCII text."""
    try:
        body = text.encode(ENCODING)
    except UnicodeEncodeError as exc:
        raise ProtocolError(ErrorKind.MALFORMED_HEADER, f"Text frame must be ASCII: {exc}") from exc
    return encode_frame("S", body)


__all__ = ["encode_version_header", "encode_negotiation", "encode_frame", "encode_text_frame"]
