"""
Token parsers for the three wire tokens.

Each parser receives a token of exactly the expected size (the buffer only
hands out complete tokens) and raises ``ProtocolError`` on a grammar violation.
"""

from __future__ import annotations

from typing import Tuple

from .constants import (
    ENCODING,
    FRAME_HEADER_SIZE,
    FRAME_SEPARATOR,
    NEGOTIATION_RESPONSE_SIZE,
    VERSION_HEADER_SIZE,
    VERSION_PREFIX,
)
from .errors import ErrorKind, ProtocolError
from .messages import NegotiationResponse, VersionHeader


def _is_digits(raw: bytes) -> bool:
    # bytes.isdigit() is ASCII-only, unlike str.isdigit()
    return bool(raw) and raw.isdigit()


def _check_size(raw: bytes, expected: int, what: str) -> None:
    if len(raw) != expected:
        raise ValueError(f"{what} token must be {expected} bytes, got {len(raw)}")


def parse_version_header(raw: bytes) -> VersionHeader:
    _check_size(raw, VERSION_HEADER_SIZE, "version header")
    if not raw.startswith(VERSION_PREFIX):
        raise ProtocolError(ErrorKind.MALFORMED_HEADER, f"Bad version prefix: {raw!r}")
    digits = raw[len(VERSION_PREFIX) :]
    if not _is_digits(digits):
        raise ProtocolError(ErrorKind.MALFORMED_HEADER, f"Non-numeric version: {digits!r}")
    return VersionHeader(version=int(digits))


def parse_negotiation_response(raw: bytes) -> NegotiationResponse:
    _check_size(raw, NEGOTIATION_RESPONSE_SIZE, "negotiation response")
    try:
        return NegotiationResponse(raw.decode(ENCODING))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ProtocolError(ErrorKind.MALFORMED_HEADER, f"Expected ACCEPT or REJECT, got {raw!r}") from exc


def parse_frame_header(raw: bytes) -> Tuple[str, int]:
    """Parse ``T:LLLLL:`` into ``(type, length)``."""
    _check_size(raw, FRAME_HEADER_SIZE, "frame header")
    frame_type, first_sep, length_field, last_sep = raw[:1], raw[1:2], raw[2:-1], raw[-1:]
    if first_sep != FRAME_SEPARATOR or last_sep != FRAME_SEPARATOR:
        raise ProtocolError(ErrorKind.MALFORMED_HEADER, f"Misplaced separator in frame header {raw!r}")
    if not frame_type.isascii():
        raise ProtocolError(ErrorKind.MALFORMED_HEADER, f"Non-ASCII frame type {frame_type!r}")
    if not _is_digits(length_field):
        raise ProtocolError(ErrorKind.MALFORMED_LENGTH, f"Non-numeric frame length {length_field!r}")
    return frame_type.decode(ENCODING), int(length_field)


__all__ = ["parse_version_header", "parse_negotiation_response", "parse_frame_header"]
