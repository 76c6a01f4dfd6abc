"""Protocol-wide constants shared by both ends of a connection."""

ENCODING = "ascii"

VERSION_PREFIX = b"MYPROTO:VER:"
VERSION_DIGITS = 6
VERSION_HEADER_SIZE = len(VERSION_PREFIX) + VERSION_DIGITS  # 18 bytes
MAX_PROTOCOL_VERSION = 10**VERSION_DIGITS - 1

ACCEPT = b"ACCEPT"
REJECT = b"REJECT"
NEGOTIATION_RESPONSE_SIZE = 6

FRAME_SEPARATOR = b":"
FRAME_LENGTH_DIGITS = 5
FRAME_HEADER_SIZE = 1 + 1 + FRAME_LENGTH_DIGITS + 1  # type ':' length ':'
MAX_FRAME_BODY_SIZE = 10**FRAME_LENGTH_DIGITS - 1

DEFAULT_TIMEOUT_MS = 1000

__all__ = [
    "ENCODING",
    "VERSION_PREFIX",
    "VERSION_DIGITS",
    "VERSION_HEADER_SIZE",
    "MAX_PROTOCOL_VERSION",
    "ACCEPT",
    "REJECT",
    "NEGOTIATION_RESPONSE_SIZE",
    "FRAME_SEPARATOR",
    "FRAME_LENGTH_DIGITS",
    "FRAME_HEADER_SIZE",
    "MAX_FRAME_BODY_SIZE",
    "DEFAULT_TIMEOUT_MS",
]
