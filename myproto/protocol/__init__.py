"""
Wire protocol package: byte buffer, grammar, outbound framing and the
per-connection engine that turns a byte stream into protocol events.
"""

from .buffer import InputBuffer
from .constants import DEFAULT_TIMEOUT_MS, ENCODING, VERSION_PREFIX
from .engine import TERMINAL_STATES, ConnectionState, ProtocolEngine
from .episodes import TimeoutEpisodeTracker
from .errors import ErrorKind, ProtocolError
from .framing import encode_frame, encode_negotiation, encode_text_frame, encode_version_header
from .grammar import parse_frame_header, parse_negotiation_response, parse_version_header
from .handlers import NetworkDataHandler, NotificationsHandler, TimeoutProvider
from .messages import Frame, FrameType, NegotiationResponse, VersionHeader

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "ENCODING",
    "VERSION_PREFIX",
    "InputBuffer",
    "TimeoutEpisodeTracker",
    "ConnectionState",
    "ProtocolEngine",
    "TERMINAL_STATES",
    "ErrorKind",
    "ProtocolError",
    "encode_frame",
    "encode_negotiation",
    "encode_text_frame",
    "encode_version_header",
    "parse_frame_header",
    "parse_negotiation_response",
    "parse_version_header",
    "NetworkDataHandler",
    "NotificationsHandler",
    "TimeoutProvider",
    "Frame",
    "FrameType",
    "NegotiationResponse",
    "VersionHeader",
]
