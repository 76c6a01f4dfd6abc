from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Dict, Optional

from .buffer import InputBuffer
from .constants import DEFAULT_TIMEOUT_MS, FRAME_HEADER_SIZE, NEGOTIATION_RESPONSE_SIZE, VERSION_HEADER_SIZE
from .episodes import TimeoutEpisodeTracker
from .errors import ErrorKind, ProtocolError
from .grammar import parse_frame_header, parse_negotiation_response, parse_version_header
from .handlers import NetworkDataHandler, NotificationsHandler, TimeoutProvider
from .messages import Frame, NegotiationResponse, VersionHeader

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    AWAITING_VERSION_HEADER = "awaiting_version_header"
    AWAITING_NEGOTIATION_RESPONSE = "awaiting_negotiation_response"
    AWAITING_FRAME_HEADER = "awaiting_frame_header"
    AWAITING_FRAME_BODY = "awaiting_frame_body"
    ERROR = "error"
    CLOSED = "closed"


TERMINAL_STATES = frozenset({ConnectionState.ERROR, ConnectionState.CLOSED})


class ProtocolEngine:
    """
    Per-connection parser and state machine for the MYPROTO wire protocol.

    The three entry points (``on_network_data``, ``on_network_timeout``,
    ``on_peer_closed_connection``) run synchronously to completion and never
    raise protocol errors to the caller: malformed input and stalled input are
    reported through ``NotificationsHandler.on_error`` and move the engine into
    the terminal ``ERROR`` state. Callers must serialise calls per instance.
    """

    def __init__(
        self,
        network_handler: NetworkDataHandler,
        timeout_provider: TimeoutProvider,
        notifications: NotificationsHandler,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self._network = network_handler
        self._timeouts = timeout_provider
        self._notifications = notifications
        self.timeout_ms = timeout_ms

        self._buffer = InputBuffer()
        self._episodes = TimeoutEpisodeTracker()
        self._state = ConnectionState.AWAITING_VERSION_HEADER
        self._frame_type: Optional[str] = None
        self._frame_length = 0

        self.peer_version: Optional[VersionHeader] = None
        self.negotiation: Optional[NegotiationResponse] = None
        self.last_error: Optional[ProtocolError] = None

        self._steps: Dict[ConnectionState, Callable[[], bool]] = {
            ConnectionState.AWAITING_VERSION_HEADER: self._read_version_header,
            ConnectionState.AWAITING_NEGOTIATION_RESPONSE: self._read_negotiation_response,
            ConnectionState.AWAITING_FRAME_HEADER: self._read_frame_header,
            ConnectionState.AWAITING_FRAME_BODY: self._read_frame_body,
        }

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    # -- inbound entry points -------------------------------------------------

    def on_network_data(self, data: bytes) -> None:
        if self.is_terminal:
            return
        if data:
            self._buffer.append(data)
        try:
            self._drain()
        except ProtocolError as exc:
            self._fail(exc)

    def on_network_timeout(self) -> None:
        if self.is_terminal:
            return
        if not self._episodes.fire():
            logger.debug("Ignoring stale timeout in state %s", self._state.value)
            return
        self._fail(
            ProtocolError(
                ErrorKind.TIMEOUT,
                f"No complete token within {self.timeout_ms} ms in state {self._state.value}",
            )
        )

    def on_peer_closed_connection(self) -> None:
        if self.is_terminal:
            return
        logger.info("Peer closed connection in state %s", self._state.value)
        self._enter_terminal(ConnectionState.CLOSED)
        self._notifications.on_end()
        self._network.close_connection()

    # -- parsing --------------------------------------------------------------

    def _drain(self) -> None:
        while not self.is_terminal:
            if not self._steps[self._state]():
                break
            self._episodes.complete()
        if self.is_terminal:
            return
        if self._awaiting_partial_token() and self._episodes.wait():
            logger.debug(
                "Waiting for more data in state %s (episode %s)", self._state.value, self._episodes.episode
            )
            self._timeouts.on_timeout_requested(self.timeout_ms)

    def _awaiting_partial_token(self) -> bool:
        # an empty buffer between tokens is idle; a consumed frame header means the body is owed
        return bool(self._buffer) or self._state is ConnectionState.AWAITING_FRAME_BODY

    def _read_version_header(self) -> bool:
        raw = self._buffer.try_take_exact(VERSION_HEADER_SIZE)
        if raw is None:
            return False
        self.peer_version = parse_version_header(raw)
        self._transition(ConnectionState.AWAITING_NEGOTIATION_RESPONSE)
        self._network.on_network_data(raw)
        return True

    def _read_negotiation_response(self) -> bool:
        raw = self._buffer.try_take_exact(NEGOTIATION_RESPONSE_SIZE)
        if raw is None:
            return False
        self.negotiation = parse_negotiation_response(raw)
        self._transition(ConnectionState.AWAITING_FRAME_HEADER)
        self._network.on_network_data(raw)
        return True

    def _read_frame_header(self) -> bool:
        raw = self._buffer.try_take_exact(FRAME_HEADER_SIZE)
        if raw is None:
            return False
        self._frame_type, self._frame_length = parse_frame_header(raw)
        self._transition(ConnectionState.AWAITING_FRAME_BODY)
        return True

    def _read_frame_body(self) -> bool:
        body = self._buffer.try_take_exact(self._frame_length)
        if body is None:
            return False
        frame = Frame(type=self._frame_type, body=body)
        self._frame_type, self._frame_length = None, 0
        self._transition(ConnectionState.AWAITING_FRAME_HEADER)
        self._notifications.on_frame(frame)
        return True

    # -- transitions ----------------------------------------------------------

    def _transition(self, state: ConnectionState) -> None:
        logger.debug("State %s -> %s", self._state.value, state.value)
        self._state = state

    def _enter_terminal(self, state: ConnectionState) -> None:
        self._transition(state)
        self._buffer.clear()
        self._episodes.complete()
        self._frame_type, self._frame_length = None, 0

    def _fail(self, error: ProtocolError) -> None:
        logger.warning("Protocol error in state %s: %s", self._state.value, error.to_payload())
        self.last_error = error
        self._enter_terminal(ConnectionState.ERROR)
        self._notifications.on_error()


__all__ = ["ConnectionState", "ProtocolEngine", "TERMINAL_STATES"]
