"""
asyncio implementations of the engine collaborators, used by both the peer
server and the client. Every callback runs on the event loop thread, which
serialises all calls into a given engine.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import List, Optional

from myproto.protocol import (
    Frame,
    NegotiationResponse,
    ProtocolEngine,
    encode_negotiation,
    encode_version_header,
    parse_negotiation_response,
    parse_version_header,
)

logger = logging.getLogger(__name__)

AcceptPolicy = Callable[[int, int], bool]


def same_version(local: int, remote: int) -> bool:
    return local == remote


class StreamNetworkHandler:
    """
    NetworkDataHandler over an ``asyncio.StreamWriter``.

    The engine forwards the peer's version header and then the peer's
    ACCEPT/REJECT. On the version header this side announces its own version
    (unless it already did) and answers with its own ACCEPT/REJECT. Once both
    decisions are known ``negotiated`` is set; a refused handshake closes the
    stream.

    Forwarded bytes are not echoed back. The engine hands over the peer's
    tokens, and this side replies with its own header and decision instead.
    """

    def __init__(
        self,
        writer: asyncio.StreamWriter,
        local_version: int,
        accept_policy: AcceptPolicy = same_version,
    ) -> None:
        self.writer = writer
        self.local_version = local_version
        self.accept_policy = accept_policy
        self.handshake: List[bytes] = []
        self.local_accepted: Optional[bool] = None
        self.peer_accepted: Optional[bool] = None
        self.negotiated = asyncio.Event()
        self.closed = False
        self._announced = False

    @property
    def established(self) -> bool:
        return bool(self.local_accepted and self.peer_accepted)

    def announce(self) -> None:
        if not self._announced:
            self._announced = True
            self.send(encode_version_header(self.local_version))

    def send(self, data: bytes) -> None:
        if self.closed:
            logger.debug("Dropping %d bytes for closed stream", len(data))
            return
        self.writer.write(data)

    def on_network_data(self, data: bytes) -> None:
        self.handshake.append(data)
        if len(self.handshake) == 1:
            remote = parse_version_header(data).version
            self.local_accepted = self.accept_policy(self.local_version, remote)
            logger.info(
                "Peer announced version %s (local %s): %s",
                remote,
                self.local_version,
                "accepting" if self.local_accepted else "rejecting",
            )
            self.announce()
            self.send(encode_negotiation(self.local_accepted))
            return
        self.peer_accepted = parse_negotiation_response(data) is NegotiationResponse.ACCEPT
        self.negotiated.set()
        if not self.established:
            logger.info("Handshake refused (local=%s, peer=%s)", self.local_accepted, self.peer_accepted)
            self.close_connection()

    def close_connection(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.negotiated.set()
        self.writer.close()


class LoopTimeoutProvider:
    """
    TimeoutProvider backed by ``loop.call_later``.

    A new request replaces the pending one, so only the most recent request
    can fire.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._callback: Optional[Callable[[], None]] = None

    def bind(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def on_timeout_requested(self, timeout_ms: int) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(timeout_ms / 1000.0, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._callback is not None:
            self._callback()


class FrameInbox:
    """
    NotificationsHandler that queues delivered frames for async consumers.

    ``None`` is queued once when the connection ends or fails, so readers of
    ``get()`` can stop; ``failed`` tells a protocol failure from a clean end.
    """

    def __init__(self, network: StreamNetworkHandler, peername: str = "") -> None:
        self.network = network
        self.peername = peername
        self.queue: "asyncio.Queue[Optional[Frame]]" = asyncio.Queue()
        self.failed = False

    def on_frame(self, frame: Frame) -> None:
        logger.debug("Frame %s (%d bytes) from %s", frame.type, frame.length, self.peername)
        self.queue.put_nowait(frame)

    def on_error(self) -> None:
        logger.warning("Protocol failure on connection %s", self.peername)
        self.failed = True
        self.queue.put_nowait(None)
        self.network.close_connection()

    def on_end(self) -> None:
        logger.info("Connection %s ended", self.peername)
        self.queue.put_nowait(None)

    def drain(self) -> List[Frame]:
        frames: List[Frame] = []
        while not self.queue.empty():
            frame = self.queue.get_nowait()
            if frame is not None:
                frames.append(frame)
        return frames

    async def get(self) -> Optional[Frame]:
        return await self.queue.get()


def build_engine(
    writer: asyncio.StreamWriter,
    local_version: int,
    timeout_ms: int,
    peername: str = "",
    accept_policy: AcceptPolicy = same_version,
) -> tuple[ProtocolEngine, StreamNetworkHandler, LoopTimeoutProvider, FrameInbox]:
    """Wire one engine to a stream with asyncio-backed collaborators."""
    network = StreamNetworkHandler(writer, local_version, accept_policy)
    timeouts = LoopTimeoutProvider()
    inbox = FrameInbox(network, peername)
    engine = ProtocolEngine(network, timeouts, inbox, timeout_ms=timeout_ms)
    timeouts.bind(engine.on_network_timeout)
    return engine, network, timeouts, inbox


__all__ = [
    "AcceptPolicy",
    "FrameInbox",
    "LoopTimeoutProvider",
    "StreamNetworkHandler",
    "build_engine",
    "same_version",
]
