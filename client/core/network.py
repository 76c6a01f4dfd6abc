from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Dict, Optional

from client.config import CLIENT_CONFIG
from myproto.protocol import Frame, ProtocolEngine, encode_frame, encode_text_frame
from myproto.transport import FrameInbox, LoopTimeoutProvider, StreamNetworkHandler, build_engine

logger = logging.getLogger(__name__)


class NetworkError(Exception):
    """Network level error surfaced to higher layers."""

    pass


class PeerClient:
    """TCP client that performs the version handshake and exchanges frames."""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = config or CLIENT_CONFIG
        self.host: str = self.config["server_host"]
        self.port: int = int(self.config["server_port"])
        self.protocol_version: int = int(self.config["protocol_version"])
        self.timeout_ms: int = int(self.config["timeout_ms"])
        self.handshake_timeout: float = float(self.config["handshake_timeout"])
        self.backoff: float = float(self.config["reconnect_backoff"])
        self.max_backoff: float = float(self.config["max_reconnect_backoff"])
        self.max_retries: int = int(self.config["max_reconnect_retries"])
        self.read_size: int = int(self.config["read_size"])

        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.engine: Optional[ProtocolEngine] = None
        self.network: Optional[StreamNetworkHandler] = None
        self.timeouts: Optional[LoopTimeoutProvider] = None
        self.inbox: Optional[FrameInbox] = None
        self._receive_task: Optional[asyncio.Task] = None

    @property
    def connected(self) -> bool:
        return self.engine is not None and not self.engine.is_terminal

    @property
    def established(self) -> bool:
        return self.connected and self.network is not None and self.network.established

    async def connect(self) -> None:
        if self.connected:
            return

        retries = 0
        delay = self.backoff
        while retries <= self.max_retries:
            try:
                self.reader, self.writer = await asyncio.open_connection(self.host, self.port)
                break
            except (OSError, asyncio.TimeoutError) as exc:
                retries += 1
                logger.warning("Connect attempt %s failed: %s", retries, exc)
                if retries > self.max_retries:
                    raise NetworkError("Exceeded max reconnect attempts") from exc
                await asyncio.sleep(delay)
                delay = min(delay * 2, self.max_backoff)

        peername = f"{self.host}:{self.port}"
        self.engine, self.network, self.timeouts, self.inbox = build_engine(
            self.writer, self.protocol_version, self.timeout_ms, peername
        )
        logger.info("Connected to %s", peername)
        self.network.announce()
        self._receive_task = asyncio.create_task(self._receive_loop(), name="client-recv-loop")

    async def handshake(self) -> bool:
        """Connect if needed and wait until both sides have answered ACCEPT/REJECT."""
        await self.connect()
        assert self.network is not None
        try:
            await asyncio.wait_for(self.network.negotiated.wait(), timeout=self.handshake_timeout)
        except asyncio.TimeoutError as exc:
            raise NetworkError("Handshake did not complete in time") from exc
        return self.established

    async def send_frame(self, frame_type: str, body: bytes) -> None:
        await self._write(encode_frame(frame_type, body))

    async def send_text(self, text: str) -> None:
        await self._write(encode_text_frame(text))

    async def receive(self) -> Optional[Frame]:
        """
        Next frame from the peer, or None once the connection ended.

        Raises ``NetworkError`` when the connection failed on a protocol error.
        """
        if self.inbox is None:
            raise NetworkError("Not connected")
        frame = await self.inbox.get()
        if frame is None and self.inbox.failed:
            error = self.engine.last_error if self.engine else None
            raise NetworkError(f"Protocol failure: {error}")
        return frame

    async def close(self) -> None:
        if self._receive_task:
            self._receive_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._receive_task
            self._receive_task = None
        if self.timeouts:
            self.timeouts.cancel()
        if self.network and not self.network.closed:
            self.network.close_connection()
            if self.inbox:
                self.inbox.queue.put_nowait(None)
        if self.writer:
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError) as exc:
                logger.debug("Error during writer cleanup: %s", exc)
        logger.info("Peer client closed")

    async def _write(self, data: bytes) -> None:
        if not self.established:
            raise NetworkError("Handshake not established")
        assert self.writer is not None and self.network is not None
        try:
            self.network.send(data)
            await self.writer.drain()
        except (ConnectionResetError, BrokenPipeError, ConnectionAbortedError) as exc:
            logger.warning("Connection lost during send: %s", exc)
            raise NetworkError(f"Connection lost: {exc}") from exc

    async def _receive_loop(self) -> None:
        assert self.reader is not None and self.engine is not None
        while not self.engine.is_terminal:
            try:
                data = await self.reader.read(self.read_size)
            except (ConnectionError, OSError) as exc:
                logger.error("Receive loop terminated: %s", exc)
                self.engine.on_peer_closed_connection()
                break
            if not data:
                self.engine.on_peer_closed_connection()
                break
            self.engine.on_network_data(data)


__all__ = ["NetworkError", "PeerClient"]
