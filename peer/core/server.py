from __future__ import annotations

import asyncio
import logging
from typing import Optional

from myproto.protocol import DEFAULT_TIMEOUT_MS, ProtocolError, encode_frame
from myproto.transport import AcceptPolicy, build_engine, same_version

from .connection import ConnectionContext
from .connection_manager import ConnectionManager
from .router import FrameRouter

logger = logging.getLogger(__name__)


class PeerServer:
    def __init__(
        self,
        host: str,
        port: int,
        router: FrameRouter,
        connection_manager: ConnectionManager,
        *,
        local_version: int = 1,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        read_size: int = 4096,
        accept_policy: AcceptPolicy = same_version,
    ) -> None:
        self.host = host
        self.port = port
        self.router = router
        self.connection_manager = connection_manager
        self.local_version = local_version
        self.timeout_ms = timeout_ms
        self.read_size = read_size
        self.accept_policy = accept_policy
        self._server: Optional[asyncio.AbstractServer] = None

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        sockname = self._server.sockets[0].getsockname()
        self.port = sockname[1]
        logger.info("Peer listening on %s:%s", self.host, self.port)

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Peer stopped")

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peername = str(writer.get_extra_info("peername"))
        if not self.connection_manager.has_capacity():
            logger.warning("Refusing %s: %d connections open", peername, len(self.connection_manager))
            writer.close()
            return

        engine, network, timeouts, inbox = build_engine(
            writer, self.local_version, self.timeout_ms, peername, self.accept_policy
        )
        ctx = ConnectionContext(
            reader=reader,
            writer=writer,
            peername=peername,
            engine=engine,
            network=network,
            timeouts=timeouts,
            inbox=inbox,
        )
        self.connection_manager.register(writer, ctx)
        logger.info("Connection %s from %s", ctx.connection_id, peername)
        try:
            while not engine.is_terminal:
                data = await reader.read(self.read_size)
                if not data:
                    engine.on_peer_closed_connection()
                    break
                engine.on_network_data(data)
                await self._dispatch(ctx)
                if not network.closed:
                    await writer.drain()
        except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError, OSError) as exc:
            logger.info("Client %s connection reset: %s", peername, exc)
            engine.on_peer_closed_connection()
        except Exception as exc:
            logger.exception("Unhandled error: %s", exc)
        finally:
            timeouts.cancel()
            try:
                network.close_connection()
                await writer.wait_closed()
            except Exception as e:
                logger.debug("Error during writer cleanup: %s", e)
            finally:
                self.connection_manager.unregister(writer)
            logger.info(
                "Connection %s finished in state %s after %d frames",
                ctx.connection_id,
                engine.state.value,
                ctx.frames_received,
            )

    async def _dispatch(self, ctx: ConnectionContext) -> None:
        for frame in ctx.inbox.drain():
            ctx.frames_received += 1
            if not ctx.is_established():
                logger.debug("Dropping %s frame from %s: handshake not established", frame.type, ctx.peername)
                continue
            reply = await self.router.dispatch(frame, ctx)
            if reply is None:
                continue
            try:
                ctx.send(encode_frame(reply.type, reply.body))
            except ProtocolError as exc:
                logger.warning("Dropping reply to %s: %s", ctx.peername, exc)
