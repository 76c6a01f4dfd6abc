from __future__ import annotations

import asyncio
from typing import Optional

import pytest

from client.config import DEFAULT_CONFIG
from client.core import NetworkError, PeerClient
from myproto.protocol import Frame, FrameType, encode_frame
from myproto.transport import LoopTimeoutProvider
from peer.core import ConnectionContext, ConnectionManager, FrameRouter, PeerServer


async def _echo(frame: Frame, ctx: ConnectionContext) -> Optional[Frame]:
    return frame


def _router() -> FrameRouter:
    router = FrameRouter()
    router.register(FrameType.STRING, _echo)
    return router


async def _start_server(**kwargs) -> PeerServer:
    server = PeerServer("127.0.0.1", 0, _router(), ConnectionManager(), **kwargs)
    await server.start()
    return server


def _client(port: int, **overrides) -> PeerClient:
    config = DEFAULT_CONFIG.copy()
    config.update(server_host="127.0.0.1", server_port=port, handshake_timeout=2.0, max_reconnect_retries=0)
    config.update(overrides)
    return PeerClient(config)


def test_handshake_and_echo():
    async def scenario():
        server = await _start_server(timeout_ms=500)
        client = _client(server.port)
        try:
            assert await client.handshake() is True
            await client.send_text("hello")
            await client.send_frame("I", b"\x00\x01")
            reply = await asyncio.wait_for(client.receive(), timeout=2.0)
            assert reply == Frame(type="S", body=b"hello")
            assert client.engine.peer_version.version == 1
        finally:
            receive_task = client._receive_task
            await client.close()
            await server.stop()
        assert receive_task.cancelled()

    asyncio.run(scenario())


def test_version_mismatch_is_rejected():
    async def scenario():
        server = await _start_server(local_version=1)
        client = _client(server.port, protocol_version=2)
        try:
            assert await client.handshake() is False
            assert client.network.local_accepted is False
            assert await asyncio.wait_for(client.receive(), timeout=2.0) is None
        finally:
            await client.close()
            await server.stop()

    asyncio.run(scenario())


def test_stalled_header_times_out_and_closes():
    async def scenario():
        server = await _start_server(timeout_ms=50)
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        try:
            writer.write(b"MYPROTO:VER:00")
            await writer.drain()
            assert await asyncio.wait_for(reader.read(), timeout=2.0) == b""
        finally:
            writer.close()
            await server.stop()

    asyncio.run(scenario())


def test_malformed_header_closes_without_reply():
    async def scenario():
        server = await _start_server()
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        try:
            writer.write(b"MYPROTO:VER:00000X")
            await writer.drain()
            assert await asyncio.wait_for(reader.read(), timeout=2.0) == b""
        finally:
            writer.close()
            await server.stop()

    asyncio.run(scenario())


def test_raw_peer_handshake_bytes():
    async def scenario():
        server = await _start_server()
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        try:
            writer.write(b"MYPROTO:VER:000001")
            await writer.drain()
            reply = await asyncio.wait_for(reader.readexactly(24), timeout=2.0)
            assert reply == b"MYPROTO:VER:000001ACCEPT"

            writer.write(b"ACCEPT" + encode_frame("S", b"ping"))
            await writer.drain()
            assert await asyncio.wait_for(reader.readexactly(12), timeout=2.0) == b"S:00004:ping"
        finally:
            writer.close()
            await server.stop()

    asyncio.run(scenario())


def test_connection_limit():
    async def scenario():
        manager = ConnectionManager(max_connections=1)
        server = PeerServer("127.0.0.1", 0, _router(), manager)
        await server.start()
        first = _client(server.port)
        try:
            assert await first.handshake() is True
            assert len(manager) == 1
            reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
            assert await asyncio.wait_for(reader.read(), timeout=2.0) == b""
            writer.close()
        finally:
            await first.close()
            await server.stop()

    asyncio.run(scenario())


def test_router_ignores_unknown_types():
    async def scenario():
        router = _router()
        frame = Frame(type="Z", body=b"?")
        assert await router.dispatch(frame, None) is None
        echoed = Frame(type="S", body=b"x")
        assert await router.dispatch(echoed, None) == echoed

    asyncio.run(scenario())


def test_loop_timeout_provider_keeps_latest_request():
    async def scenario():
        fired = []
        provider = LoopTimeoutProvider()
        provider.bind(lambda: fired.append(True))

        provider.on_timeout_requested(10)
        provider.on_timeout_requested(20)
        assert provider.pending
        await asyncio.sleep(0.1)
        assert fired == [True]
        assert not provider.pending

        provider.on_timeout_requested(10)
        provider.cancel()
        await asyncio.sleep(0.05)
        assert fired == [True]

    asyncio.run(scenario())


def test_receive_raises_after_protocol_failure():
    async def handle(reader, writer):
        await reader.readexactly(18)
        writer.write(b"MYPROTO:VER:000001ACCEPT")
        await reader.readexactly(6)
        writer.write(b"S;00001:x")
        await writer.drain()
        await reader.read()
        writer.close()

    async def scenario():
        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        client = _client(port)
        try:
            await client.handshake()
            assert client.network.established
            with pytest.raises(NetworkError):
                await asyncio.wait_for(client.receive(), timeout=2.0)
            assert client.inbox.failed
        finally:
            await client.close()
            server.close()
            await server.wait_closed()

    asyncio.run(scenario())
