from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from myproto.protocol import ProtocolEngine
from myproto.transport import FrameInbox, LoopTimeoutProvider, StreamNetworkHandler
from myproto.utils import generate_connection_id


@dataclass
class ConnectionContext:
    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter
    peername: str
    engine: ProtocolEngine
    network: StreamNetworkHandler
    timeouts: LoopTimeoutProvider
    inbox: FrameInbox
    connection_id: str = field(default_factory=lambda: generate_connection_id("conn"))
    frames_received: int = 0

    def is_established(self) -> bool:
        return self.network.established

    def send(self, data: bytes) -> None:
        self.network.send(data)
