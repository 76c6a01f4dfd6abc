from __future__ import annotations

import asyncio
from typing import Dict, Optional

from .connection import ConnectionContext


class ConnectionManager:
    """Tracks active connections; each one owns its engine."""

    def __init__(self, max_connections: int = 0) -> None:
        self.max_connections = max_connections
        self._by_writer: Dict[asyncio.StreamWriter, ConnectionContext] = {}

    def has_capacity(self) -> bool:
        return self.max_connections <= 0 or len(self._by_writer) < self.max_connections

    def register(self, writer: asyncio.StreamWriter, ctx: ConnectionContext) -> None:
        self._by_writer[writer] = ctx

    def unregister(self, writer: asyncio.StreamWriter) -> Optional[ConnectionContext]:
        return self._by_writer.pop(writer, None)

    def __len__(self) -> int:
        return len(self._by_writer)
