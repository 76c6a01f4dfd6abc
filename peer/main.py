from __future__ import annotations

import asyncio
import logging
from typing import Optional

from myproto.protocol import Frame, FrameType
from myproto.settings import SETTINGS, load_settings
from peer.config import PEER_CONFIG, load_peer_config
from peer.core import ConnectionContext, ConnectionManager, FrameRouter, PeerServer

logger = logging.getLogger(__name__)


async def echo_text(frame: Frame, ctx: ConnectionContext) -> Optional[Frame]:
    logger.info("Text from %s: %s", ctx.peername, frame.body.decode("ascii", errors="replace"))
    return frame


async def log_image(frame: Frame, ctx: ConnectionContext) -> Optional[Frame]:
    logger.info("Image from %s: %d bytes", ctx.peername, frame.length)
    return None


def build_router() -> FrameRouter:
    router = FrameRouter()
    router.register(FrameType.STRING, echo_text)
    router.register(FrameType.IMAGE, log_image)
    return router


async def run_peer() -> None:
    load_settings()
    load_peer_config()
    logging.basicConfig(level=PEER_CONFIG["log_level"])

    server = PeerServer(
        PEER_CONFIG["host"],
        PEER_CONFIG["port"],
        build_router(),
        ConnectionManager(PEER_CONFIG["max_connections"]),
        local_version=SETTINGS.protocol_version,
        timeout_ms=SETTINGS.timeout_ms,
        read_size=PEER_CONFIG["read_size"],
    )
    await server.start()
    try:
        await asyncio.Event().wait()  # keep running
    finally:
        await server.stop()


def main() -> None:
    try:
        asyncio.run(run_peer())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
