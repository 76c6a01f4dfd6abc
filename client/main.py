from __future__ import annotations

import argparse
import asyncio
import logging

from client.config import CLIENT_CONFIG, load_config
from client.core import NetworkError, PeerClient
from myproto.protocol import ProtocolError
from myproto.settings import load_settings

logger = logging.getLogger(__name__)


async def run_client(messages: list[str], wait_replies: bool) -> int:
    client = PeerClient()
    try:
        if not await client.handshake():
            logger.error("Peer refused the handshake")
            return 2
        for text in messages:
            await client.send_text(text)
            if wait_replies:
                frame = await asyncio.wait_for(client.receive(), timeout=client.handshake_timeout)
                if frame is None:
                    logger.error("Connection ended before a reply arrived")
                    return 1
                print(f"{frame.type}: {frame.text}")
    except (NetworkError, ProtocolError, asyncio.TimeoutError) as exc:
        logger.error("Client failed: %s", exc)
        return 1
    finally:
        await client.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="myproto-client", description="Send text frames to a MYPROTO peer.")
    p.add_argument("messages", nargs="+", help="ASCII text sent as S frames")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.add_argument("--no-wait", action="store_true", help="do not wait for echoed replies")
    args = p.parse_args(argv)

    load_settings()
    load_config()
    logging.basicConfig(level=CLIENT_CONFIG["log_level"])
    if args.host:
        CLIENT_CONFIG["server_host"] = args.host
    if args.port:
        CLIENT_CONFIG["server_port"] = args.port
    return asyncio.run(run_client(args.messages, wait_replies=not args.no_wait))


if __name__ == "__main__":
    raise SystemExit(main())
