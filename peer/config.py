from __future__ import annotations

import os
from typing import Any, Dict

from myproto import settings

DEFAULT_PEER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": 7070,
    "max_connections": 200,
    "read_size": 4096,
    "log_level": "INFO",
}

PEER_CONFIG = DEFAULT_PEER_CONFIG.copy()


def load_peer_config() -> Dict[str, Any]:
    PEER_CONFIG["host"] = os.getenv("PEER_HOST", PEER_CONFIG["host"])
    PEER_CONFIG["port"] = int(os.getenv("PEER_PORT", PEER_CONFIG["port"]))
    PEER_CONFIG["max_connections"] = int(os.getenv("PEER_MAX_CONNECTIONS", PEER_CONFIG["max_connections"]))
    PEER_CONFIG["read_size"] = int(os.getenv("PEER_READ_SIZE", PEER_CONFIG["read_size"]))
    PEER_CONFIG["log_level"] = os.getenv("PEER_LOG_LEVEL") or settings.SETTINGS.log_level
    return PEER_CONFIG


__all__ = ["DEFAULT_PEER_CONFIG", "PEER_CONFIG", "load_peer_config"]
