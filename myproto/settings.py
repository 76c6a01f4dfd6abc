from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from myproto.protocol.constants import DEFAULT_TIMEOUT_MS


@dataclass
class Settings:
    """Protocol-level settings shared by the peer server and the client."""

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    protocol_version: int = 1
    log_level: str = "INFO"


SETTINGS = Settings()


def load_settings(env_path: str = ".env") -> Settings:
    """Load shared settings from env/.env."""
    if Path(env_path).exists():
        load_dotenv(env_path)
    SETTINGS.timeout_ms = int(os.getenv("MYPROTO_TIMEOUT_MS", SETTINGS.timeout_ms))
    SETTINGS.protocol_version = int(os.getenv("MYPROTO_PROTOCOL_VERSION", SETTINGS.protocol_version))
    SETTINGS.log_level = os.getenv("MYPROTO_LOG_LEVEL", SETTINGS.log_level)
    return SETTINGS


__all__ = ["Settings", "SETTINGS", "load_settings"]
