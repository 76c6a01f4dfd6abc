from __future__ import annotations

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

from myproto import settings
from myproto.protocol.constants import DEFAULT_TIMEOUT_MS, MAX_PROTOCOL_VERSION

DEFAULT_CONFIG: Dict[str, Any] = {
    "server_host": "127.0.0.1",
    "server_port": 7070,
    "protocol_version": 1,
    "timeout_ms": DEFAULT_TIMEOUT_MS,
    "handshake_timeout": 5.0,
    "reconnect_backoff": 1,
    "max_reconnect_backoff": 30,
    "max_reconnect_retries": 5,
    "read_size": 4096,
    "log_level": "INFO",
}

CLIENT_CONFIG: Dict[str, Any] = DEFAULT_CONFIG.copy()


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load client configuration from env file/environment variables."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    # MYPROTO_LOG_LEVEL applies unless CLIENT_LOG_LEVEL is set
    defaults = dict(DEFAULT_CONFIG, log_level=settings.SETTINGS.log_level)
    for key, default_value in defaults.items():
        env_key = f"CLIENT_{key.upper()}"
        value = os.getenv(env_key, default_value)
        CLIENT_CONFIG[key] = _coerce_type(value, type(default_value))

    _validate_config()
    logging.getLogger().setLevel(CLIENT_CONFIG["log_level"])
    return CLIENT_CONFIG


def _coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def _validate_config() -> None:
    if not (1 <= int(CLIENT_CONFIG["server_port"]) <= 65535):
        raise ConfigError("server_port must be between 1 and 65535")
    if not (0 <= CLIENT_CONFIG["protocol_version"] <= MAX_PROTOCOL_VERSION):
        raise ConfigError(f"protocol_version must be between 0 and {MAX_PROTOCOL_VERSION}")
    if CLIENT_CONFIG["timeout_ms"] <= 0:
        raise ConfigError("timeout_ms must be positive")
    if CLIENT_CONFIG["handshake_timeout"] <= 0:
        raise ConfigError("handshake_timeout must be positive")


__all__ = ["CLIENT_CONFIG", "DEFAULT_CONFIG", "ConfigError", "load_config"]
