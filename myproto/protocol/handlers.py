"""Collaborator interfaces consumed by the protocol engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .messages import Frame


@runtime_checkable
class NetworkDataHandler(Protocol):
    """Outbound side of the transport."""

    def on_network_data(self, data: bytes) -> None: ...

    def close_connection(self) -> None: ...


@runtime_checkable
class TimeoutProvider(Protocol):
    """Single-shot scheduler; fires ``ProtocolEngine.on_network_timeout`` later."""

    def on_timeout_requested(self, timeout_ms: int) -> None: ...


@runtime_checkable
class NotificationsHandler(Protocol):
    def on_error(self) -> None: ...

    def on_end(self) -> None: ...

    def on_frame(self, frame: "Frame") -> None: ...


__all__ = ["NetworkDataHandler", "TimeoutProvider", "NotificationsHandler"]
