from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Dict, Optional, TYPE_CHECKING, Union

from myproto.protocol import Frame, FrameType

if TYPE_CHECKING:
    from .connection import ConnectionContext

logger = logging.getLogger(__name__)

Handler = Callable[[Frame, "ConnectionContext"], Awaitable[Optional[Frame]]]


class FrameRouter:
    """Maps frame type characters to async handlers."""

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def register(self, frame_type: Union[FrameType, str], handler: Handler) -> None:
        self._handlers[str(frame_type)] = handler

    async def dispatch(self, frame: Frame, ctx: "ConnectionContext") -> Optional[Frame]:
        handler = self._handlers.get(frame.type)
        if handler:
            return await handler(frame, ctx)
        logger.debug("No handler registered for frame type %r", frame.type)
        return None
