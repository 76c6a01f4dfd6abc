from .connection import ConnectionContext
from .connection_manager import ConnectionManager
from .router import FrameRouter
from .server import PeerServer

__all__ = ["ConnectionContext", "ConnectionManager", "FrameRouter", "PeerServer"]
