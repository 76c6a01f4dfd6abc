from .network import NetworkError, PeerClient

__all__ = ["PeerClient", "NetworkError"]
