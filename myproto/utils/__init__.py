from .common import generate_connection_id

__all__ = ["generate_connection_id"]
