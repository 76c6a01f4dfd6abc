from __future__ import annotations

from typing import Optional
from uuid import uuid4


def generate_connection_id(prefix: Optional[str] = None) -> str:
    """Generate a short unique id for log correlation."""
    base = uuid4().hex[:12]
    return f"{prefix}-{base}" if prefix else base


__all__ = ["generate_connection_id"]
