from __future__ import annotations

import time
from typing import Optional

from shared.protocol.constants import ENCODING


def format_timestamp(ts: Optional[float] = None) -> str:
    """Local wall-clock time in the chat log format."""
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(ts))


def payload_size(text: str) -> int:
    """Number of bytes ``text`` occupies on the wire."""
    return len(text.encode(ENCODING))


__all__ = ["format_timestamp", "payload_size"]
