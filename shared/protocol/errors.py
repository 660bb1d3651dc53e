from __future__ import annotations

from enum import StrEnum
from typing import Optional


class ErrorKind(StrEnum):
    """Error categories raised by the channel core."""

    OVERSIZED_PAYLOAD = "oversized_payload"
    TRANSPORT_CLOSED = "transport_closed"
    TRANSPORT_ERROR = "transport_error"
    BIND_ERROR = "bind_error"
    CONNECT_ERROR = "connect_error"


class ChannelError(Exception):
    """Structured channel exception carrying a kind + message."""

    kind: ErrorKind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, message: str = "", detail: Optional[str] = None) -> None:
        self.message = message
        self.detail = detail
        suffix = f" ({detail})" if detail else ""
        super().__init__(f"{self.kind.value}: {message}{suffix}")


class OversizedPayload(ChannelError):
    """Payload does not fit in a single frame; nothing was written."""

    kind = ErrorKind.OVERSIZED_PAYLOAD

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"payload of {size} bytes exceeds {limit}")


class TransportClosed(ChannelError):
    """Peer ended the stream, possibly in the middle of a frame."""

    kind = ErrorKind.TRANSPORT_CLOSED


class TransportError(ChannelError):
    """I/O failure other than a clean close. ``detail`` names the failure."""

    kind = ErrorKind.TRANSPORT_ERROR


class BindError(ChannelError):
    kind = ErrorKind.BIND_ERROR


class ConnectError(ChannelError):
    kind = ErrorKind.CONNECT_ERROR


def describe_os_error(exc: BaseException) -> str:
    """Short name for an I/O failure, e.g. ``ConnectionResetError`` or ``errno 24``."""
    if isinstance(exc, OSError) and type(exc) is OSError and exc.errno is not None:
        return f"errno {exc.errno}"
    return type(exc).__name__


__all__ = [
    "ErrorKind",
    "ChannelError",
    "OversizedPayload",
    "TransportClosed",
    "TransportError",
    "BindError",
    "ConnectError",
    "describe_os_error",
]
