"""
Shared protocol package that centralizes the wire framing, error taxonomy and
value models used by both the listening and the connecting side.
"""

from .constants import DEFAULT_QUIT_COMMAND, ENCODING, LENGTH_PREFIX_SIZE, MAX_PAYLOAD_SIZE
from .errors import (
    BindError,
    ChannelError,
    ConnectError,
    ErrorKind,
    OversizedPayload,
    TransportClosed,
    TransportError,
)
from .framing import async_decode_frame, decode_frame, encode_frame
from .messages import ConnectionOutcome, ControlSignal, Frame, OutcomeKind, QuitSignal, SendSignal

__all__ = [
    "DEFAULT_QUIT_COMMAND",
    "ENCODING",
    "LENGTH_PREFIX_SIZE",
    "MAX_PAYLOAD_SIZE",
    "ErrorKind",
    "ChannelError",
    "OversizedPayload",
    "TransportClosed",
    "TransportError",
    "BindError",
    "ConnectError",
    "encode_frame",
    "decode_frame",
    "async_decode_frame",
    "Frame",
    "SendSignal",
    "QuitSignal",
    "ControlSignal",
    "OutcomeKind",
    "ConnectionOutcome",
]
