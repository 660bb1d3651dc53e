from __future__ import annotations

import asyncio
from typing import Tuple, Union

from .constants import LENGTH_PREFIX_SIZE, MAX_PAYLOAD_SIZE
from .errors import OversizedPayload, TransportClosed, TransportError, describe_os_error
from .messages import Frame


def encode_frame(payload: Union[bytes, Frame]) -> bytes:
    """Encode a payload as one length byte followed by the payload bytes."""
    if isinstance(payload, Frame):
        data = payload.payload
    else:
        data = bytes(payload)
    if len(data) > MAX_PAYLOAD_SIZE:
        raise OversizedPayload(len(data), MAX_PAYLOAD_SIZE)
    return len(data).to_bytes(LENGTH_PREFIX_SIZE, "big") + data


def decode_frame(data: bytes) -> Tuple[Frame, bytes]:
    """
    Decode the first frame of an in-memory buffer and return it with the
    remaining bytes. A buffer that ends mid-frame is treated like a stream
    that closed mid-frame.
    """
    if len(data) < LENGTH_PREFIX_SIZE:
        raise TransportClosed("stream ended before length prefix")
    length = int.from_bytes(data[:LENGTH_PREFIX_SIZE], "big")
    end = LENGTH_PREFIX_SIZE + length
    if len(data) < end:
        raise TransportClosed(f"stream ended after {len(data) - LENGTH_PREFIX_SIZE} of {length} payload bytes")
    return Frame(payload=bytes(data[LENGTH_PREFIX_SIZE:end])), bytes(data[end:])


async def async_decode_frame(reader: asyncio.StreamReader) -> Frame:
    """Read exactly one frame from the stream."""
    try:
        header = await reader.readexactly(LENGTH_PREFIX_SIZE)
    except asyncio.IncompleteReadError as exc:
        raise TransportClosed("stream ended before length prefix") from exc
    except OSError as exc:
        raise TransportError("read failed", detail=describe_os_error(exc)) from exc

    length = int.from_bytes(header, "big")
    if length == 0:
        return Frame()
    try:
        payload = await reader.readexactly(length)
    except asyncio.IncompleteReadError as exc:
        raise TransportClosed(f"stream ended after {len(exc.partial)} of {length} payload bytes") from exc
    except OSError as exc:
        raise TransportError("read failed", detail=describe_os_error(exc)) from exc
    return Frame(payload=payload)


__all__ = ["encode_frame", "decode_frame", "async_decode_frame"]
