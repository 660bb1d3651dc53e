import asyncio

import pytest
from pydantic import ValidationError

from shared.protocol import (
    MAX_PAYLOAD_SIZE,
    ChannelError,
    ErrorKind,
    Frame,
    OversizedPayload,
    TransportClosed,
    async_decode_frame,
    decode_frame,
    encode_frame,
)


def test_encode_writes_length_prefix():
    assert encode_frame(b"hi") == b"\x02hi"
    assert encode_frame(b"") == b"\x00"
    assert encode_frame(Frame(payload=b"abc")) == b"\x03abc"


def test_encode_boundary():
    assert len(encode_frame(b"x" * MAX_PAYLOAD_SIZE)) == MAX_PAYLOAD_SIZE + 1
    with pytest.raises(OversizedPayload) as info:
        encode_frame(b"x" * (MAX_PAYLOAD_SIZE + 1))
    assert info.value.size == 256
    assert info.value.kind is ErrorKind.OVERSIZED_PAYLOAD
    assert isinstance(info.value, ChannelError)


def test_decode_roundtrip_and_remainder():
    for size in (0, 1, 2, 127, 128, 254, 255):
        payload = bytes(i % 251 for i in range(size))
        frame, rest = decode_frame(encode_frame(payload) + b"\x01z")
        assert frame.payload == payload
        assert rest == b"\x01z"


def test_decode_partial_frame_is_closed_stream():
    with pytest.raises(TransportClosed):
        decode_frame(b"")
    with pytest.raises(TransportClosed):
        decode_frame(b"\x05abc")


def test_frame_model_enforces_limit():
    with pytest.raises(ValidationError):
        Frame(payload=b"x" * 256)
    with pytest.raises(OversizedPayload):
        Frame.from_payload(b"x" * 256)
    assert Frame.from_payload(bytearray(b"ok")).payload == b"ok"


def test_frame_is_immutable():
    frame = Frame.from_text("hi")
    with pytest.raises(ValidationError):
        frame.payload = b"changed"
    assert frame.text == "hi"
    assert frame.size == 2


def test_frame_text_replaces_invalid_utf8():
    assert Frame(payload=b"\xffok").text == "�ok"


@pytest.mark.asyncio
async def test_async_decode_reads_frames_in_order():
    reader = asyncio.StreamReader()
    reader.feed_data(b"\x02hi\x00\x03you")
    reader.feed_eof()

    assert (await async_decode_frame(reader)).payload == b"hi"
    assert (await async_decode_frame(reader)).payload == b""
    assert (await async_decode_frame(reader)).payload == b"you"
    with pytest.raises(TransportClosed):
        await async_decode_frame(reader)


@pytest.mark.asyncio
async def test_async_decode_partial_payload_at_eof():
    reader = asyncio.StreamReader()
    reader.feed_data(b"\x05ab")
    reader.feed_eof()

    with pytest.raises(TransportClosed) as info:
        await async_decode_frame(reader)
    assert "2 of 5" in str(info.value)


@pytest.mark.asyncio
async def test_async_decode_waits_for_split_payload():
    reader = asyncio.StreamReader()
    reader.feed_data(b"\x04ab")
    task = asyncio.create_task(async_decode_frame(reader))
    await asyncio.sleep(0)
    assert not task.done()

    reader.feed_data(b"cd")
    frame = await asyncio.wait_for(task, timeout=1)
    assert frame.payload == b"abcd"
