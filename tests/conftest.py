import socket

import pytest

from shared.core import Session
from tests.fake.fake_stream import RecordingDisplay, make_stream


@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def session_factory():
    """Build a Session over an in-memory stream. Must be called inside a running loop."""

    def factory(data: bytes = b"", eof: bool = False, **writer_kwargs):
        reader, writer = make_stream(data, eof, **writer_kwargs)
        return Session(reader, writer, "peer:1"), reader, writer

    return factory


@pytest.fixture
def unused_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
