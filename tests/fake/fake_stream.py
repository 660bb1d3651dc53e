import asyncio
import errno
from typing import List, Optional, Sequence, Tuple, Union

from shared.protocol import ConnectionOutcome, ControlSignal, Frame


class FakeWriter:
    """
    In-memory stand-in for asyncio.StreamWriter.

    Written bytes land in ``buffer``. Closing feeds EOF to the linked reader,
    like a real transport does once it is torn down.
    """

    def __init__(
        self,
        reader: Optional[asyncio.StreamReader] = None,
        peername: Tuple[str, int] = ("127.0.0.1", 40000),
        fail_with: Optional[BaseException] = None,
    ) -> None:
        self.reader = reader
        self.peername = peername
        self.fail_with = fail_with
        self.buffer = bytearray()
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def write(self, data: bytes) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.buffer.extend(data)

    async def drain(self) -> None:
        return None

    def close(self) -> None:
        self.close_calls += 1
        if self.reader is not None and not self.reader.at_eof():
            self.reader.feed_eof()

    def is_closing(self) -> bool:
        return self.closed

    async def wait_closed(self) -> None:
        return None

    def get_extra_info(self, name, default=None):
        if name == "peername":
            return self.peername
        return default


class ScriptedInput:
    """Replays the same signals for every session, optionally waiting afterwards."""

    def __init__(self, *signals: ControlSignal, hold: bool = False) -> None:
        self.script = list(signals)
        self.hold = hold
        self.sessions = 0
        self.cancelled = False

    async def signals(self):
        self.sessions += 1
        for signal in self.script:
            yield signal
        if self.hold:
            try:
                await asyncio.get_running_loop().create_future()
            except asyncio.CancelledError:
                self.cancelled = True
                raise


class RecordingDisplay:
    def __init__(self) -> None:
        self.frames: List[Frame] = []
        self.notices: List[str] = []
        self.received = asyncio.Event()

    async def deliver(self, frame: Frame) -> None:
        self.frames.append(frame)
        self.received.set()

    def notice(self, text: str) -> None:
        self.notices.append(text)


AcceptStep = Union[Tuple[asyncio.StreamReader, FakeWriter, str], OSError]


class FakeAcceptor:
    """
    Hands out scripted connections (or accept errors) in order and records
    every call. Once the script runs out, accept fails with EBADF as if the
    listening socket had been closed under it.
    """

    def __init__(self, steps: Sequence[AcceptStep] = ()) -> None:
        self.steps = list(steps)
        self.calls: List[str] = []

    def bind(self) -> None:
        self.calls.append("bind")

    async def accept(self):
        self.calls.append("accept")
        if not self.steps:
            raise OSError(errno.EBADF, "Bad file descriptor")
        step = self.steps.pop(0)
        if isinstance(step, OSError):
            raise step
        return step

    def close(self) -> None:
        self.calls.append("close")


def make_stream(data: bytes = b"", eof: bool = False, **writer_kwargs) -> Tuple[asyncio.StreamReader, FakeWriter]:
    reader = asyncio.StreamReader()
    if data:
        reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader, FakeWriter(reader=reader, **writer_kwargs)


def recording_handler(log: List[str], outcome: Optional[ConnectionOutcome] = None):
    async def handler(session):
        log.append(f"handle:{session.peername}")
        return outcome or ConnectionOutcome.peer_closed()

    return handler
