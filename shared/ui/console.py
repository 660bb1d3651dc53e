from __future__ import annotations

import asyncio
import logging
import sys
import threading
from typing import AsyncIterator, Optional, TextIO

from shared.core.pump import Display
from shared.protocol import DEFAULT_QUIT_COMMAND, MAX_PAYLOAD_SIZE, ControlSignal, Frame, QuitSignal, SendSignal
from shared.utils.common import format_timestamp, payload_size

logger = logging.getLogger(__name__)


class ConsoleDisplay:
    """Prints peer messages and status lines to the terminal."""

    def __init__(self, peer_label: str, stream: Optional[TextIO] = None) -> None:
        self.peer_label = peer_label
        self.stream = stream

    async def deliver(self, frame: Frame) -> None:
        self._write(f"{self.peer_label} {format_timestamp()}: {frame.text}")

    def notice(self, text: str) -> None:
        self._write(text)

    def _write(self, line: str) -> None:
        print(line, file=self.stream or sys.stdout, flush=True)


class ConsoleInput:
    """
    Turns terminal lines into control signals.

    Lines are read on a daemon thread and handed to the event loop through a
    queue, so a blocked ``readline`` never keeps the process alive and a
    session can end while the user is mid-line. Lines typed while no session
    is running are dropped when the next session starts.
    """

    def __init__(
        self,
        quit_command: str = DEFAULT_QUIT_COMMAND,
        quit_on_eof: bool = True,
        stream: Optional[TextIO] = None,
        display: Optional[Display] = None,
    ) -> None:
        self.quit_command = quit_command
        self.quit_on_eof = quit_on_eof
        self.stream = stream
        self.display = display
        self._queue: Optional[asyncio.Queue[Optional[str]]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._eof = False

    async def signals(self) -> AsyncIterator[ControlSignal]:
        queue = self._ensure_reader()
        self._discard_pending(queue)
        while True:
            if self._eof:
                if self.quit_on_eof:
                    yield QuitSignal()
                    return
                # stdin is gone: the session stays receive-only until it ends
                await asyncio.get_running_loop().create_future()
            line = await queue.get()
            if line is None:
                self._eof = True
                continue
            signal = self.parse(line)
            if signal is not None:
                yield signal

    def parse(self, line: str) -> Optional[ControlSignal]:
        text = line.rstrip("\r\n")
        if not text.strip():
            return None
        if text.strip() == self.quit_command:
            return QuitSignal()
        size = payload_size(text)
        if size > MAX_PAYLOAD_SIZE:
            logger.warning("Rejected %s-byte message (limit %s)", size, MAX_PAYLOAD_SIZE)
            if self.display is not None:
                self.display.notice(f"Message too long ({size} bytes, limit {MAX_PAYLOAD_SIZE}); not sent")
            return None
        return SendSignal(frame=Frame.from_text(text))

    def _ensure_reader(self) -> asyncio.Queue[Optional[str]]:
        if self._queue is None:
            self._loop = asyncio.get_running_loop()
            self._queue = asyncio.Queue()
            self._thread = threading.Thread(target=self._read_lines, name="console-input", daemon=True)
            self._thread.start()
        return self._queue

    def _read_lines(self) -> None:
        stream = self.stream or sys.stdin
        try:
            for line in stream:
                self._push(line)
        finally:
            self._push(None)

    def _push(self, line: Optional[str]) -> None:
        assert self._loop is not None and self._queue is not None
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, line)
        except RuntimeError:
            # event loop already closed, process is shutting down
            pass

    def _discard_pending(self, queue: asyncio.Queue[Optional[str]]) -> None:
        dropped = 0
        while not queue.empty():
            line = queue.get_nowait()
            if line is None:
                self._eof = True
            else:
                dropped += 1
        if dropped:
            logger.info("Discarded %s line(s) typed while no peer was connected", dropped)


__all__ = ["ConsoleDisplay", "ConsoleInput"]
