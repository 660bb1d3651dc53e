from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import Optional, Union

from shared.protocol import (
    ConnectionOutcome,
    Frame,
    TransportClosed,
    TransportError,
    async_decode_frame,
    encode_frame,
)
from shared.protocol.errors import describe_os_error

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    CONNECTED = "connected"
    CLOSING = "closing"
    CLOSED = "closed"


class Session:
    """
    One live connection. The session is the only owner of its reader/writer
    pair: every byte to or from the peer goes through ``send``/``receive``.

    The first failure seen by either direction (or an explicit local quit)
    moves the session to ``closing`` and fixes its outcome; ``close`` then
    releases the stream exactly once, whoever calls it.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        peername: Optional[str] = None,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self.peername = peername or str(writer.get_extra_info("peername"))
        self.state = SessionState.CONNECTED
        self.outcome: Optional[ConnectionOutcome] = None
        self._closing = asyncio.Event()
        self._closed = asyncio.Event()
        self._releasing = False

    async def __aenter__(self) -> "Session":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    def begin_closing(self, outcome: ConnectionOutcome) -> bool:
        """Record ``outcome`` and enter ``closing``. Only the first call has any effect."""
        if self.state is not SessionState.CONNECTED:
            return False
        self.outcome = outcome
        self.state = SessionState.CLOSING
        self._closing.set()
        logger.debug("Session with %s closing: %s", self.peername, outcome)
        return True

    async def wait_closing(self) -> None:
        await self._closing.wait()

    async def send(self, payload: Union[bytes, Frame]) -> None:
        data = encode_frame(payload)
        if not self.is_connected:
            raise TransportClosed(f"session with {self.peername} is {self.state.value}")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as exc:
            detail = describe_os_error(exc)
            self.begin_closing(ConnectionOutcome.transport_error(detail))
            raise TransportError("write failed", detail=detail) from exc
        logger.debug("Sent %s-byte frame to %s", len(data) - 1, self.peername)

    async def receive(self) -> Frame:
        if not self.is_connected:
            raise TransportClosed(f"session with {self.peername} is {self.state.value}")
        try:
            frame = await async_decode_frame(self._reader)
        except TransportClosed:
            self.begin_closing(ConnectionOutcome.peer_closed())
            raise
        except TransportError as exc:
            self.begin_closing(ConnectionOutcome.transport_error(exc.detail))
            raise
        logger.debug("Received %s-byte frame from %s", frame.size, self.peername)
        return frame

    async def close(self) -> None:
        self.begin_closing(ConnectionOutcome.local_quit())
        if self._releasing:
            await self._closed.wait()
            return
        self._releasing = True
        try:
            self._writer.close()
            await self._writer.wait_closed()
        except OSError as exc:
            logger.debug("Error during writer cleanup for %s: %s", self.peername, exc)
        finally:
            self.state = SessionState.CLOSED
            self._closed.set()
            logger.debug("Session with %s closed", self.peername)


__all__ = ["Session", "SessionState"]
