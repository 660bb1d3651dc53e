from __future__ import annotations

import asyncio
import errno
import logging
import socket
from collections.abc import Awaitable, Callable
from typing import Optional, Protocol, Tuple

from shared.core import Session
from shared.protocol import BindError, ConnectionOutcome, TransportError
from shared.protocol.errors import describe_os_error

logger = logging.getLogger(__name__)

SessionHandler = Callable[[Session], Awaitable[ConnectionOutcome]]
StreamPair = Tuple[asyncio.StreamReader, asyncio.StreamWriter, str]

# accept() failures caused by momentary resource pressure or by a peer that
# vanished before we got to it
TRANSIENT_ACCEPT_ERRNOS = frozenset(
    {
        errno.EMFILE,
        errno.ENFILE,
        errno.ENOBUFS,
        errno.ENOMEM,
        errno.ECONNABORTED,
        errno.EPROTO,
        errno.EAGAIN,
        errno.EINTR,
    }
)


class Acceptor(Protocol):
    def bind(self) -> None: ...

    async def accept(self) -> StreamPair: ...

    def close(self) -> None: ...


class TcpAcceptor:
    """Listening TCP socket that hands out one accepted stream per call."""

    def __init__(self, host: str, port: int, backlog: int = 5) -> None:
        self.host = host
        self.port = port
        self.backlog = backlog
        self._sock: Optional[socket.socket] = None

    @property
    def address(self) -> Tuple[str, int]:
        """Bound address; reflects the real port when bound to port 0."""
        if self._sock is None:
            return self.host, self.port
        host, port = self._sock.getsockname()[:2]
        return host, port

    def bind(self) -> None:
        try:
            sock = socket.create_server((self.host, self.port), backlog=self.backlog)
        except OSError as exc:
            raise BindError(f"cannot listen on {self.host}:{self.port}", detail=describe_os_error(exc)) from exc
        sock.setblocking(False)
        self._sock = sock

    async def accept(self) -> StreamPair:
        if self._sock is None:
            raise RuntimeError("acceptor is not bound")
        loop = asyncio.get_running_loop()
        conn, addr = await loop.sock_accept(self._sock)
        try:
            reader, writer = await asyncio.open_connection(sock=conn)
        except BaseException:
            conn.close()
            raise
        return reader, writer, f"{addr[0]}:{addr[1]}"

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


class Listener:
    """
    Serves one peer at a time.

    The next ``accept`` is only issued after the handler for the current
    session has returned, so at most one session exists at any moment and
    connection attempts made meanwhile wait in the socket backlog.
    """

    def __init__(
        self,
        acceptor: Acceptor,
        handler: SessionHandler,
        accept_retry_delay: float = 0.5,
        on_waiting: Optional[Callable[[], None]] = None,
    ) -> None:
        self.acceptor = acceptor
        self.handler = handler
        self.accept_retry_delay = accept_retry_delay
        self.on_waiting = on_waiting
        self.sessions_served = 0

    async def serve(self) -> None:
        self.acceptor.bind()
        logger.info("Listening for a peer")
        try:
            while True:
                if self.on_waiting is not None:
                    self.on_waiting()
                try:
                    reader, writer, peername = await self.acceptor.accept()
                except OSError as exc:
                    if exc.errno in TRANSIENT_ACCEPT_ERRNOS:
                        logger.warning("Accept failed, retrying in %ss: %s", self.accept_retry_delay, exc)
                        await asyncio.sleep(self.accept_retry_delay)
                        continue
                    raise TransportError("accept failed", detail=describe_os_error(exc)) from exc

                logger.info("Peer %s connected", peername)
                outcome = await self._run_session(Session(reader, writer, peername))
                self.sessions_served += 1
                logger.info("Session with %s ended: %s", peername, outcome)
        finally:
            self.acceptor.close()

    async def _run_session(self, session: Session) -> ConnectionOutcome:
        async with session:
            return await self.handler(session)


__all__ = ["Acceptor", "TcpAcceptor", "Listener", "SessionHandler", "TRANSIENT_ACCEPT_ERRNOS"]
