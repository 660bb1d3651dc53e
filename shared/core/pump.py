from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Optional, Protocol

from shared.protocol import ChannelError, ConnectionOutcome, ControlSignal, Frame, QuitSignal

from .session import Session

logger = logging.getLogger(__name__)


class InputSource(Protocol):
    """Produces the local control signals for one session at a time."""

    def signals(self) -> AsyncIterator[ControlSignal]: ...


class Display(Protocol):
    """Presents frames delivered by the peer, plus local status lines."""

    async def deliver(self, frame: Frame) -> None: ...

    def notice(self, text: str) -> None: ...


class DuplexPump:
    """
    Runs the outbound (local input -> peer) and inbound (peer -> display)
    sides of a session as two tasks.

    Whichever side stops first ends the pump: the other task is cancelled
    straight away, so neither a pending socket read nor a pending input wait
    can keep the session alive. Quit, end of input, peer close and transport
    failures all leave through that same path, and the session is closed
    before ``run`` returns its outcome.
    """

    def __init__(self, session: Session, inputs: InputSource, display: Display) -> None:
        self.session = session
        self.inputs = inputs
        self.display = display

    async def run(self) -> ConnectionOutcome:
        outbound = asyncio.create_task(self._outbound(), name="pump-outbound")
        inbound = asyncio.create_task(self._inbound(), name="pump-inbound")
        tasks = (outbound, inbound)
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self.session.close()

        error = _first_error(done)
        if error is not None:
            raise error
        assert self.session.outcome is not None
        logger.debug("Pump for %s finished: %s", self.session.peername, self.session.outcome)
        return self.session.outcome

    async def _outbound(self) -> None:
        signals = self.inputs.signals()
        try:
            async for signal in signals:
                if isinstance(signal, QuitSignal):
                    break
                try:
                    await self.session.send(signal.frame)
                except ChannelError as exc:
                    logger.debug("Outbound side for %s stopped: %s", self.session.peername, exc)
                    return
        finally:
            aclose = getattr(signals, "aclose", None)
            if aclose is not None:
                await aclose()
        self.session.begin_closing(ConnectionOutcome.local_quit())

    async def _inbound(self) -> None:
        while True:
            try:
                frame = await self.session.receive()
            except ChannelError as exc:
                logger.debug("Inbound side for %s stopped: %s", self.session.peername, exc)
                return
            await self.display.deliver(frame)


def _first_error(done) -> Optional[BaseException]:
    for task in done:
        if not task.cancelled() and task.exception() is not None:
            return task.exception()
    return None


__all__ = ["DuplexPump", "InputSource", "Display"]
