from __future__ import annotations

import asyncio
import logging

from shared.core import Display, DuplexPump, InputSource, Session
from shared.protocol import ConnectError, ConnectionOutcome
from shared.protocol.errors import describe_os_error

logger = logging.getLogger(__name__)


async def connect(host: str, port: int, timeout: float = 10.0) -> Session:
    """Make a single connection attempt. Retrying is up to the caller."""
    try:
        reader, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise ConnectError(f"cannot reach {host}:{port}", detail=f"timed out after {timeout}s") from exc
    except OSError as exc:
        raise ConnectError(f"cannot reach {host}:{port}", detail=describe_os_error(exc)) from exc
    logger.info("Connected to %s:%s", host, port)
    return Session(reader, writer, f"{host}:{port}")


async def run_session(session: Session, inputs: InputSource, display: Display) -> ConnectionOutcome:
    async with session:
        outcome = await DuplexPump(session, inputs, display).run()
    logger.info("Session with %s ended: %s", session.peername, outcome)
    return outcome


__all__ = ["connect", "run_session"]
