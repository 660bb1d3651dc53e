from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from server.config import SERVER_CONFIG, ConfigError, load_server_config, validate_server_config
from server.core import Listener, TcpAcceptor
from shared.core import DuplexPump, Session
from shared.protocol import BindError, ConnectionOutcome, TransportError
from shared.ui import ConsoleDisplay, ConsoleInput

logger = logging.getLogger(__name__)


async def run_server(config: Optional[dict] = None) -> None:
    config = config or SERVER_CONFIG
    display = ConsoleDisplay("Client")
    inputs = ConsoleInput(quit_command=config["quit_command"], quit_on_eof=False, display=display)

    async def handle_session(session: Session) -> ConnectionOutcome:
        display.notice(f"Client {session.peername} connected")
        outcome = await DuplexPump(session, inputs, display).run()
        display.notice(f"Client {session.peername} disconnected ({outcome})")
        return outcome

    acceptor = TcpAcceptor(config["host"], config["port"], backlog=config["backlog"])
    listener = Listener(
        acceptor,
        handle_session,
        accept_retry_delay=config["accept_retry_delay"],
        on_waiting=lambda: display.notice("Waiting for client..."),
    )
    await listener.serve()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Wait for one chat peer at a time.")
    ap.add_argument("host", nargs="?", help="address to bind (default from SERVER_HOST)")
    ap.add_argument("port", nargs="?", type=int, help="port to bind (default from SERVER_PORT)")
    ap.add_argument("--log-level", help="logging level, e.g. DEBUG")
    return ap.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        load_server_config()
        if args.host:
            SERVER_CONFIG["host"] = args.host
        if args.port is not None:
            SERVER_CONFIG["port"] = args.port
        if args.log_level:
            SERVER_CONFIG["log_level"] = args.log_level.upper()
        validate_server_config(SERVER_CONFIG)
    except ConfigError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    logging.basicConfig(level=SERVER_CONFIG["log_level"])
    try:
        asyncio.run(run_server(SERVER_CONFIG))
    except BindError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc
    except TransportError as exc:
        logger.error("Listener stopped: %s", exc)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
