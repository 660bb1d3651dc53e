from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from client.config import CLIENT_CONFIG, ConfigError, load_config, validate_config
from client.core import connect, run_session
from shared.protocol import ConnectError, ConnectionOutcome, OutcomeKind
from shared.ui import ConsoleDisplay, ConsoleInput

logger = logging.getLogger(__name__)


async def run_client(config: Optional[dict] = None) -> ConnectionOutcome:
    config = config or CLIENT_CONFIG
    display = ConsoleDisplay("Server")
    inputs = ConsoleInput(quit_command=config["quit_command"], quit_on_eof=True, display=display)

    session = await connect(config["server_host"], config["server_port"], timeout=config["connect_timeout"])
    display.notice(f"Connected to {session.peername}. Type {config['quit_command']} to leave.")
    outcome = await run_session(session, inputs, display)
    display.notice(f"Disconnected ({outcome})")
    return outcome


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Chat with a waiting server.")
    ap.add_argument("host", nargs="?", help="server host (default from CLIENT_SERVER_HOST)")
    ap.add_argument("port", nargs="?", type=int, help="server port (default from CLIENT_SERVER_PORT)")
    ap.add_argument("--timeout", type=float, help="connect timeout in seconds")
    ap.add_argument("--log-level", help="logging level, e.g. DEBUG")
    return ap.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        load_config()
        if args.host:
            CLIENT_CONFIG["server_host"] = args.host
        if args.port is not None:
            CLIENT_CONFIG["server_port"] = args.port
        if args.timeout is not None:
            CLIENT_CONFIG["connect_timeout"] = args.timeout
        if args.log_level:
            CLIENT_CONFIG["log_level"] = args.log_level.upper()
        validate_config(CLIENT_CONFIG)
    except ConfigError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    logging.basicConfig(level=CLIENT_CONFIG["log_level"])
    try:
        outcome = asyncio.run(run_client(CLIENT_CONFIG))
    except ConnectError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        return
    if outcome.kind is OutcomeKind.TRANSPORT_ERROR:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
