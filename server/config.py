from __future__ import annotations

import os
from typing import Any, Dict

from dotenv import load_dotenv

from shared.protocol.constants import DEFAULT_QUIT_COMMAND

DEFAULT_SERVER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": 8088,
    "backlog": 5,
    "accept_retry_delay": 0.5,
    "log_level": "INFO",
    "quit_command": DEFAULT_QUIT_COMMAND,
}

SERVER_CONFIG = DEFAULT_SERVER_CONFIG.copy()


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


def load_server_config(env_path: str = ".env") -> Dict[str, Any]:
    if os.path.exists(env_path):
        load_dotenv(env_path)
    try:
        SERVER_CONFIG["host"] = os.getenv("SERVER_HOST", SERVER_CONFIG["host"])
        SERVER_CONFIG["port"] = int(os.getenv("SERVER_PORT", SERVER_CONFIG["port"]))
        SERVER_CONFIG["backlog"] = int(os.getenv("SERVER_BACKLOG", SERVER_CONFIG["backlog"]))
        SERVER_CONFIG["accept_retry_delay"] = float(
            os.getenv("SERVER_ACCEPT_RETRY_DELAY", SERVER_CONFIG["accept_retry_delay"])
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid server setting: {exc}") from exc
    SERVER_CONFIG["log_level"] = os.getenv("SERVER_LOG_LEVEL", SERVER_CONFIG["log_level"]).upper()
    SERVER_CONFIG["quit_command"] = os.getenv("SERVER_QUIT_COMMAND", SERVER_CONFIG["quit_command"])
    validate_server_config(SERVER_CONFIG)
    return SERVER_CONFIG


def validate_server_config(config: Dict[str, Any]) -> None:
    if not (0 <= int(config["port"]) <= 65535):
        raise ConfigError("port must be between 0 and 65535")
    if config["backlog"] < 1:
        raise ConfigError("backlog must be positive")
    if config["accept_retry_delay"] < 0:
        raise ConfigError("accept_retry_delay must not be negative")
    if not config["quit_command"].strip():
        raise ConfigError("quit_command must not be empty")


__all__ = ["SERVER_CONFIG", "DEFAULT_SERVER_CONFIG", "ConfigError", "load_server_config", "validate_server_config"]
