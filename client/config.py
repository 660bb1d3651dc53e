from __future__ import annotations

import os
from typing import Any, Dict

from dotenv import load_dotenv

from shared.protocol.constants import DEFAULT_QUIT_COMMAND

DEFAULT_CONFIG: Dict[str, Any] = {
    "server_host": "127.0.0.1",
    "server_port": 8088,
    "connect_timeout": 10.0,
    "log_level": "INFO",
    "quit_command": DEFAULT_QUIT_COMMAND,
}

CLIENT_CONFIG: Dict[str, Any] = DEFAULT_CONFIG.copy()


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load client configuration from env file/environment variables."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    for key, default_value in DEFAULT_CONFIG.items():
        env_key = f"CLIENT_{key.upper()}"
        value = os.getenv(env_key, default_value)
        CLIENT_CONFIG[key] = _coerce_type(value, type(default_value))

    CLIENT_CONFIG["log_level"] = CLIENT_CONFIG["log_level"].upper()
    validate_config(CLIENT_CONFIG)
    return CLIENT_CONFIG


def _coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def validate_config(config: Dict[str, Any]) -> None:
    if not (1 <= int(config["server_port"]) <= 65535):
        raise ConfigError("server_port must be between 1 and 65535")
    if config["connect_timeout"] <= 0:
        raise ConfigError("connect_timeout must be positive")
    if not config["quit_command"].strip():
        raise ConfigError("quit_command must not be empty")


def get(key: str, default: Any = None) -> Any:
    return CLIENT_CONFIG.get(key, default)


__all__ = ["CLIENT_CONFIG", "DEFAULT_CONFIG", "ConfigError", "get", "load_config", "validate_config"]
