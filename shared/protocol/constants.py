"""Protocol-wide constants shared by client and server."""

ENCODING = "utf-8"
LENGTH_PREFIX_SIZE = 1  # single unsigned byte
MAX_PAYLOAD_SIZE = 255  # largest value the length prefix can carry
DEFAULT_QUIT_COMMAND = "/quit"

__all__ = [
    "ENCODING",
    "LENGTH_PREFIX_SIZE",
    "MAX_PAYLOAD_SIZE",
    "DEFAULT_QUIT_COMMAND",
]
