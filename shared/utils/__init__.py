from .common import format_timestamp, payload_size

__all__ = ["format_timestamp", "payload_size"]
