from __future__ import annotations

from enum import StrEnum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import ENCODING, MAX_PAYLOAD_SIZE
from .errors import OversizedPayload


class Frame(BaseModel):
    """One discrete message unit as carried on the wire."""

    model_config = ConfigDict(frozen=True)

    payload: bytes = Field(default=b"", description="Raw payload, at most MAX_PAYLOAD_SIZE bytes")

    @field_validator("payload")
    @classmethod
    def _check_size(cls, value: bytes) -> bytes:
        if len(value) > MAX_PAYLOAD_SIZE:
            raise ValueError(f"payload of {len(value)} bytes exceeds {MAX_PAYLOAD_SIZE}")
        return value

    @classmethod
    def from_payload(cls, payload: Union[bytes, bytearray, memoryview]) -> "Frame":
        data = bytes(payload)
        if len(data) > MAX_PAYLOAD_SIZE:
            raise OversizedPayload(len(data), MAX_PAYLOAD_SIZE)
        return cls(payload=data)

    @classmethod
    def from_text(cls, text: str) -> "Frame":
        return cls.from_payload(text.encode(ENCODING))

    @property
    def size(self) -> int:
        return len(self.payload)

    @property
    def text(self) -> str:
        return self.payload.decode(ENCODING, errors="replace")


class SendSignal(BaseModel):
    """Local intent: transmit one frame to the peer."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["send"] = "send"
    frame: Frame


class QuitSignal(BaseModel):
    """Local intent: end the current session."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["quit"] = "quit"


ControlSignal = Union[SendSignal, QuitSignal]


class OutcomeKind(StrEnum):
    PEER_CLOSED = "peer_closed"
    LOCAL_QUIT = "local_quit"
    TRANSPORT_ERROR = "transport_error"


class ConnectionOutcome(BaseModel):
    """Terminal result of a session."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    detail: Optional[str] = Field(default=None, description="Failure kind for transport errors")

    @classmethod
    def peer_closed(cls) -> "ConnectionOutcome":
        return cls(kind=OutcomeKind.PEER_CLOSED)

    @classmethod
    def local_quit(cls) -> "ConnectionOutcome":
        return cls(kind=OutcomeKind.LOCAL_QUIT)

    @classmethod
    def transport_error(cls, detail: Optional[str] = None) -> "ConnectionOutcome":
        return cls(kind=OutcomeKind.TRANSPORT_ERROR, detail=detail)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.kind.value} ({self.detail})"
        return self.kind.value


__all__ = [
    "Frame",
    "SendSignal",
    "QuitSignal",
    "ControlSignal",
    "OutcomeKind",
    "ConnectionOutcome",
]
