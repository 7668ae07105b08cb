"""Data models shared by readers, parsers and the decoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Protocol, runtime_checkable

StreamName = Literal["all", "stdout", "stderr"]
STREAM_NAMES: tuple[str, ...] = ("all", "stdout", "stderr")


@dataclass
class Message:
    """One log line.

    Readers produce it with the raw line as ``content``; parsers return a copy
    with the payload, the log time and a ``stream`` field.
    """

    ts: datetime
    content: bytes
    size: int = 0  # raw bytes consumed from the source, including framing
    fields: dict[str, Any] = field(default_factory=dict)

    def add_fields(self, fields: dict[str, Any]) -> None:
        self.fields.update(fields)

    @property
    def stream(self) -> str:
        """Stream tag set by a parser, or "" for an unparsed record."""
        return self.fields.get("stream", "")


@runtime_checkable
class Reader(Protocol):
    """Pull-based source of raw records.

    ``next()`` raises :class:`~containerlog.errors.EndOfStream` once the input
    is exhausted. Any other exception is an upstream failure.
    """

    def next(self) -> Message: ...
