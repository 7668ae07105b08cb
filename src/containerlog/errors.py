"""Exception hierarchy for container log decoding.

Parser failures carry the message they were raised for, so callers can still
inspect (or forward) the raw line that failed to parse.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from containerlog.types import Message


class ContainerLogError(Exception):
    """Base class for all errors raised by containerlog."""


class EndOfStream(ContainerLogError):
    """Raised by a reader when its input is exhausted."""


class ParseError(ContainerLogError):
    """A raw record could not be interpreted in its detected format.

    ``stream`` is the stream tag the parser managed to read before failing
    ("" when none was read); the decoder filters on it. ``message`` is
    attached by the decoder once filtering and partial reassembly have run for
    the failed record; parsers leave it unset.
    """

    def __init__(self, reason: str, message: Message | None = None, stream: str = "") -> None:
        self.reason = reason
        self.message = message
        self.stream = stream
        super().__init__(reason)


class DecodeError(ParseError):
    """Malformed Docker JSON line, or a required field is missing or mistyped."""


class FormatError(ParseError):
    """CRI line without the three space-delimited fields."""


class TimestampError(ParseError):
    """Timestamp field is not valid RFC3339."""
