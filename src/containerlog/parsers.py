"""Format parsers for container runtime log lines.

Two on-disk encodings are supported:

  - Docker JSON-lines (json-file logging driver)::

      {"log":"1:M 09 Nov 13:27:36.276 # User requested shutdown...\\n","stream":"stdout","time":"2017-11-09T13:27:36.277747246Z"}

  - CRI plain text (containerd, CRI-O)::

      2017-09-12T22:32:21.212861448Z stdout 2017-09-12 22:32:21.212 [INFO][88] table.go 710: Invalidating dataplane cache

Each parser takes a raw :class:`Message` and returns a new message holding only
the payload, the log time and a ``stream`` field, plus an ``is_partial`` flag.
The raw message is never modified.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_core import from_json

from containerlog.errors import DecodeError, FormatError, TimestampError
from containerlog.types import Message

_RFC3339_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(?:\.([0-9]+))?(Z|[+-][0-9]{2}:[0-9]{2})"
)

ParseFn = Callable[[Message], tuple[Message, bool]]


def parse_rfc3339(value: str) -> datetime:
    """Parse a strict RFC3339 timestamp into an aware datetime.

    Fractions beyond microseconds are truncated.
    """
    m = _RFC3339_RE.fullmatch(value)
    if m is None:
        raise TimestampError(f"invalid RFC3339 timestamp: {value!r}")
    year, month, day, hour, minute, second, frac, offset = m.groups()
    micros = int((frac or "0")[:6].ljust(6, "0"))
    try:
        if offset == "Z":
            tz = UTC
        else:
            sign = -1 if offset[0] == "-" else 1
            delta = timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6]))
            tz = timezone(sign * delta)
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tz
        )
    except ValueError as exc:
        raise TimestampError(f"invalid RFC3339 timestamp: {value!r} ({exc})") from exc


def is_partial_log(log: bytes) -> bool:
    """Whether a decoded Docker ``log`` value continues in the next line.

    The runtime splits long lines (16k) and only the final chunk ends in a
    newline. A trailing escaped backslash before the newline is also treated as
    a split point.
    """
    return len(log) > 2 and (log[-1:] != b"\n" or log[-2:-1] == b"\\")


# ---------------------------------------------------------------------------
# Docker JSON
# ---------------------------------------------------------------------------


class DockerJSONRecord(BaseModel):
    """One line of the json-file logging driver. Extra keys (``attrs``) are ignored."""

    model_config = ConfigDict(strict=True, extra="ignore")

    time: str
    log: str
    stream: str


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def _stream_tag(text: str) -> str:
    """Best-effort ``stream`` value of a line that failed validation."""
    try:
        data = from_json(text)
    except ValueError:
        return ""
    if isinstance(data, dict) and isinstance(data.get("stream"), str):
        return data["stream"]
    return ""


def parse_docker_json(message: Message) -> tuple[Message, bool]:
    """Parse a Docker JSON-lines record.

    Raises DecodeError for malformed JSON or missing/mistyped fields and
    TimestampError for a bad ``time`` value. Both carry the ``stream`` tag
    whenever the line held a readable one. Invalid UTF-8 is replaced with
    U+FFFD before decoding.
    """
    text = message.content.decode("utf-8", errors="replace")
    try:
        record = DockerJSONRecord.model_validate_json(text)
    except ValidationError as exc:
        raise DecodeError(
            f"decoding docker JSON: {_describe(exc)}", stream=_stream_tag(text)
        ) from exc

    try:
        ts = parse_rfc3339(record.time)
    except TimestampError as exc:
        raise TimestampError(
            f"parsing docker timestamp: {exc.reason}", stream=record.stream
        ) from exc

    log = record.log.encode("utf-8", errors="replace")
    parsed = replace(message, ts=ts, content=log, fields=dict(message.fields))
    parsed.add_fields({"stream": record.stream})
    return parsed, is_partial_log(log)


# ---------------------------------------------------------------------------
# CRI
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CRIRecord:
    timestamp: datetime
    stream: str
    log: bytes


def split_cri(content: bytes) -> CRIRecord:
    """Split a CRI line into timestamp, stream tag and payload."""
    fields = content.split(b" ", 2)
    if len(fields) < 3:
        raise FormatError("invalid CRI log: expected '<timestamp> <stream> <log>'")
    raw_ts, stream, log = fields
    try:
        ts = parse_rfc3339(raw_ts.decode("ascii"))
    except (UnicodeDecodeError, TimestampError) as exc:
        raise TimestampError(f"parsing CRI timestamp: {raw_ts!r}") from exc
    return CRIRecord(timestamp=ts, stream=stream.decode("utf-8", errors="replace"), log=log)


def parse_cri(message: Message) -> tuple[Message, bool]:
    """Parse a CRI plain-text record. Never reports a partial line."""
    record = split_cri(message.content)
    parsed = replace(message, ts=record.timestamp, content=record.log, fields=dict(message.fields))
    parsed.add_fields({"stream": record.stream})
    return parsed, False


# ---------------------------------------------------------------------------
# Format selection
# ---------------------------------------------------------------------------


class LogFormat(Enum):
    DOCKER_JSON = "docker-json"
    CRI = "cri"


_PARSERS: dict[LogFormat, ParseFn] = {
    LogFormat.DOCKER_JSON: parse_docker_json,
    LogFormat.CRI: parse_cri,
}


def detect_format(content: bytes) -> LogFormat:
    """Docker JSON lines always start with ``{``; anything else is treated as CRI."""
    if content.startswith(b"{"):
        return LogFormat.DOCKER_JSON
    return LogFormat.CRI


def get_parser(fmt: LogFormat) -> ParseFn:
    return _PARSERS[fmt]
