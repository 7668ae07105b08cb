"""Shared test fixtures for containerlog."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from containerlog.config import reset_settings
from containerlog.errors import EndOfStream
from containerlog.types import Message

# ---------------------------------------------------------------------------
# Shared helpers (plain functions, not fixtures; importable by test files)
# ---------------------------------------------------------------------------

READ_TS = datetime(2030, 1, 1, tzinfo=UTC)
LOG_TS = "2017-09-12T22:32:21.212861448Z"


def docker_line(log: str, stream: str = "stdout", time: str = LOG_TS) -> bytes:
    """A json-file driver line as written to disk, trailing newline included."""
    return json.dumps({"log": log, "stream": stream, "time": time}).encode() + b"\n"


def cri_line(log: str, stream: str = "stdout", time: str = LOG_TS) -> bytes:
    return f"{time} {stream} {log}\n".encode()


def raw_message(content: bytes) -> Message:
    return Message(ts=READ_TS, content=content, size=len(content))


class ListReader:
    """Reader that replays scripted lines; exception instances are raised in place.

    Keeps raising EndOfStream once the script is exhausted.
    """

    def __init__(self, items: list[bytes | BaseException]) -> None:
        self._items = list(items)
        self.calls = 0

    def next(self) -> Message:
        self.calls += 1
        if not self._items:
            raise EndOfStream()
        item = self._items.pop(0)
        if isinstance(item, BaseException):
            raise item
        return raw_message(item)


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()
