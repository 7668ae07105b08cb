"""Line reader over container log files.

Produces one raw :class:`Message` per physical line, newline included, and
keeps a byte offset so callers can resume a file where they left off.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from containerlog.errors import EndOfStream
from containerlog.types import Message


class LineReader:
    """Read newline-terminated records from a binary file object.

    ``max_bytes`` caps the content kept per line; the rest of an oversized
    line is consumed and counted in ``size`` but not returned.
    """

    def __init__(self, fileobj: BinaryIO, max_bytes: int | None = None, offset: int = 0) -> None:
        if max_bytes is not None and max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        self._file = fileobj
        self._max_bytes = max_bytes
        self.offset = offset

    def next(self) -> Message:
        line = self._file.readline()
        if not line:
            raise EndOfStream()
        size = len(line)
        if self._max_bytes is not None and size > self._max_bytes:
            line = line[: self._max_bytes]
        self.offset += size
        return Message(ts=datetime.now(UTC), content=line, size=size)


@contextmanager
def open_reader(
    path: str | Path, offset: int = 0, max_bytes: int | None = None
) -> Iterator[LineReader]:
    """Open ``path`` at ``offset`` and yield a LineReader; the file is closed on exit."""
    with open(path, "rb") as f:
        if offset:
            f.seek(offset)
        yield LineReader(f, max_bytes=max_bytes, offset=offset)
