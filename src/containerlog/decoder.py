"""Stream decoder for container runtime log files.

Pulls raw lines from a :class:`~containerlog.types.Reader`, parses each one as
Docker JSON or CRI depending on its first byte, drops lines from the unwanted
stream, and joins runs of partial Docker lines back into the original line.

One decoder instance owns its reader and partial buffer; it is not meant to be
shared between threads.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from containerlog.errors import EndOfStream, ParseError
from containerlog.logger import logger
from containerlog.parsers import detect_format, get_parser
from containerlog.types import STREAM_NAMES, Message, Reader, StreamName

if TYPE_CHECKING:
    from containerlog.config import ContainersConfig


class DockerJSONDecoder:
    """Decode container log lines into normalized messages.

    Args:
        reader: source of raw lines.
        stream: ``all``, ``stdout`` or ``stderr``.
        concat_partial: join lines split by the runtime into one message.
    """

    def __init__(
        self, reader: Reader, stream: StreamName = "all", concat_partial: bool = False
    ) -> None:
        if stream not in STREAM_NAMES:
            raise ValueError(f"stream must be one of {', '.join(STREAM_NAMES)}, got {stream!r}")
        self._reader = reader
        self._stream = stream
        self._concat_partial = concat_partial
        self._partial = bytearray()

    @classmethod
    def from_config(cls, reader: Reader, config: ContainersConfig) -> DockerJSONDecoder:
        return cls(reader, stream=config.stream, concat_partial=config.concat_partial)

    @property
    def stream(self) -> str:
        return self._stream

    @property
    def concat_partial(self) -> bool:
        return self._concat_partial

    @property
    def pending(self) -> int:
        """Bytes held from partial lines not yet emitted."""
        return len(self._partial)

    def next(self) -> Message:
        """Return the next complete message.

        EndOfStream and reader failures propagate unchanged; a pending partial
        run is discarded first. A ParseError is raised after filtering and
        reassembly ran for the failed line, with ``err.message`` holding the
        message the line produced.
        """
        while True:
            try:
                raw = self._reader.next()
            except Exception:
                self._discard_partial()
                raise

            error: ParseError | None = None
            try:
                message, is_partial = get_parser(detect_format(raw.content))(raw)
                stream = message.stream
            except ParseError as exc:
                message, is_partial, error = replace(raw, fields=dict(raw.fields)), False, exc
                stream = exc.stream

            # A failed line is kept or dropped by whatever stream tag the parser read
            if self._stream != "all" and stream != self._stream:
                logger.debug(
                    "Skipping line from filtered stream",
                    stream=stream or None,
                    wanted=self._stream,
                    parse_error=str(error) if error else None,
                )
                continue

            if self._concat_partial:
                if is_partial:
                    self._partial += message.content
                    continue
                if self._partial:
                    message.content = bytes(self._partial) + message.content
                    self._partial.clear()

            if error is not None:
                error.message = message
                raise error
            return message

    def _discard_partial(self) -> None:
        if self._partial:
            logger.debug("Discarding unterminated partial line", size=len(self._partial))
            self._partial.clear()

    def __iter__(self) -> DockerJSONDecoder:
        return self

    def __next__(self) -> Message:
        try:
            return self.next()
        except EndOfStream:
            raise StopIteration from None
