"""Entry point for `python -m containerlog` / `containerlog`.

Decodes container log files and prints one JSON object per message:

    containerlog                          Read files of the containers in config.toml
    containerlog FILE [FILE ...]          Read the given files
    containerlog --stream stderr FILE     Only stderr lines
    containerlog --concat-partial FILE    Join lines the runtime split
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import TextIO

from containerlog.config import ContainersConfig, get_settings
from containerlog.decoder import DockerJSONDecoder
from containerlog.errors import EndOfStream, ParseError
from containerlog.input import container_log_paths
from containerlog.logger import logger, set_level
from containerlog.reader import open_reader
from containerlog.types import STREAM_NAMES, Message


def format_message(message: Message, source: str, offset: int) -> str:
    record = {
        "@timestamp": message.ts.isoformat(),
        "stream": message.stream,
        "message": message.content.decode("utf-8", errors="replace").rstrip("\r\n"),
        "source": source,
        "offset": offset,
    }
    return json.dumps(record, ensure_ascii=False)


def decode_file(path: Path, config: ContainersConfig, out: TextIO) -> int:
    """Write every decoded message of ``path`` to ``out``. Returns the message count."""
    count = 0
    with open_reader(path) as reader:
        decoder = DockerJSONDecoder.from_config(reader, config)
        while True:
            try:
                message = decoder.next()
            except EndOfStream:
                break
            except ParseError as exc:
                logger.warning(
                    "Skipping unparseable log line",
                    source=str(path),
                    offset=reader.offset,
                    error=str(exc),
                )
                continue
            out.write(format_message(message, str(path), reader.offset) + "\n")
            count += 1
    logger.debug("Finished log file", source=str(path), messages=count)
    return count


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="containerlog",
        description="Decode Docker JSON and CRI container log files",
    )
    parser.add_argument("files", nargs="*", type=Path, help="Log files (default: from config)")
    parser.add_argument(
        "--stream",
        choices=STREAM_NAMES,
        default=None,
        help="Only emit lines from this stream (default: containers.stream)",
    )
    parser.add_argument(
        "--concat-partial",
        action="store_true",
        default=None,
        help="Join partial lines split by the runtime (default: containers.concat_partial)",
    )
    args = parser.parse_args(argv)

    s = get_settings()
    if "LOG_LEVEL" not in os.environ:
        set_level(s.logging.level)

    overrides = {}
    if args.stream is not None:
        overrides["stream"] = args.stream
    if args.concat_partial is not None:
        overrides["concat_partial"] = args.concat_partial
    config = s.containers.model_copy(update=overrides)

    if args.files:
        paths = args.files
    else:
        try:
            paths = container_log_paths(config)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    if not paths:
        print("Error: no container log files found", file=sys.stderr)
        return 1

    for path in paths:
        decode_file(path, config, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
