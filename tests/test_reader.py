"""Tests for LineReader and open_reader.

Offsets are what a caller would persist to resume a file, so they must count
every byte consumed, including newlines and truncated tails.
"""

from __future__ import annotations

import io

import pytest
from conftest import docker_line

from containerlog.decoder import DockerJSONDecoder
from containerlog.errors import EndOfStream
from containerlog.reader import LineReader, open_reader
from containerlog.types import Reader


class TestLineReader:
    def test_satisfies_reader_protocol(self):
        assert isinstance(LineReader(io.BytesIO(b"")), Reader)

    def test_returns_lines_with_newline(self):
        reader = LineReader(io.BytesIO(b"one\ntwo\n"))
        first = reader.next()
        second = reader.next()
        assert first.content == b"one\n"
        assert second.content == b"two\n"
        assert first.size == 4
        assert first.ts.tzinfo is not None

    def test_last_line_without_newline(self):
        reader = LineReader(io.BytesIO(b"one\ntail"))
        reader.next()
        assert reader.next().content == b"tail"

    def test_end_of_stream(self):
        reader = LineReader(io.BytesIO(b"x\n"))
        reader.next()
        with pytest.raises(EndOfStream):
            reader.next()
        with pytest.raises(EndOfStream):
            reader.next()

    def test_offset_tracks_consumed_bytes(self):
        reader = LineReader(io.BytesIO(b"one\ntwo\n"))
        assert reader.offset == 0
        reader.next()
        assert reader.offset == 4
        reader.next()
        assert reader.offset == 8

    def test_max_bytes_truncates_content_but_not_offset(self):
        reader = LineReader(io.BytesIO(b"abcdefgh\nxy\n"), max_bytes=4)
        msg = reader.next()
        assert msg.content == b"abcd"
        assert msg.size == 9
        assert reader.offset == 9
        assert reader.next().content == b"xy\n"

    def test_rejects_non_positive_max_bytes(self):
        with pytest.raises(ValueError):
            LineReader(io.BytesIO(b""), max_bytes=0)


class TestOpenReader:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "c-json.log"
        path.write_bytes(docker_line("a\n") + docker_line("b\n"))
        with open_reader(path) as reader:
            assert [m.content for m in DockerJSONDecoder(reader)] == [b"a\n", b"b\n"]
            assert reader.offset == path.stat().st_size

    def test_resumes_from_offset(self, tmp_path):
        first = docker_line("a\n")
        path = tmp_path / "c-json.log"
        path.write_bytes(first + docker_line("b\n"))
        with open_reader(path, offset=len(first)) as reader:
            assert DockerJSONDecoder(reader).next().content == b"b\n"
            assert reader.offset == path.stat().st_size

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            with open_reader(tmp_path / "nope.log"):
                pass
