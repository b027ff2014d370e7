# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the bundled ByteSource implementations."""

from __future__ import annotations

import io
import socket
from pathlib import Path

import pytest

from bufread import (
    EOF,
    BufferedByteReader,
    InvalidReadArgumentsError,
    MemoryByteSource,
    RawIOByteSource,
    ReaderClosedError,
)
from tests.helpers.byte_source import ByteSourceValidationSuite, SourceFactory, drain


class TestMemoryByteSource(ByteSourceValidationSuite):
    @pytest.fixture
    def make_source(self) -> SourceFactory:
        return MemoryByteSource.from_bytes

    def test_max_fetch_caps_each_read(self) -> None:
        source = MemoryByteSource.from_bytes(b"abcdefgh", max_fetch=3)
        dest = bytearray(8)
        assert source.read_into(dest, 0, 8) == 3
        assert source.read_into(dest, 3, 5) == 3
        assert source.read_into(dest, 6, 2) == 2
        assert dest == b"abcdefgh"
        assert source.read_into(dest, 0, 8) is EOF

    def test_max_fetch_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="max_fetch"):
            MemoryByteSource.from_bytes(b"x", max_fetch=0)

    def test_content_is_copied(self) -> None:
        content = bytearray(b"abc")
        source = MemoryByteSource.from_bytes(content)
        content[0] = ord("z")
        assert source.read_byte() == ord("a")

    def test_feed_after_exhaustion(self) -> None:
        source = MemoryByteSource.from_bytes(b"")
        assert source.read_into(bytearray(2), 0, 2) is EOF
        source.feed(b"hi")
        assert source.remaining == 2
        assert drain(source) == b"hi"

    def test_counts_bulk_fetches(self) -> None:
        source = MemoryByteSource.from_bytes(b"abc")
        _ = drain(source, chunk=2)
        assert source.fetch_count == 3

    def test_bad_window_is_not_counted_as_fetch(self) -> None:
        source = MemoryByteSource.from_bytes(b"abc")
        with pytest.raises(InvalidReadArgumentsError, match="non-negative"):
            source.read_into(bytearray(4), 0, -2)
        assert source.fetch_count == 0
        assert source.remaining == 3

    def test_reads_after_close_raise(self) -> None:
        source = MemoryByteSource.from_bytes(b"abc")
        source.close()
        assert source.closed
        with pytest.raises(ReaderClosedError, match="closed source"):
            source.read_byte()
        with pytest.raises(ReaderClosedError):
            source.read_into(bytearray(1), 0, 1)
        with pytest.raises(ReaderClosedError):
            source.feed(b"more")


class TestRawIOByteSource(ByteSourceValidationSuite):
    @pytest.fixture
    def make_source(self) -> SourceFactory:
        return lambda content: RawIOByteSource(io.BytesIO(content))

    def test_open_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "payload.bin"
        payload = bytes(range(256)) * 4
        path.write_bytes(payload)
        with BufferedByteReader(RawIOByteSource.open(path), 64) as reader:
            assert b"".join(reader) == payload

    def test_open_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            RawIOByteSource.open(tmp_path / "missing.bin")

    def test_close_closes_stream_once(self) -> None:
        stream = io.BytesIO(b"abc")
        source = RawIOByteSource(stream)
        source.close()
        assert stream.closed
        assert source.closed
        source.close()

    def test_offset_past_end_is_not_end_of_data(self) -> None:
        stream = io.BytesIO(b"abc")
        source = RawIOByteSource(stream)
        with pytest.raises(InvalidReadArgumentsError, match="offset 10"):
            source.read_into(bytearray(4), 10, 4)
        assert stream.tell() == 0

    def test_overlong_window_is_not_truncated(self) -> None:
        source = RawIOByteSource(io.BytesIO(b"abcdef"))
        with pytest.raises(InvalidReadArgumentsError, match="exceeds"):
            source.read_into(bytearray(4), 2, 4)

    def test_read_after_close_raises(self) -> None:
        source = RawIOByteSource(io.BytesIO(b"abc"))
        source.close()
        with pytest.raises(ReaderClosedError):
            source.read_into(bytearray(1), 0, 1)

    def test_non_blocking_stream_without_data(self) -> None:
        class _NothingReady(io.RawIOBase):
            def readable(self) -> bool:
                return True

            def readinto(self, buffer: memoryview) -> int | None:  # type: ignore[override]
                return None

        source = RawIOByteSource(_NothingReady())
        with pytest.raises(BlockingIOError):
            source.read_into(bytearray(4), 0, 4)

    def test_stream_errors_propagate(self) -> None:
        class _Broken(io.RawIOBase):
            def readable(self) -> bool:
                return True

            def readinto(self, buffer: memoryview) -> int | None:  # type: ignore[override]
                raise ConnectionAbortedError("link down")

        reader = BufferedByteReader(RawIOByteSource(_Broken()), 8)
        with pytest.raises(ConnectionAbortedError, match="link down"):
            reader.read_byte()

    def test_socket_reads_until_peer_closes(self) -> None:
        left, right = socket.socketpair()
        try:
            right.sendall(b"ping" * 10)
            right.shutdown(socket.SHUT_WR)
            reader = BufferedByteReader(RawIOByteSource.from_socket(left), 16)
            out = bytearray()
            while (value := reader.read_byte()) is not EOF:
                out.append(value)
            reader.close()
            assert bytes(out) == b"ping" * 10
        finally:
            left.close()
            right.close()
