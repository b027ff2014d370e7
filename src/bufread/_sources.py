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

"""Concrete byte sources.

Provides ``MemoryByteSource`` for in-memory content and ``RawIOByteSource``
for binary file objects (unbuffered files, socket files, ``io.BytesIO``).
Both satisfy :class:`~bufread.ByteSource` and can sit underneath a
``BufferedByteReader``.
"""

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Self

from ._protocols import EOF, ReadResult, WritableBuffer
from ._window import byte_window
from .errors import ReaderClosedError

__all__ = [
    "MemoryByteSource",
    "RawIOByteSource",
    "SupportsReadinto",
]


class SupportsReadinto(Protocol):
    """Binary stream exposing ``readinto`` and ``close``."""

    def readinto(self, buffer: memoryview, /) -> int | None: ...

    def close(self) -> None: ...


@dataclass(slots=True)
class MemoryByteSource:
    """ByteSource serving bytes held in memory.

    Build instances with :meth:`from_bytes`; ``MemoryByteSource()`` gives an
    empty source to :meth:`feed` later.

    ``max_fetch`` caps how many bytes a single bulk read delivers, which
    mimics pipes and sockets that hand back short reads. ``feed`` appends
    more content, so a source that already reported ``EOF`` resumes
    producing bytes on the next call.
    """

    _data: bytearray = field(default_factory=bytearray)
    _max_fetch: int | None = None
    _offset: int = field(default=0, init=False)
    _fetch_count: int = field(default=0, init=False)
    _closed: bool = field(default=False, init=False)

    @classmethod
    def from_bytes(cls, content: bytes, *, max_fetch: int | None = None) -> Self:
        """Create a source over a copy of ``content``."""

        if max_fetch is not None and max_fetch <= 0:
            msg = f"max_fetch must be positive, got {max_fetch}"
            raise ValueError(msg)
        return cls(_data=bytearray(content), _max_fetch=max_fetch)

    @property
    def remaining(self) -> int:
        """Bytes not yet delivered."""
        return len(self._data) - self._offset

    @property
    def fetch_count(self) -> int:
        """Number of bulk reads served so far."""
        return self._fetch_count

    @property
    def closed(self) -> bool:
        """True if the source has been closed."""
        return self._closed

    def feed(self, content: bytes) -> None:
        """Append ``content`` after the bytes already held."""
        self._check_closed()
        self._data.extend(content)

    def read_byte(self) -> ReadResult:
        """Return the next byte, or ``EOF``."""
        self._check_closed()
        if self._offset >= len(self._data):
            return EOF
        value = self._data[self._offset]
        self._offset += 1
        return value

    def read_into(self, dest: WritableBuffer, offset: int, length: int) -> ReadResult:
        """Copy up to ``length`` bytes into ``dest[offset:]``.

        Raises:
            InvalidReadArgumentsError: If the window is outside ``dest``.
        """
        self._check_closed()
        view, offset, length = byte_window(dest, offset, length)
        self._fetch_count += 1
        if length == 0:
            return 0
        available = self.remaining
        if available == 0:
            return EOF
        count = min(available, length)
        if self._max_fetch is not None:
            count = min(count, self._max_fetch)
        start = self._offset
        view[offset : offset + count] = self._data[start : start + count]
        self._offset += count
        return count

    def close(self) -> None:
        """Close the source."""
        self._closed = True

    def _check_closed(self) -> None:
        if self._closed:
            raise ReaderClosedError("I/O operation on closed source")


@dataclass(slots=True)
class RawIOByteSource:
    """ByteSource backed by a binary stream with ``readinto``.

    Each bulk read performs one ``readinto`` call on the stream, so wrapping
    an unbuffered file or a socket file issues one system call per fetch.
    Errors raised by the stream propagate unchanged.
    """

    _stream: SupportsReadinto
    _closed: bool = field(default=False, init=False)

    @classmethod
    def open(cls, path: str | Path) -> Self:
        """Open ``path`` for unbuffered binary reading.

        Raises:
            FileNotFoundError: If the file does not exist.
            IsADirectoryError: If ``path`` is a directory.
        """

        return cls(_stream=Path(path).open("rb", buffering=0))

    @classmethod
    def from_socket(cls, sock: socket.socket) -> Self:
        """Wrap a connected socket.

        Closing the source closes the socket file object; the socket itself
        stays open until its own ``close`` is called.
        """

        return cls(_stream=sock.makefile("rb", buffering=0))

    @property
    def closed(self) -> bool:
        """True if the source has been closed."""
        return self._closed

    def read_byte(self) -> ReadResult:
        """Return the next byte, or ``EOF``."""
        scratch = bytearray(1)
        result = self.read_into(scratch, 0, 1)
        if result is EOF:
            return EOF
        return scratch[0]

    def read_into(self, dest: WritableBuffer, offset: int, length: int) -> ReadResult:
        """Perform one ``readinto`` for up to ``length`` bytes.

        Raises:
            BlockingIOError: If a non-blocking stream has no data ready.
            InvalidReadArgumentsError: If the window is outside ``dest``.
            OSError: If the stream fails.
        """

        if self._closed:
            raise ReaderClosedError("I/O operation on closed source")
        view, offset, length = byte_window(dest, offset, length)
        if length == 0:
            return 0
        count = self._stream.readinto(view[offset : offset + length])
        if count is None:
            raise BlockingIOError("Non-blocking stream has no data available")
        if count == 0:
            return EOF
        return count

    def close(self) -> None:
        """Close the wrapped stream once."""
        if self._closed:
            return
        self._closed = True
        self._stream.close()
