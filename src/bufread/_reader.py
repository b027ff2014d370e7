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

"""Buffering decorator over a :class:`~bufread.ByteSource`.

``BufferedByteReader`` keeps a fixed ``bytearray`` between the caller and the
wrapped source. Single-byte reads are served from that buffer and refill it
with one fetch when it runs dry. Bulk reads drain whatever is buffered, then
hand the remainder of the request straight to the source so large reads are
not copied twice.

Example::

    with BufferedByteReader(RawIOByteSource.open("data.bin"), 4096) as reader:
        while (value := reader.read_byte()) is not EOF:
            handle(value)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from enum import Enum
from typing import Self

from ._config import DEFAULT_CAPACITY, ReaderConfig, validate_capacity
from ._protocols import EOF, ByteSource, ReadResult, WritableBuffer
from ._window import byte_window
from .dbc import ensure, invariant
from .errors import InvalidReadArgumentsError, ReaderClosedError, SourceContractError
from .logging import StructuredLogger, get_logger

__all__ = [
    "BufferedByteReader",
    "ReaderState",
]

_EXHAUSTED_LIMIT = -1


class ReaderState(Enum):
    """Observable lifecycle of a :class:`BufferedByteReader`.

    ``EXHAUSTED`` only records that the latest refill saw end-of-data; the
    next read queries the source again.
    """

    FRESH = "fresh"
    FILLED = "filled"
    EMPTY = "empty"
    EXHAUSTED = "exhausted"
    CLOSED = "closed"


def _cursors_in_range(reader: BufferedByteReader) -> tuple[bool, str]:
    position, limit = reader._position, reader._limit
    detail = f"position={position} limit={limit} capacity={reader.capacity}"
    if limit == _EXHAUSTED_LIMIT:
        return position == 0, detail
    return 0 <= position <= limit <= reader.capacity, detail


def _count_within_request(
    reader: BufferedByteReader,
    dest: WritableBuffer,
    offset: int = 0,
    length: int | None = None,
    *,
    result: ReadResult,
) -> tuple[bool, str]:
    requested = memoryview(dest).nbytes - offset if length is None else length
    if result is EOF:
        return requested > 0, "EOF returned for an empty request"
    return 0 <= result <= requested, f"delivered {result} of {requested} bytes"


@invariant(_cursors_in_range)
class BufferedByteReader:
    """Read-side buffer in front of a :class:`~bufread.ByteSource`.

    The reader owns both the buffer and the source: closing the reader closes
    the source. It also satisfies ``ByteSource`` itself, so readers can be
    stacked. Instances are not thread-safe.

    Args:
        source: Underlying byte source.
        capacity: Size of the internal buffer in bytes.
        logger: Optional logger or adapter to emit events through.

    Raises:
        InvalidCapacityError: If ``capacity`` is not a positive int.
        TypeError: If ``source`` does not implement ``ByteSource``.
    """

    __slots__ = (
        "_buffer",
        "_closed",
        "_limit",
        "_logger",
        "_position",
        "_source",
        "_started",
    )

    def __init__(
        self,
        source: ByteSource,
        capacity: int = DEFAULT_CAPACITY,
        *,
        logger: logging.Logger | logging.LoggerAdapter[logging.Logger] | None = None,
    ) -> None:
        capacity = validate_capacity(capacity)
        if not isinstance(source, ByteSource):
            msg = f"source must implement ByteSource, got {type(source).__name__}"
            raise TypeError(msg)
        self._source = source
        self._buffer = bytearray(capacity)
        self._position = 0
        self._limit = 0
        self._started = False
        self._closed = False
        self._logger: StructuredLogger = get_logger(
            __name__, logger_override=logger, context={"capacity": capacity}
        )

    @classmethod
    def from_config(cls, source: ByteSource, config: ReaderConfig) -> BufferedByteReader:
        """Create a reader using the settings in ``config``."""
        return cls(source, config.capacity)

    @property
    def capacity(self) -> int:
        """Size of the internal buffer in bytes."""
        return len(self._buffer)

    @property
    def buffered(self) -> int:
        """Bytes fetched from the source but not yet returned."""
        return max(self._limit - self._position, 0)

    @property
    def closed(self) -> bool:
        """True once :meth:`close` has been called."""
        return self._closed

    @property
    def state(self) -> ReaderState:
        """Current lifecycle state."""
        if self._closed:
            return ReaderState.CLOSED
        if self._limit == _EXHAUSTED_LIMIT:
            return ReaderState.EXHAUSTED
        if self._position < self._limit:
            return ReaderState.FILLED
        if not self._started:
            return ReaderState.FRESH
        return ReaderState.EMPTY

    def read_byte(self) -> ReadResult:
        """Return the next byte as an int in ``[0, 255]``, or ``EOF``.

        Raises:
            ReaderClosedError: If the reader has been closed.
        """

        self._check_closed()
        if self._position >= self._limit:
            self._fill()
            if self._limit == _EXHAUSTED_LIMIT:
                return EOF
        value = self._buffer[self._position]
        self._position += 1
        return value

    @ensure(_count_within_request)
    def read_into(
        self, dest: WritableBuffer, offset: int = 0, length: int | None = None
    ) -> ReadResult:
        """Deliver up to ``length`` bytes into ``dest`` starting at ``offset``.

        Buffered bytes are copied first. Any remainder of the request is
        passed to the source in a single fetch that writes directly into
        ``dest``. Fewer than ``length`` bytes may be delivered without the
        source being exhausted; callers needing an exact amount loop.

        Args:
            dest: Writable byte buffer.
            offset: Index in ``dest`` of the first byte to write.
            length: Maximum bytes to deliver. Defaults to the rest of ``dest``.

        Returns:
            Number of bytes delivered, or ``EOF`` when nothing was delivered
            because the source is exhausted. A zero-length request returns 0.

        Raises:
            ReaderClosedError: If the reader has been closed.
            InvalidReadArgumentsError: If the window is outside ``dest``.
        """

        self._check_closed()
        view, offset, length = byte_window(dest, offset, length)

        count = 0
        if self._position < self._limit:
            chunk = min(self._limit - self._position, length)
            view[offset : offset + chunk] = self._buffer[
                self._position : self._position + chunk
            ]
            self._position += chunk
            offset += chunk
            length -= chunk
            count = chunk

        if length > 0:
            self._started = True
            fetched = self._source.read_into(view, offset, length)
            if fetched is EOF:
                return EOF if count == 0 else count
            if not 0 <= fetched <= length:
                msg = f"Source delivered {fetched} bytes for a {length} byte request"
                raise SourceContractError(msg)
            count += fetched

        return count

    def chunks(self, size: int | None = None) -> Iterator[bytes]:
        """Iterate over the remaining bytes as chunks of at most ``size``.

        Stops at the first ``EOF``. ``size`` defaults to the buffer capacity.
        """

        self._check_closed()
        chunk_size = self.capacity if size is None else size
        if chunk_size <= 0:
            msg = f"Chunk size must be positive, got {chunk_size}"
            raise InvalidReadArgumentsError(msg)
        return self._iter_chunks(chunk_size)

    def __iter__(self) -> Iterator[bytes]:
        return self.chunks()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the reader and its source.

        The source is closed exactly once; further calls are no-ops. Errors
        raised by the source's ``close`` propagate, and the reader stays
        closed.
        """

        if self._closed:
            return
        self._closed = True
        self._logger.debug(
            "Closing buffered reader.",
            event="bufread.reader.close",
            context={"discarded": self.buffered},
        )
        self._source.close()

    def _iter_chunks(self, size: int) -> Iterator[bytes]:
        scratch = bytearray(size)
        while True:
            count = self.read_into(scratch, 0, size)
            if count is EOF:
                return
            if count:
                yield bytes(scratch[:count])

    def _fill(self) -> None:
        # A source that raises must leave the buffer empty.
        self._position = 0
        self._limit = 0
        self._started = True
        fetched = self._source.read_into(self._buffer, 0, self.capacity)
        if fetched is EOF:
            self._limit = _EXHAUSTED_LIMIT
            self._logger.debug(
                "Source reported end of data.", event="bufread.reader.exhausted"
            )
            return
        if not 0 < fetched <= self.capacity:
            msg = f"Source delivered {fetched} bytes to a {self.capacity} byte refill"
            raise SourceContractError(msg)
        self._limit = fetched
        self._logger.debug(
            "Refilled buffer.",
            event="bufread.reader.refill",
            context={"fetched": fetched},
        )

    def _check_closed(self) -> None:
        if self._closed:
            raise ReaderClosedError
