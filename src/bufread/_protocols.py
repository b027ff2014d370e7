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

"""Byte source protocol and the end-of-data marker.

Defines the ``ByteSource`` capability consumed (and re-exposed) by
``BufferedByteReader``, together with the ``EOF`` marker that every source
returns instead of a byte or count once it has nothing more to give.
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Literal, Protocol, runtime_checkable

__all__ = [
    "EOF",
    "ByteSource",
    "Exhausted",
    "ReadResult",
    "WritableBuffer",
]


class Exhausted(Enum):
    """Marker returned by reads when the source has no bytes at this time.

    Exhaustion is an observation about a single fetch, not an error. A
    source that reported ``EOF`` may produce more bytes on a later call.
    """

    EOF = "eof"

    def __repr__(self) -> str:
        return "EOF"

    def __bool__(self) -> bool:
        return False


#: Singleton end-of-data marker.
EOF: Final = Exhausted.EOF

type ReadResult = int | Literal[Exhausted.EOF]
"""A byte value / byte count, or ``EOF``."""

type WritableBuffer = bytearray | memoryview
"""Destination accepted by bulk reads."""


@runtime_checkable
class ByteSource(Protocol):
    """Blocking byte producer with single-byte and bulk reads.

    Implementations block until they can return at least one byte or observe
    end-of-data. Bulk reads are best-effort: delivering fewer than ``length``
    bytes does not signal exhaustion.

    Example::

        def drain(source: ByteSource) -> bytes:
            out = bytearray()
            while (value := source.read_byte()) is not EOF:
                out.append(value)
            return bytes(out)
    """

    def read_byte(self) -> ReadResult:
        """Return the next byte as an int in ``[0, 255]``, or ``EOF``."""
        ...

    def read_into(self, dest: WritableBuffer, offset: int, length: int) -> ReadResult:
        """Fill up to ``length`` bytes of ``dest`` starting at ``offset``.

        Args:
            dest: Writable destination buffer.
            offset: Index in ``dest`` of the first byte to write.
            length: Maximum number of bytes to deliver.

        Returns:
            Number of bytes written, or ``EOF`` when nothing was written
            because the source is exhausted.

        Raises:
            OSError: If the underlying device or connection fails.
        """
        ...

    def close(self) -> None:
        """Release the resources held by the source."""
        ...
