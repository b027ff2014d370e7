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

"""Buffered byte reading over arbitrary byte sources.

``BufferedByteReader`` cuts the number of calls made to a slow source (file
descriptors, sockets) by serving small reads from a fixed in-memory buffer.

Example usage::

    from bufread import EOF, BufferedByteReader, RawIOByteSource

    with BufferedByteReader(RawIOByteSource.open("frames.bin"), 4096) as reader:
        header = bytearray(16)
        count = reader.read_into(header)
        if count is EOF:
            ...

Sources provided here:

- ``MemoryByteSource``: bytes held in memory
- ``RawIOByteSource``: unbuffered files, sockets, any stream with ``readinto``
"""

from __future__ import annotations

from ._config import CAPACITY_ENV, DEFAULT_CAPACITY, ReaderConfig
from ._protocols import EOF, ByteSource, Exhausted, ReadResult, WritableBuffer
from ._reader import BufferedByteReader, ReaderState
from ._sources import MemoryByteSource, RawIOByteSource
from .errors import (
    BufReadError,
    InvalidCapacityError,
    InvalidReadArgumentsError,
    ReaderClosedError,
    SourceContractError,
)

__all__ = [
    "CAPACITY_ENV",
    "DEFAULT_CAPACITY",
    "EOF",
    "BufReadError",
    "BufferedByteReader",
    "ByteSource",
    "Exhausted",
    "InvalidCapacityError",
    "InvalidReadArgumentsError",
    "MemoryByteSource",
    "RawIOByteSource",
    "ReadResult",
    "ReaderClosedError",
    "ReaderConfig",
    "ReaderState",
    "SourceContractError",
    "WritableBuffer",
]
