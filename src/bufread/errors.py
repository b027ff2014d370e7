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

"""Base exception hierarchy for :mod:`bufread`."""

from __future__ import annotations

__all__ = [
    "BufReadError",
    "InvalidCapacityError",
    "InvalidReadArgumentsError",
    "ReaderClosedError",
    "SourceContractError",
]


class BufReadError(Exception):
    """Base class for all bufread exceptions.

    End-of-data is never reported through this hierarchy. Readers return the
    :data:`bufread.EOF` marker for that, so a handler catching
    ``BufReadError`` only ever sees misuse or a misbehaving source. I/O
    failures raised by a wrapped source (``OSError`` and subclasses) are not
    wrapped either and reach the caller unchanged.

    Example:
        Catch any bufread-specific error::

            try:
                count = reader.read_into(dest, 0, 512)
            except BufReadError as e:
                logger.error("Reader misuse: %s", e)
                raise

    Note:
        Subclasses also inherit from standard exception types (``ValueError``,
        ``RuntimeError``) so existing handlers keep working.
    """


class InvalidCapacityError(BufReadError, ValueError):
    """Raised when a buffer capacity is not a positive integer.

    Capacities are validated when a :class:`~bufread.BufferedByteReader` or a
    :class:`~bufread.ReaderConfig` is constructed, before any buffer is
    allocated.
    """


class InvalidReadArgumentsError(BufReadError, ValueError):
    """Raised when a bulk read receives an unusable destination window.

    Common causes:
        - Negative ``length``
        - ``offset`` outside ``[0, len(dest)]``
        - ``offset + length`` running past the end of ``dest``
        - A read-only or non-buffer ``dest``
    """


class ReaderClosedError(BufReadError, ValueError):
    """Raised when a read is attempted on a closed reader or source."""

    def __init__(self, message: str = "I/O operation on closed reader") -> None:
        super().__init__(message)


class SourceContractError(BufReadError, RuntimeError):
    """Raised when a wrapped source reports an impossible byte count.

    A source may deliver fewer bytes than requested, but never more, never a
    negative count, and never zero bytes for a refill of the internal buffer.
    Accepting such a count would leave the reader's cursors pointing outside
    the data it actually holds.
    """
