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

"""Destination window validation shared by readers and sources."""

from __future__ import annotations

from ._protocols import WritableBuffer
from .errors import InvalidReadArgumentsError

__all__ = ["byte_window"]


def byte_window(
    dest: WritableBuffer, offset: int, length: int | None
) -> tuple[memoryview, int, int]:
    """Return ``dest`` as a flat unsigned-byte view plus a checked window.

    Any writable C-contiguous buffer is accepted (``array("b")``, signed or
    multi-dimensional memoryviews) and addressed byte by byte. ``length``
    defaults to the rest of ``dest`` after ``offset``.

    Raises:
        InvalidReadArgumentsError: If ``dest`` is not a writable contiguous
            buffer, or ``[offset, offset + length)`` does not lie inside it.
    """

    try:
        view = memoryview(dest)
    except TypeError:
        msg = f"dest must be a writable byte buffer, got {type(dest).__name__}"
        raise InvalidReadArgumentsError(msg) from None
    if view.readonly:
        raise InvalidReadArgumentsError("dest must be writable")
    if not view.c_contiguous:
        raise InvalidReadArgumentsError("dest must be contiguous")
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")

    size = view.nbytes
    if not 0 <= offset <= size:
        msg = f"offset {offset} outside destination of {size} bytes"
        raise InvalidReadArgumentsError(msg)
    if length is None:
        length = size - offset
    if length < 0:
        msg = f"length must be non-negative, got {length}"
        raise InvalidReadArgumentsError(msg)
    if offset + length > size:
        msg = f"offset {offset} + length {length} exceeds destination of {size} bytes"
        raise InvalidReadArgumentsError(msg)
    return view, offset, length
