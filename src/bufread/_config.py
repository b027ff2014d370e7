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

"""Reader configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from .errors import InvalidCapacityError

__all__ = [
    "CAPACITY_ENV",
    "DEFAULT_CAPACITY",
    "ReaderConfig",
    "validate_capacity",
]

#: Default buffer capacity in bytes.
DEFAULT_CAPACITY: Final[int] = 32

CAPACITY_ENV: Final[str] = "BUFREAD_CAPACITY"


def validate_capacity(capacity: object) -> int:
    """Return ``capacity`` if it is a positive int, else raise."""

    if isinstance(capacity, bool) or not isinstance(capacity, int):
        msg = f"Buffer capacity must be an int, got {type(capacity).__name__}"
        raise InvalidCapacityError(msg)
    if capacity <= 0:
        msg = f"Buffer capacity must be positive, got {capacity}"
        raise InvalidCapacityError(msg)
    return capacity


@dataclass(frozen=True, slots=True)
class ReaderConfig:
    """Construction settings for :class:`~bufread.BufferedByteReader`.

    Attributes:
        capacity: Size in bytes of the internal buffer.
    """

    capacity: int = DEFAULT_CAPACITY

    def __post_init__(self) -> None:
        _ = validate_capacity(self.capacity)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ReaderConfig:
        """Build a config from ``BUFREAD_CAPACITY``.

        Falls back to :data:`DEFAULT_CAPACITY` when the variable is unset or
        blank.

        Raises:
            InvalidCapacityError: If the variable is not a positive integer.
        """

        env = env if env is not None else os.environ
        raw = env.get(CAPACITY_ENV, "").strip()
        if not raw:
            return cls()
        try:
            capacity = int(raw)
        except ValueError:
            msg = f"{CAPACITY_ENV} must be an integer, got {raw!r}"
            raise InvalidCapacityError(msg) from None
        return cls(capacity=capacity)
