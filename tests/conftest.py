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

from __future__ import annotations

from collections.abc import Iterator

import pytest

import bufread.dbc as dbc_module
from tests.helpers.sources import ScriptedSource


@pytest.fixture(autouse=True)
def contracts_enabled(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test with contract checks switched on."""
    monkeypatch.delenv("BUFREAD_DBC", raising=False)
    dbc_module.enable_dbc()
    yield
    dbc_module._forced_state = None


@pytest.fixture
def six_bytes() -> ScriptedSource:
    """Source producing bytes 1 through 6, then end-of-data."""
    return ScriptedSource.of(bytes([1, 2, 3, 4, 5, 6]))
