# Copyright 2026 Firefly Software Solutions Inc.
#
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
"""Record codec — session records to and from the store's string form."""

from __future__ import annotations

import json
from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SessionSerializer(Protocol):
    """Converts session records to stored text and back.

    ``parse`` may return the record directly or an awaitable resolving to it,
    so decoders that need I/O (or a thread pool) can be plugged in.
    """

    def parse(self, text: str) -> dict[str, Any] | Awaitable[dict[str, Any]]: ...

    def stringify(self, record: dict[str, Any]) -> str: ...


class JsonSerializer:
    """Default codec: compact JSON, matching the layout written by express-session stores."""

    def parse(self, text: str) -> dict[str, Any]:
        return json.loads(text)

    def stringify(self, record: dict[str, Any]) -> str:
        return json.dumps(record, separators=(",", ":"), default=_encode_default)


def _encode_default(value: Any) -> Any:
    # datetimes (e.g. cookie.expires) are written as ISO-8601 strings
    isoformat = getattr(value, "isoformat", None)
    if isoformat is not None:
        return isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
