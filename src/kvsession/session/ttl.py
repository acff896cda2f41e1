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
"""TTL policy — effective time-to-live of a session record."""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

DEFAULT_TTL = 86400  # one day, in seconds

TtlFunction = Callable[[dict[str, Any]], int]


class TtlPolicy:
    """Computes how long a session record should live, in seconds.

    Resolution order:

    1. a per-call override, when given;
    2. the configured TTL, when it is a function of the record;
    3. the record's ``cookie.expires`` timestamp, rounded up to whole seconds;
    4. the configured static TTL (a falsy value selects ``DEFAULT_TTL``).

    A result ``<= 0`` means the record must not be persisted.
    """

    def __init__(
        self,
        ttl: int | TtlFunction | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        # 0 and None both select the default.
        self._ttl: int | TtlFunction = ttl if callable(ttl) or ttl else DEFAULT_TTL
        self._clock = clock

    @property
    def is_dynamic(self) -> bool:
        return callable(self._ttl)

    def compute(self, record: dict[str, Any], override: int | None = None) -> int:
        if override is not None:
            return int(override)

        if callable(self._ttl):
            return int(self._ttl(record))

        expires_ms = cookie_expiry_ms(record)
        if expires_ms is not None:
            return math.ceil((expires_ms - self._clock() * 1000) / 1000)

        return int(self._ttl)


def cookie_expiry_ms(record: dict[str, Any]) -> float | None:
    """Return ``record["cookie"]["expires"]`` as epoch milliseconds, if present.

    Accepts ISO-8601 strings (``2030-01-01T00:00:00.000Z``), ``datetime``
    instances (naive ones are taken as UTC) and epoch milliseconds.
    """
    cookie = record.get("cookie") if isinstance(record, dict) else None
    if not isinstance(cookie, dict):
        return None

    expires = cookie.get("expires")
    if expires is None or expires == "":
        return None
    if isinstance(expires, bool):
        raise ValueError(f"Unsupported cookie expiry value: {expires!r}")
    if isinstance(expires, int | float):
        return float(expires)
    if isinstance(expires, str):
        expires = datetime.fromisoformat(expires)
    if isinstance(expires, datetime):
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=UTC)
        return expires.timestamp() * 1000
    raise ValueError(f"Unsupported cookie expiry value: {expires!r}")
