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
"""Session store and key-value client protocols."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueClient(Protocol):
    """Normalized key-value primitives the session store is built on.

    Every client dialect is adapted to this interface once, at construction.
    Values and keys are returned as ``str``.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> None: ...

    async def expire(self, key: str, ttl: int) -> bool: ...

    async def mget(self, keys: list[str]) -> list[str | None]: ...

    async def delete(self, keys: list[str]) -> int: ...

    def scan(self, match: str, count: int) -> AsyncIterator[str]: ...


@runtime_checkable
class SessionStore(Protocol):
    """Session persistence interface consumed by session middleware.

    Lookups of missing sessions return ``None`` (or do nothing); store
    failures raise ``kvsession.kernel.exceptions.StoreCallException``.
    """

    async def load(self, session_id: str) -> dict[str, Any] | None: ...

    async def save(self, session_id: str, record: dict[str, Any], *, ttl: int | None = None) -> None: ...

    async def touch(self, session_id: str, record: dict[str, Any], *, ttl: int | None = None) -> None: ...

    async def destroy(self, session_id: str) -> None: ...

    async def exists(self, session_id: str) -> bool: ...

    async def clear(self) -> None: ...

    async def clear_for_user(self, user_id: str) -> None: ...

    async def length(self) -> int: ...

    async def ids(self) -> list[str]: ...

    async def all(self) -> list[dict[str, Any]]: ...
