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
"""Client adapters — one primitive interface over two Redis client dialects.

Two families of asyncio clients are supported:

* **keyword** clients in the style of ``redis.asyncio.Redis``: options are
  keyword arguments (``set(key, value, ex=60)``) and scanning goes through
  the client's own ``scan_iter`` cursor iterator.
* **command** clients in the style of ``valkey-glide``: every command is a
  positional argument list sent through ``custom_command`` and replies are
  plain arrays; ``SCAN`` answers ``[cursor, [keys...]]`` with a string
  cursor, ``"0"`` meaning the iteration is complete.

The dialect is detected once by :func:`normalize_client`; everything above
this module only sees :class:`~kvsession.session.ports.outbound.KeyValueClient`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from enum import Enum
from typing import Any

import structlog

from kvsession.kernel.exceptions import ConfigurationException

logger = structlog.get_logger("kvsession.session.client")

_SCAN_DONE = "0"


class ClientDialect(Enum):
    """Command/response convention spoken by a store client."""

    KEYWORD = "keyword"
    COMMAND = "command"


def _decode(value: Any) -> Any:
    if isinstance(value, bytes | bytearray):
        return bytes(value).decode("utf-8")
    return value


class KeywordClientAdapter:
    """Adapter for ``redis.asyncio.Redis``-like clients."""

    dialect = ClientDialect.KEYWORD

    def __init__(self, client: Any) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        return self._client

    async def get(self, key: str) -> str | None:
        return _decode(await self._client.get(key))

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        if ttl is not None and ttl > 0:
            await self._client.set(key, value, ex=ttl)
        else:
            await self._client.set(key, value)

    async def expire(self, key: str, ttl: int) -> bool:
        return bool(await self._client.expire(key, ttl))

    async def mget(self, keys: list[str]) -> list[str | None]:
        if not keys:
            return []
        return [_decode(v) for v in await self._client.mget(keys)]

    async def delete(self, keys: list[str]) -> int:
        if not keys:
            return 0
        return int(await self._client.delete(*keys))

    async def scan(self, match: str, count: int) -> AsyncIterator[str]:
        async for key in self._client.scan_iter(match=match, count=count):
            yield _decode(key)


class CommandClientAdapter:
    """Adapter for array-reply clients exposing ``custom_command(args)``."""

    dialect = ClientDialect.COMMAND

    def __init__(self, client: Any) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        return self._client

    async def _command(self, *args: str) -> Any:
        return await self._client.custom_command(list(args))

    async def get(self, key: str) -> str | None:
        return _decode(await self._command("GET", key))

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        if ttl is not None and ttl > 0:
            await self._command("SET", key, value, "EX", str(ttl))
        else:
            await self._command("SET", key, value)

    async def expire(self, key: str, ttl: int) -> bool:
        return bool(await self._command("EXPIRE", key, str(ttl)))

    async def mget(self, keys: list[str]) -> list[str | None]:
        if not keys:
            return []
        return [_decode(v) for v in await self._command("MGET", *keys)]

    async def delete(self, keys: list[str]) -> int:
        if not keys:
            return 0
        return int(await self._command("DEL", *keys))

    async def scan(self, match: str, count: int) -> AsyncIterator[str]:
        cursor = _SCAN_DONE
        while True:
            reply = await self._command("SCAN", cursor, "MATCH", match, "COUNT", str(count))
            cursor = str(_decode(reply[0]))
            for key in reply[1]:
                yield _decode(key)
            if cursor == _SCAN_DONE:
                break


ClientAdapter = KeywordClientAdapter | CommandClientAdapter


def detect_dialect(client: Any) -> ClientDialect:
    """Probe *client* for the capability that tells the two dialects apart."""
    if client is None:
        raise ConfigurationException("A key-value store client is required", code="CLIENT_MISSING")
    if hasattr(client, "scan_iter"):
        return ClientDialect.KEYWORD
    if hasattr(client, "custom_command"):
        return ClientDialect.COMMAND
    raise ConfigurationException(
        f"Unsupported key-value store client: {type(client).__name__}",
        code="CLIENT_UNSUPPORTED",
        context={"client_type": type(client).__qualname__},
    )


def normalize_client(client: Any) -> ClientAdapter:
    """Wrap *client* in the adapter matching its dialect.

    Already-normalized adapters are returned unchanged.
    """
    if isinstance(client, KeywordClientAdapter | CommandClientAdapter):
        return client

    dialect = detect_dialect(client)
    logger.debug("session_client_detected", dialect=dialect.value, client_type=type(client).__name__)
    if dialect is ClientDialect.KEYWORD:
        return KeywordClientAdapter(client)
    return CommandClientAdapter(client)
