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
"""Shared fakes for the session tests: one in-memory keyspace, two client dialects."""

from __future__ import annotations

import re
from typing import Any

import pytest


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a Redis glob (``*``, ``?``, backslash escapes) into a regex."""
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
        i += 1
    return re.compile("^" + "".join(parts) + "$", re.DOTALL)


class FakeKeyspace:
    """Key/value data plus TTLs, shared by both fake clients.

    Every command is appended to ``calls`` as ``(COMMAND, key)``; an entry in
    ``failures`` makes that command raise for that key.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}

    def record(self, command: str, *keys: str) -> None:
        for key in keys:
            self.calls.append((command, key))
            exc = self.failures.get((command, key))
            if exc is not None:
                raise exc

    def commands(self, command: str) -> list[str]:
        return [key for cmd, key in self.calls if cmd == command]

    def put(self, key: str, value: str, ttl: int | None) -> None:
        self.data[key] = value
        if ttl:
            self.ttls[key] = ttl
        else:
            self.ttls.pop(key, None)

    def expire(self, key: str, ttl: int) -> int:
        if key not in self.data:
            return 0
        if ttl <= 0:
            self.remove([key])
        else:
            self.ttls[key] = ttl
        return 1

    def remove(self, keys: list[str]) -> int:
        count = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.ttls.pop(key, None)
                count += 1
        return count

    def match(self, pattern: str) -> list[str]:
        regex = glob_to_regex(pattern)
        return sorted(k for k in self.data if regex.match(k))


class FakeRedis:
    """Minimal stub matching the redis.asyncio.Redis interface (bytes replies)."""

    def __init__(self, keyspace: FakeKeyspace | None = None) -> None:
        self.keyspace = keyspace if keyspace is not None else FakeKeyspace()

    async def get(self, key: str) -> bytes | None:
        self.keyspace.record("GET", key)
        value = self.keyspace.data.get(key)
        return value.encode() if value is not None else None

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.keyspace.record("SET", key)
        self.keyspace.put(key, value, ex)
        return True

    async def expire(self, key: str, seconds: int) -> bool:
        self.keyspace.record("EXPIRE", key)
        return bool(self.keyspace.expire(key, seconds))

    async def mget(self, keys: list[str]) -> list[bytes | None]:
        self.keyspace.record("MGET", *keys)
        return [v.encode() if (v := self.keyspace.data.get(k)) is not None else None for k in keys]

    async def delete(self, *keys: str) -> int:
        self.keyspace.record("DEL", *keys)
        return self.keyspace.remove(list(keys))

    async def scan_iter(self, match: str | None = None, count: int | None = None):
        self.keyspace.record("SCAN", match or "*")
        for key in self.keyspace.match(match or "*"):
            yield key.encode()


class FakeGlideClient:
    """Minimal stub of an array-reply client driven through ``custom_command``."""

    def __init__(self, keyspace: FakeKeyspace | None = None) -> None:
        self.keyspace = keyspace if keyspace is not None else FakeKeyspace()
        self.commands: list[list[str]] = []
        self.scan_cursors: list[str] = []

    async def custom_command(self, args: list[str]) -> Any:
        self.commands.append(list(args))
        command, *rest = args
        ks = self.keyspace

        if command == "GET":
            ks.record("GET", rest[0])
            value = ks.data.get(rest[0])
            return value.encode() if value is not None else None
        if command == "SET":
            key, value, *options = rest
            ks.record("SET", key)
            ttl = int(options[1]) if options[:1] == ["EX"] else None
            ks.put(key, value, ttl)
            return "OK"
        if command == "EXPIRE":
            ks.record("EXPIRE", rest[0])
            return ks.expire(rest[0], int(rest[1]))
        if command == "MGET":
            ks.record("MGET", *rest)
            return [v.encode() if (v := ks.data.get(k)) is not None else None for k in rest]
        if command == "DEL":
            ks.record("DEL", *rest)
            return ks.remove(rest)
        if command == "SCAN":
            cursor, _match, pattern, _count, count = rest
            ks.record("SCAN", pattern)
            self.scan_cursors.append(cursor)
            keys = ks.match(pattern)
            start = int(cursor)
            end = start + int(count)
            next_cursor = "0" if end >= len(keys) else str(end)
            return [next_cursor.encode(), [k.encode() for k in keys[start:end]]]
        raise ValueError(f"unknown command {command}")


@pytest.fixture
def keyspace() -> FakeKeyspace:
    return FakeKeyspace()


@pytest.fixture(params=["keyword", "command"])
def client(request: pytest.FixtureRequest, keyspace: FakeKeyspace) -> Any:
    """A fake client of each dialect, both backed by ``keyspace``."""
    if request.param == "keyword":
        return FakeRedis(keyspace)
    return FakeGlideClient(keyspace)
