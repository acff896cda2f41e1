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
"""Tests for dialect detection and the two client adapters."""

import pytest
from conftest import FakeGlideClient, FakeKeyspace, FakeRedis

from kvsession.kernel.exceptions import ConfigurationException
from kvsession.session.adapters.client import (
    ClientDialect,
    CommandClientAdapter,
    KeywordClientAdapter,
    detect_dialect,
    normalize_client,
)
from kvsession.session.ports.outbound import KeyValueClient


class TestDialectDetection:
    def test_scan_iter_means_keyword_dialect(self):
        assert detect_dialect(FakeRedis()) is ClientDialect.KEYWORD
        assert isinstance(normalize_client(FakeRedis()), KeywordClientAdapter)

    def test_custom_command_means_command_dialect(self):
        assert detect_dialect(FakeGlideClient()) is ClientDialect.COMMAND
        assert isinstance(normalize_client(FakeGlideClient()), CommandClientAdapter)

    def test_missing_client_rejected(self):
        with pytest.raises(ConfigurationException) as exc_info:
            normalize_client(None)
        assert exc_info.value.code == "CLIENT_MISSING"

    def test_unknown_client_rejected(self):
        with pytest.raises(ConfigurationException) as exc_info:
            normalize_client(object())
        assert exc_info.value.code == "CLIENT_UNSUPPORTED"

    def test_adapter_passes_through(self):
        adapter = normalize_client(FakeRedis())
        assert normalize_client(adapter) is adapter

    def test_adapters_satisfy_protocol(self):
        assert isinstance(KeywordClientAdapter(FakeRedis()), KeyValueClient)
        assert isinstance(CommandClientAdapter(FakeGlideClient()), KeyValueClient)


class TestNormalizedPrimitives:
    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self, client, keyspace):
        adapter = normalize_client(client)
        keyspace.data["k"] = "välue"
        assert await adapter.get("k") == "välue"
        assert await adapter.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, client, keyspace):
        adapter = normalize_client(client)
        await adapter.set("k", "v", 60)
        assert keyspace.data["k"] == "v"
        assert keyspace.ttls["k"] == 60

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [None, 0, -5])
    async def test_set_without_positive_ttl_has_no_expiry(self, client, keyspace, ttl):
        adapter = normalize_client(client)
        keyspace.ttls["k"] = 99
        await adapter.set("k", "v", ttl)
        assert keyspace.data["k"] == "v"
        assert "k" not in keyspace.ttls

    @pytest.mark.asyncio
    async def test_expire(self, client, keyspace):
        adapter = normalize_client(client)
        keyspace.data["k"] = "v"
        assert await adapter.expire("k", 30) is True
        assert keyspace.ttls["k"] == 30
        assert await adapter.expire("missing", 30) is False

    @pytest.mark.asyncio
    async def test_mget_aligned_with_nulls(self, client, keyspace):
        adapter = normalize_client(client)
        keyspace.data.update({"a": "1", "c": "3"})
        assert await adapter.mget(["a", "b", "c"]) == ["1", None, "3"]

    @pytest.mark.asyncio
    async def test_delete_counts_removed(self, client, keyspace):
        adapter = normalize_client(client)
        keyspace.data.update({"a": "1", "b": "2"})
        assert await adapter.delete(["a", "b", "zzz"]) == 2
        assert keyspace.data == {}

    @pytest.mark.asyncio
    async def test_empty_batches_skip_round_trip(self, client, keyspace):
        adapter = normalize_client(client)
        assert await adapter.delete([]) == 0
        assert await adapter.mget([]) == []
        assert keyspace.calls == []

    @pytest.mark.asyncio
    async def test_scan_yields_matching_keys(self, client, keyspace):
        adapter = normalize_client(client)
        keyspace.data.update({"sess:a": "1", "sess:b": "2", "other:c": "3"})
        keys = [key async for key in adapter.scan("sess:*", 100)]
        assert sorted(keys) == ["sess:a", "sess:b"]


class TestCommandDialectScan:
    @pytest.mark.asyncio
    async def test_scan_follows_string_cursor_until_zero(self):
        keyspace = FakeKeyspace()
        keyspace.data.update({f"k{i}": str(i) for i in range(5)})
        client = FakeGlideClient(keyspace)
        adapter = CommandClientAdapter(client)

        keys = [key async for key in adapter.scan("k*", 2)]

        assert keys == ["k0", "k1", "k2", "k3", "k4"]
        assert client.scan_cursors == ["0", "2", "4"]

    @pytest.mark.asyncio
    async def test_each_scan_restarts_at_zero(self):
        keyspace = FakeKeyspace()
        keyspace.data.update({"k1": "1", "k2": "2", "k3": "3"})
        client = FakeGlideClient(keyspace)
        adapter = CommandClientAdapter(client)

        [key async for key in adapter.scan("k*", 2)]
        [key async for key in adapter.scan("k*", 2)]

        assert client.scan_cursors == ["0", "2", "0", "2"]

    @pytest.mark.asyncio
    async def test_commands_are_positional(self):
        client = FakeGlideClient()
        adapter = CommandClientAdapter(client)
        await adapter.set("k", "v", 60)
        await adapter.expire("k", 30)
        assert client.commands == [["SET", "k", "v", "EX", "60"], ["EXPIRE", "k", "30"]]
