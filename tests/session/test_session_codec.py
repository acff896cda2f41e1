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
"""Tests for the record codec."""

from datetime import UTC, datetime

import pytest

from kvsession.session.codec import JsonSerializer, SessionSerializer


class TestJsonSerializer:
    def test_satisfies_protocol(self):
        assert isinstance(JsonSerializer(), SessionSerializer)

    def test_compact_output(self):
        text = JsonSerializer().stringify({"userId": "u1", "cookie": {"maxAge": 1000}})
        assert text == '{"userId":"u1","cookie":{"maxAge":1000}}'

    def test_parse_restores_record(self):
        record = {"userId": "u1", "cookie": {"expires": "2030-01-01T00:00:00.000Z"}, "cart": [1, 2]}
        codec = JsonSerializer()
        assert codec.parse(codec.stringify(record)) == record

    def test_datetime_written_as_iso_string(self):
        expires = datetime(2030, 1, 1, tzinfo=UTC)
        text = JsonSerializer().stringify({"cookie": {"expires": expires}})
        assert text == '{"cookie":{"expires":"2030-01-01T00:00:00+00:00"}}'

    def test_unserializable_value_raises(self):
        with pytest.raises(TypeError):
            JsonSerializer().stringify({"value": object()})
