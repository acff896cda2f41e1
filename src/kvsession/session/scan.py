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
"""Scan enumerator — materializes key sets with incremental ``SCAN`` cursors."""

from __future__ import annotations

from kvsession.session.keys import KeyScheme
from kvsession.session.ports.outbound import KeyValueClient

DEFAULT_SCAN_BATCH_SIZE = 100


class ScanEnumerator:
    """Collects session keys for bulk operations.

    Each call starts a fresh cursor and drains it in sequence, one bounded
    ``SCAN`` request at a time; the store is never asked for the whole
    namespace at once. ``SCAN`` may report a key more than once, so results
    are de-duplicated, keeping first-seen order.
    """

    def __init__(
        self,
        client: KeyValueClient,
        keys: KeyScheme,
        batch_size: int = DEFAULT_SCAN_BATCH_SIZE,
    ) -> None:
        self._client = client
        self._keys = keys
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def _collect(self, pattern: str) -> list[str]:
        seen: dict[str, None] = {}
        async for key in self._client.scan(pattern, self._batch_size):
            seen.setdefault(key, None)
        return list(seen)

    async def primary_keys(self) -> list[str]:
        """All ``prefix + sid`` keys; index keys are filtered out."""
        return [k for k in await self._collect(self._keys.primary_pattern()) if self._keys.is_primary_key(k)]

    async def namespace_keys(self) -> list[str]:
        """Every session key under the prefix root, primary and index keys alike.

        Keys that merely share the root (``session:x`` for root ``sess``) are
        left out.
        """
        prefix = self._keys.prefix
        return [k for k in await self._collect(self._keys.namespace_pattern()) if k.startswith(prefix)]

    async def user_keys(self, user_id: str) -> list[str]:
        """Index keys of *user_id*, each followed by the primary key it points at."""
        keys: list[str] = []
        for index_key in await self._collect(self._keys.user_pattern(user_id)):
            keys.append(index_key)
            keys.append(self._keys.primary_key_for_index(index_key, user_id))
        return keys
