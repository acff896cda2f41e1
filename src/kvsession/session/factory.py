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
"""Session store construction from configuration."""

from __future__ import annotations

from typing import Any

import structlog

from kvsession.config.properties.logging import LoggingProperties
from kvsession.config.properties.session import SessionStoreProperties
from kvsession.core.config import Config
from kvsession.logging import LoggingPort, StructlogAdapter
from kvsession.session.adapters.redis import RedisSessionStore
from kvsession.session.codec import SessionSerializer
from kvsession.session.ttl import TtlFunction

logger = structlog.get_logger("kvsession.session.factory")


def create_session_store(
    config: Config,
    client: Any | None = None,
    *,
    serializer: SessionSerializer | None = None,
    ttl: TtlFunction | None = None,
    logging_port: LoggingPort | None = None,
) -> RedisSessionStore:
    """Build a :class:`RedisSessionStore` from ``kvsession.session.*`` settings.

    When *client* is omitted a ``redis.asyncio`` client is created from
    ``kvsession.session.redis-url``; connections are opened lazily on first use.

    Unless ``kvsession.logging.enabled`` is false, the ``kvsession.logging.*``
    settings are applied first through *logging_port* (a
    :class:`StructlogAdapter` by default).
    """
    logging_properties = config.bind(LoggingProperties)
    if logging_properties.enabled:
        (logging_port or StructlogAdapter()).configure(logging_properties)

    properties = config.bind(SessionStoreProperties)

    if client is None:
        import redis.asyncio as aioredis

        client = aioredis.from_url(properties.redis_url)  # type: ignore[no-untyped-call,unused-ignore]

    store = RedisSessionStore.from_properties(client, properties, serializer=serializer, ttl=ttl)
    logger.info(
        "session_store_created",
        prefix=store.keys.prefix,
        dialect=store.dialect.value,
        disable_ttl=properties.disable_ttl,
        disable_touch=properties.disable_touch,
    )
    return store
