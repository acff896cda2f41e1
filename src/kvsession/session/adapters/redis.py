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
"""Redis-backed session store with a per-user session index."""

from __future__ import annotations

import inspect
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from kvsession.config.properties.session import SessionStoreProperties
from kvsession.kernel.exceptions import (
    ConfigurationException,
    KvSessionException,
    PartialWriteException,
    RecordDecodeException,
    StoreCallException,
    ValidationException,
)
from kvsession.session.adapters.client import ClientDialect, normalize_client
from kvsession.session.codec import JsonSerializer, SessionSerializer
from kvsession.session.keys import KeyScheme
from kvsession.session.scan import DEFAULT_SCAN_BATCH_SIZE, ScanEnumerator
from kvsession.session.ttl import TtlFunction, TtlPolicy

logger = structlog.get_logger("kvsession.session")

_DEFAULT_USER_ID_FIELD = "userId"


@contextmanager
def _store_call(operation: str, **context: Any) -> Iterator[None]:
    """Translate client errors raised inside the block into ``StoreCallException``."""
    try:
        yield
    except KvSessionException:
        raise
    except Exception as exc:
        logger.error("session_store_call_failed", operation=operation, error=str(exc), **context)
        raise StoreCallException(
            f"Session store {operation} failed: {exc}",
            code="STORE_CALL_FAILED",
            context={"operation": operation, **context},
        ) from exc


class RedisSessionStore:
    """Session store backed by a ``redis.asyncio``-like or command-array client.

    Every session is written under two keys: the primary key holding the
    serialized record, and a per-user index key whose value is the primary
    key. The index lets :meth:`clear_for_user` find all sessions of a user
    with a prefix scan. The two keys are written, refreshed and deleted by
    separate commands; when the second command of a pair fails the first is
    kept and :class:`PartialWriteException` is raised.

    Args:
        client: The store client; its dialect is detected once, here.
        prefix: Key prefix, ``":"`` is appended unless it already ends in a separator.
        scan_batch_size: ``COUNT`` hint for each ``SCAN`` request.
        serializer: Record codec, JSON by default.
        ttl: Static TTL in seconds or a function of the record returning one.
        disable_ttl: Write keys without expiry; :meth:`touch` becomes a no-op.
        disable_touch: Make :meth:`touch` a no-op while ``save`` keeps setting TTLs.
        user_id_field: Record field holding the owning user's id.
    """

    def __init__(
        self,
        client: Any,
        *,
        prefix: str | None = None,
        scan_batch_size: int = DEFAULT_SCAN_BATCH_SIZE,
        serializer: SessionSerializer | None = None,
        ttl: int | TtlFunction | None = None,
        disable_ttl: bool = False,
        disable_touch: bool = False,
        user_id_field: str = _DEFAULT_USER_ID_FIELD,
    ) -> None:
        if scan_batch_size < 1:
            raise ConfigurationException(
                f"scan_batch_size must be positive, got {scan_batch_size}", code="INVALID_SCAN_BATCH_SIZE"
            )
        self._client = normalize_client(client)
        self._keys = KeyScheme(prefix)
        self._scanner = ScanEnumerator(self._client, self._keys, scan_batch_size)
        self._serializer: SessionSerializer = serializer or JsonSerializer()
        self._ttl = TtlPolicy(ttl)
        self._disable_ttl = disable_ttl
        self._disable_touch = disable_touch
        self._user_id_field = user_id_field

    @classmethod
    def from_properties(
        cls,
        client: Any,
        properties: SessionStoreProperties,
        *,
        serializer: SessionSerializer | None = None,
        ttl: TtlFunction | None = None,
    ) -> RedisSessionStore:
        """Build a store from bound ``kvsession.session`` properties.

        A *ttl* function, when given, replaces the static ``properties.ttl``.
        """
        return cls(
            client,
            prefix=properties.prefix,
            scan_batch_size=properties.scan_batch_size,
            serializer=serializer,
            ttl=ttl if ttl is not None else properties.ttl,
            disable_ttl=properties.disable_ttl,
            disable_touch=properties.disable_touch,
            user_id_field=properties.user_id_field,
        )

    @property
    def keys(self) -> KeyScheme:
        return self._keys

    @property
    def dialect(self) -> ClientDialect:
        return self._client.dialect

    def compute_ttl(self, record: dict[str, Any], override: int | None = None) -> int:
        """Effective TTL of *record* in seconds; ``<= 0`` means do not persist."""
        return self._ttl.compute(record, override)

    # -- single-session operations ------------------------------------------

    async def load(self, session_id: str) -> dict[str, Any] | None:
        """Return the stored record, or ``None`` when the session does not exist."""
        key = self._keys.primary_key(session_id)
        with _store_call("load", key=key):
            raw = await self._client.get(key)
        if not raw:
            logger.debug("session_not_found", session_id=session_id)
            return None
        return await self._decode(raw, key)

    async def save(self, session_id: str, record: dict[str, Any], *, ttl: int | None = None) -> None:
        """Write the record and its index key, or destroy the session when its TTL has run out."""
        self._check_session_id(session_id)
        user_id = self._user_id(record, session_id)
        key = self._keys.primary_key(session_id)
        user_key = self._keys.index_key(user_id, session_id)
        effective_ttl = self._effective_ttl(record, ttl, session_id)

        if effective_ttl <= 0:
            logger.debug("session_expired_on_save", session_id=session_id, ttl=effective_ttl)
            await self.destroy(session_id)
            return

        expiry = None if self._disable_ttl else effective_ttl
        with _store_call("save", key=key, index_key=user_key):
            value = self._serializer.stringify(record)
            await self._client.set(key, value, expiry)
            try:
                await self._client.set(user_key, key, expiry)
            except Exception as exc:
                raise self._partial_failure("save", key, user_key, exc) from exc
        logger.debug("session_saved", session_id=session_id, ttl=expiry)

    async def touch(self, session_id: str, record: dict[str, Any], *, ttl: int | None = None) -> None:
        """Refresh the TTL of both keys without rewriting the payload."""
        if self._disable_touch or self._disable_ttl:
            return

        self._check_session_id(session_id)
        user_id = self._user_id(record, session_id)
        key = self._keys.primary_key(session_id)
        user_key = self._keys.index_key(user_id, session_id)
        effective_ttl = self._effective_ttl(record, ttl, session_id)

        if effective_ttl <= 0:
            logger.debug("session_expired_on_touch", session_id=session_id, ttl=effective_ttl)
            await self.destroy(session_id)
            return

        with _store_call("touch", key=key, index_key=user_key):
            await self._client.expire(key, effective_ttl)
            try:
                await self._client.expire(user_key, effective_ttl)
            except Exception as exc:
                raise self._partial_failure("touch", key, user_key, exc) from exc
        logger.debug("session_touched", session_id=session_id, ttl=effective_ttl)

    async def destroy(self, session_id: str) -> None:
        """Delete the session and its index key; missing sessions are ignored."""
        key = self._keys.primary_key(session_id)
        with _store_call("destroy", key=key):
            raw = await self._client.get(key)
        if raw is None:
            return

        record = await self._decode(raw, key)
        user_id = record.get(self._user_id_field) if isinstance(record, dict) else None
        doomed = [key]
        if user_id is not None:
            doomed.append(self._keys.index_key(str(user_id), session_id))

        with _store_call("destroy", key=key):
            await self._client.delete(doomed)
        logger.debug("session_destroyed", session_id=session_id)

    async def exists(self, session_id: str) -> bool:
        key = self._keys.primary_key(session_id)
        with _store_call("exists", key=key):
            return await self._client.get(key) is not None

    # -- bulk operations -----------------------------------------------------

    async def clear(self) -> None:
        """Delete every session and index key under the prefix."""
        with _store_call("clear", pattern=self._keys.namespace_pattern()):
            keys = await self._scanner.namespace_keys()
            if not keys:
                return
            removed = await self._client.delete(keys)
        logger.info("sessions_cleared", removed=removed)

    async def clear_for_user(self, user_id: str) -> None:
        """Delete every session owned by *user_id*, along with its index keys."""
        with _store_call("clear_for_user", user_id=user_id):
            keys = await self._scanner.user_keys(user_id)
            if not keys:
                return
            removed = await self._client.delete(keys)
        logger.info("user_sessions_cleared", user_id=user_id, removed=removed)

    async def length(self) -> int:
        """Number of stored sessions, index keys excluded."""
        with _store_call("length", pattern=self._keys.primary_pattern()):
            return len(await self._scanner.primary_keys())

    async def ids(self) -> list[str]:
        with _store_call("ids", pattern=self._keys.primary_pattern()):
            keys = await self._scanner.primary_keys()
        return [self._keys.session_id(k) for k in keys]

    async def all(self) -> list[dict[str, Any]]:
        """Every stored record, each tagged with its session id under ``"id"``.

        Keys that expire between the scan and the fetch are skipped.
        """
        with _store_call("all", pattern=self._keys.primary_pattern()):
            keys = await self._scanner.primary_keys()
            if not keys:
                return []
            values = await self._client.mget(keys)

        sessions: list[dict[str, Any]] = []
        for key, raw in zip(keys, values, strict=True):
            if not raw:
                continue
            record = await self._decode(raw, key)
            record["id"] = self._keys.session_id(key)
            sessions.append(record)
        return sessions

    # -- helpers -------------------------------------------------------------

    def _check_session_id(self, session_id: str) -> None:
        if self._keys.separator in session_id:
            raise ValidationException(
                f"Session id must not contain the key separator '{self._keys.separator}'",
                code="SESSION_ID_INVALID",
                context={"session_id": session_id},
            )

    def _effective_ttl(self, record: dict[str, Any], override: int | None, session_id: str) -> int:
        try:
            return self.compute_ttl(record, override)
        except (TypeError, ValueError) as exc:
            raise ValidationException(
                f"Cannot derive a TTL for session '{session_id}': {exc}",
                code="TTL_INVALID",
                context={"session_id": session_id},
            ) from exc

    def _user_id(self, record: dict[str, Any], session_id: str) -> str:
        user_id = record.get(self._user_id_field) if isinstance(record, dict) else None
        if user_id is None or user_id == "":
            raise ValidationException(
                f"Session record has no '{self._user_id_field}'",
                code="USER_ID_MISSING",
                context={"session_id": session_id},
            )
        user_id = str(user_id)
        if self._keys.separator in user_id:
            raise ValidationException(
                f"User id must not contain the key separator '{self._keys.separator}'",
                code="USER_ID_INVALID",
                context={"session_id": session_id, "user_id": user_id},
            )
        return user_id

    async def _decode(self, raw: str, key: str) -> dict[str, Any]:
        try:
            record = self._serializer.parse(raw)
            if inspect.isawaitable(record):
                record = await record
        except Exception as exc:
            logger.error("session_decode_failed", key=key, error=str(exc))
            raise RecordDecodeException(
                f"Failed to decode session stored at '{key}': {exc}",
                code="DECODE_FAILED",
                context={"key": key},
            ) from exc
        return record

    @staticmethod
    def _partial_failure(operation: str, key: str, index_key: str, exc: Exception) -> PartialWriteException:
        logger.warning(
            "session_index_write_failed",
            operation=operation,
            key=key,
            index_key=index_key,
            error=str(exc),
        )
        return PartialWriteException(
            f"Session {operation} updated '{key}' but failed on index key '{index_key}': {exc}",
            code="PARTIAL_WRITE",
            context={"operation": operation, "key": key, "index_key": index_key},
        )
