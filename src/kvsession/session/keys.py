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
"""Key scheme — primary, namespace and per-user index keys derived from a prefix."""

from __future__ import annotations

import re

_DEFAULT_PREFIX = "sess:"
_DEFAULT_SEPARATOR = ":"

# Word characters terminated by exactly one non-word separator, e.g. "sess:".
_PREFIX_RE = re.compile(r"\w+\W", re.ASCII)
_GLOB_SPECIAL_RE = re.compile(r"([\\*?\[\]])")


class KeyScheme:
    """Derives every store key used by the session store.

    Given the prefix ``sess:``:

    - primary key of session ``abc``: ``sess:abc``
    - index key of session ``abc`` owned by user ``u1``: ``sess:u1:abc``
      (its value is the primary key)
    - namespace pattern matching both kinds: ``sess*``

    A prefix that does not already end in a single separator gets ``:``
    appended, so every key splits into ``root + separator + suffix``.
    """

    __slots__ = ("_prefix", "_root", "_separator")

    def __init__(self, prefix: str | None = None) -> None:
        prefix = _DEFAULT_PREFIX if prefix is None else prefix
        if not _PREFIX_RE.fullmatch(prefix):
            prefix += _DEFAULT_SEPARATOR
        self._prefix = prefix
        self._root = prefix[:-1]
        self._separator = prefix[-1]

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def root(self) -> str:
        """The prefix without its trailing separator."""
        return self._root

    @property
    def separator(self) -> str:
        return self._separator

    def primary_key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    def user_prefix(self, user_id: str) -> str:
        return f"{self._root}{self._separator}{user_id}{self._separator}"

    def index_key(self, user_id: str, session_id: str) -> str:
        return f"{self.user_prefix(user_id)}{session_id}"

    def session_id(self, primary_key: str) -> str:
        """Strip the prefix from a primary key."""
        return primary_key[len(self._prefix) :]

    def is_primary_key(self, key: str) -> bool:
        """True for ``prefix + sid`` keys, False for index keys sharing the namespace."""
        return key.startswith(self._prefix) and self._separator not in self.session_id(key)

    def primary_key_for_index(self, index_key: str, user_id: str) -> str:
        """Derive the primary key an index key points at, without reading it."""
        return self.primary_key(index_key[len(self.user_prefix(user_id)) :])

    def primary_pattern(self) -> str:
        return f"{_escape_glob(self._prefix)}*"

    def namespace_pattern(self) -> str:
        return f"{_escape_glob(self._root)}*"

    def user_pattern(self, user_id: str) -> str:
        return f"{_escape_glob(self.user_prefix(user_id))}*"

    def __repr__(self) -> str:
        return f"KeyScheme(prefix={self._prefix!r})"


def _escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters so *value* matches literally."""
    return _GLOB_SPECIAL_RE.sub(r"\\\1", value)
