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
"""kvsession — Redis session persistence with per-user session indexes."""

from kvsession.core.config import Config
from kvsession.kernel.exceptions import (
    KvSessionException,
    PartialWriteException,
    RecordDecodeException,
    StoreCallException,
)
from kvsession.session.adapters.redis import RedisSessionStore
from kvsession.session.factory import create_session_store
from kvsession.session.ports.outbound import SessionStore

__version__ = "0.1.0"

__all__ = [
    "Config",
    "KvSessionException",
    "PartialWriteException",
    "RecordDecodeException",
    "RedisSessionStore",
    "SessionStore",
    "StoreCallException",
    "create_session_store",
]
