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
"""kvsession session — session persistence with a per-user index.

Import concrete store types from the adapter package::

    from kvsession.session.adapters.redis import RedisSessionStore
"""

from kvsession.session.codec import JsonSerializer, SessionSerializer
from kvsession.session.factory import create_session_store
from kvsession.session.keys import KeyScheme
from kvsession.session.ports.outbound import KeyValueClient, SessionStore
from kvsession.session.scan import ScanEnumerator
from kvsession.session.ttl import TtlPolicy

__all__ = [
    "JsonSerializer",
    "KeyScheme",
    "KeyValueClient",
    "ScanEnumerator",
    "SessionSerializer",
    "SessionStore",
    "TtlPolicy",
    "create_session_store",
]
