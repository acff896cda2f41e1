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
"""Session store configuration properties."""

from __future__ import annotations

from pydantic import BaseModel, Field

from kvsession.core.config import config_properties


@config_properties(prefix="kvsession.session")
class SessionStoreProperties(BaseModel):
    """Configuration for the session store (kvsession.session.*).

    ``ttl`` here is the static TTL in seconds; a per-record TTL function can
    only be supplied in code, via ``RedisSessionStore(ttl=...)``.
    """

    prefix: str = "sess:"
    scan_batch_size: int = Field(default=100, ge=1)
    ttl: int = 86400
    disable_ttl: bool = False
    disable_touch: bool = False
    user_id_field: str = Field(default="userId", min_length=1)
    redis_url: str = "redis://localhost:6379/0"
