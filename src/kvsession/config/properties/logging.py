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
"""Logging configuration properties."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from kvsession.core.config import config_properties


@config_properties(prefix="kvsession.logging")
class LoggingProperties(BaseModel):
    """Configuration for kvsession's own log output (kvsession.logging.*).

    ``level.root`` is the level of the ``kvsession`` logger; other entries
    name loggers below it, e.g. ``level.session: DEBUG``.
    """

    enabled: bool = True
    format: Literal["console", "json"] = "console"
    level: dict[str, str] = Field(default_factory=lambda: {"root": "INFO"})

    @field_validator("level")
    @classmethod
    def _known_levels(cls, value: dict[str, str]) -> dict[str, str]:
        levels = {name: str(level).upper() for name, level in value.items()}
        for name, level in levels.items():
            if not isinstance(logging.getLevelName(level), int):
                raise ValueError(f"Unknown log level {level!r} for '{name}'")
        return levels
