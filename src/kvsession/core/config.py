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
"""Configuration for kvsession: YAML files, packaged defaults and ``KVSESSION_*`` env vars."""

from __future__ import annotations

import importlib.resources
import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from kvsession.kernel.exceptions import ConfigurationException

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

# ${NAME} or ${NAME:default}, resolved from the environment.
_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")

_CONFIG_PROPERTIES_ATTR = "__kvsession_config_prefix__"

_ENV_PREFIX = "KVSESSION_"
_DEFAULTS_PACKAGE = "kvsession.resources"
_DEFAULTS_FILE = "kvsession-defaults.yaml"


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a Pydantic model as bindable to a configuration prefix.

    Usage:
        @config_properties(prefix="kvsession.session")
        class SessionStoreProperties(BaseModel):
            prefix: str = "sess:"
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


class Config:
    """Nested settings with dot-notation access.

    Priority (highest wins):
    1. ``KVSESSION_*`` environment variables
    2. values from the dict or YAML file
    3. packaged defaults (``kvsession-defaults.yaml``)
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}

    @classmethod
    def from_file(cls, path: str | Path, load_defaults: bool = True) -> Config:
        """Load *path* over the packaged defaults; a missing file yields the defaults alone."""
        path = Path(path)
        data = cls._load_defaults() if load_defaults else {}
        if path.exists():
            with open(path) as f:
                data = _deep_merge(data, yaml.safe_load(f) or {})
        return cls(data)

    @staticmethod
    def _load_defaults() -> dict[str, Any]:
        defaults_file = importlib.resources.files(_DEFAULTS_PACKAGE).joinpath(_DEFAULTS_FILE)
        with importlib.resources.as_file(defaults_file) as p, open(p) as f:
            return yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Value at a dot-notation *key*; env vars win and ``${...}`` placeholders are expanded."""
        env_val = os.environ.get(_env_key(key))
        if env_val is not None:
            return env_val

        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or current.get(part) is None:
                return default
            current = current[part]

        if isinstance(current, str):
            return _expand(current)
        return current

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Get all values under a prefix as a dict."""
        current: Any = self._data
        for part in prefix.split("."):
            if not isinstance(current, dict):
                return {}
            current = current.get(part, {})
        return current if isinstance(current, dict) else {}

    def bind(self, config_cls: type[M]) -> M:
        """Build a ``@config_properties`` model from its section.

        File keys may be kebab-case (``scan-batch-size``). An environment
        variable for a scalar field overrides the file value; nested mappings
        are taken from the file only.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(
                f"{config_cls.__name__} is not decorated with @config_properties",
                code="CONFIG_NOT_BINDABLE",
            )

        section = {k.replace("-", "_"): v for k, v in self.get_section(prefix).items()}
        try:
            for name in config_cls.model_fields:
                value = section.get(name)
                if isinstance(value, dict):
                    continue
                env_val = os.environ.get(_env_key(f"{prefix}.{name}"))
                if env_val is not None:
                    section[name] = env_val
                elif isinstance(value, str):
                    section[name] = _expand(value)
            return config_cls.model_validate(section)
        except (ValidationError, ValueError) as exc:
            raise ConfigurationException(
                f"Configuration validation failed for '{config_cls.__name__}' (prefix='{prefix}'):\n{exc}",
                code="CONFIG_INVALID",
                context={"prefix": prefix},
            ) from exc


def _env_key(key: str) -> str:
    """Map ``kvsession.session.scan-batch-size`` to ``KVSESSION_SESSION_SCAN_BATCH_SIZE``."""
    base = key.removeprefix("kvsession.")
    return _ENV_PREFIX + base.upper().replace(".", "_").replace("-", "_")


def _expand(value: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        env_val = os.environ.get(name)
        if env_val is not None:
            return env_val
        if default is not None:
            return default
        raise ValueError(f"Environment variable '{name}' is not set and '{match.group(0)}' has no default")

    return _PLACEHOLDER_RE.sub(_replace, value)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
