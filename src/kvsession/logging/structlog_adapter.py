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
"""StructlogAdapter — renders kvsession's structlog events through stdlib logging."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

from kvsession.config.properties.logging import LoggingProperties

PACKAGE_LOGGER = "kvsession"
_HANDLER_NAME = "kvsession-structlog"


class StructlogAdapter:
    """Sends the ``kvsession.*`` loggers to one stream handler.

    Only the ``kvsession`` logger tree is touched: the handler is attached
    there (replacing one installed by an earlier ``configure``), it stops
    propagating to the root logger, and ``level`` entries are applied below
    it. ``root`` maps to ``kvsession`` itself and a bare name such as
    ``session`` to ``kvsession.session``.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def configure(self, properties: LoggingProperties) -> None:
        structlog.configure(
            processors=self._processors(properties.format),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )

        package_logger = logging.getLogger(PACKAGE_LOGGER)
        for handler in list(package_logger.handlers):
            if handler.get_name() == _HANDLER_NAME:
                package_logger.removeHandler(handler)

        handler = logging.StreamHandler(self._stream or sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)
        package_logger.propagate = False

        for name, level in properties.level.items():
            logging.getLogger(self.logger_name(name)).setLevel(level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(self.logger_name(name))

    @staticmethod
    def logger_name(name: str) -> str:
        """Qualify *name* under the ``kvsession`` logger."""
        if name in ("root", PACKAGE_LOGGER):
            return PACKAGE_LOGGER
        if name.startswith(PACKAGE_LOGGER + "."):
            return name
        return f"{PACKAGE_LOGGER}.{name}"

    @staticmethod
    def _processors(fmt: str) -> list[structlog.types.Processor]:
        processors: list[structlog.types.Processor] = [
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ]
        if fmt == "json":
            processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))
        return processors
