# Copyright 2026 The PyQuo Authors
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
"""StdlibLoggingAdapter: LoggingPort for applications that keep plain stdlib logging."""

from __future__ import annotations

import logging
import sys
from typing import Any

from pyquo.logging.port import LevelConfiguredAdapter

_CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_JSON_FORMAT = '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'


class _StructuredLogger:
    """Wraps stdlib Logger to accept structlog-style calls: logger.info(event, **kwargs)."""

    __slots__ = ("_logger",)

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @staticmethod
    def _format(event: str, kwargs: dict[str, Any]) -> str:
        if kwargs:
            pairs = " ".join(f"{k}={v}" for k, v in kwargs.items())
            return f"{event} | {pairs}"
        return event

    def debug(self, event: str, **kwargs: Any) -> None:
        self._logger.debug(self._format(event, kwargs))

    def info(self, event: str, **kwargs: Any) -> None:
        self._logger.info(self._format(event, kwargs))

    def warning(self, event: str, **kwargs: Any) -> None:
        self._logger.warning(self._format(event, kwargs))

    def error(self, event: str, **kwargs: Any) -> None:
        self._logger.error(self._format(event, kwargs))

    def exception(self, event: str, **kwargs: Any) -> None:
        self._logger.exception(self._format(event, kwargs))


class StdlibLoggingAdapter(LevelConfiguredAdapter):
    """LoggingPort using only stdlib logging, rendering ``event | key=value``."""

    def get_logger(self, name: str) -> Any:
        return _StructuredLogger(logging.getLogger(name))

    def _setup(self) -> None:
        logging.basicConfig(
            format=_JSON_FORMAT if self._format == "json" else _CONSOLE_FORMAT,
            stream=sys.stdout,
            level=self._root_level_number(),
            force=True,
        )
