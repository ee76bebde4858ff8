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
"""LoggingPort: the logging contract plus the config parsing shared by adapters."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from pyquo.config import Config

LEVEL_SECTION = "pyquo.logging.level"
FORMAT_KEY = "pyquo.logging.format"


@runtime_checkable
class LoggingPort(Protocol):
    """Port defining the logging contract for PyQuo."""

    def configure(self, config: Config) -> None: ...
    def get_logger(self, name: str) -> Any: ...
    def set_level(self, name: str, level: str) -> None: ...


class LevelConfiguredAdapter:
    """Reads ``pyquo.logging.*`` and applies per-module levels.

    Subclasses provide :meth:`_setup` (handlers, renderers) and
    :meth:`get_logger`.

    Keys:
        pyquo.logging.level.root: Root level (default ``INFO``).
        pyquo.logging.level.<module>: Level for one logger, e.g.
            ``pyquo.logging.level.pyquo.composing: DEBUG``.
        pyquo.logging.format: ``console`` (default) or ``json``.
    """

    def __init__(self) -> None:
        self._root_level: str = "INFO"
        self._format: str = "console"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        level_section = _flatten(config.get_section(LEVEL_SECTION))
        self._root_level = str(level_section.pop("root", "INFO")).upper()
        self._module_levels = {k: str(v).upper() for k, v in level_section.items()}
        self._format = str(config.get(FORMAT_KEY, "console")).lower()

        self._setup()
        for module, level in self._module_levels.items():
            self.set_level(module, level)

    def set_level(self, name: str, level: str) -> None:
        """Set the log level for a specific stdlib logger."""
        logging.getLogger(name).setLevel(_level_number(level))

    def _setup(self) -> None:
        raise NotImplementedError

    def _root_level_number(self) -> int:
        return _level_number(self._root_level)


def _level_number(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def _flatten(section: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Collapse YAML nesting so ``{pyquo: {composing: DEBUG}}`` becomes ``{"pyquo.composing": "DEBUG"}``."""
    flat: dict[str, Any] = {}
    for key, value in section.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, name))
        else:
            flat[name] = value
    return flat
