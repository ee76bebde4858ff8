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
"""Paging and base-class settings shared by every query object.

A single :class:`QuoProperties` instance acts as the process-wide default.
It is read-mostly: set it once at start-up with :func:`configure` (directly
or from a :class:`~pyquo.config.Config`), then leave it alone. Query classes
that need different limits set the ``quo_properties`` class variable instead
of touching the global.

Usage::

    from pyquo import settings

    settings.configure(max_page_size=500)
    settings.configure(config=Config.from_file("pyquo.yaml"))
"""

from __future__ import annotations

import importlib
import logging
from functools import cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pyquo.config import Config, config_properties

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200


@config_properties(prefix="pyquo")
class QuoProperties(BaseModel):
    """Configuration for query objects (pyquo.*)."""

    model_config = ConfigDict(frozen=True)

    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    max_page_size: int = Field(default=MAX_PAGE_SIZE, ge=1)
    relation_backed_query_base_class: str = "pyquo.relation_backed_query.RelationBackedQuery"
    collection_backed_query_base_class: str = "pyquo.collection_backed_query.CollectionBackedQuery"

    @model_validator(mode="after")
    def _check_page_sizes(self) -> QuoProperties:
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) must not exceed max_page_size ({self.max_page_size})"
            )
        return self


_properties: QuoProperties | None = None


def get_properties() -> QuoProperties:
    """Return the process-wide properties, creating the defaults on first use."""
    global _properties
    if _properties is None:
        _properties = QuoProperties()
    return _properties


def configure(
    properties: QuoProperties | None = None,
    *,
    config: Config | None = None,
    **overrides: Any,
) -> QuoProperties:
    """Replace the process-wide properties.

    Args:
        properties: A ready-made instance. Takes precedence over *config*.
        config: Configuration to bind ``pyquo.*`` from.
        **overrides: Individual fields applied on top of the chosen source.
    """
    global _properties
    if properties is None:
        properties = config.bind(QuoProperties) if config is not None else QuoProperties()
    if overrides:
        properties = QuoProperties.model_validate({**properties.model_dump(), **overrides})
    _properties = properties
    logger.debug(
        "Configured query paging: default_page_size=%s max_page_size=%s",
        properties.default_page_size,
        properties.max_page_size,
    )
    return properties


def reset() -> None:
    """Forget the configured properties; the next read recreates the defaults."""
    global _properties
    _properties = None


@cache
def resolve_class(path: str) -> type:
    """Import ``package.module.ClassName`` and return the class."""
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ValueError(f"'{path}' is not a dotted class path")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ValueError(f"Module '{module_name}' has no attribute '{attr}'") from exc


def relation_backed_query_base_class(properties: QuoProperties | None = None) -> type:
    """Base class for composed queries whose operands are all relation-backed."""
    return resolve_class((properties or get_properties()).relation_backed_query_base_class)


def collection_backed_query_base_class(properties: QuoProperties | None = None) -> type:
    """Base class for composed queries with at least one collection-backed operand."""
    return resolve_class((properties or get_properties()).collection_backed_query_base_class)
