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
"""Relation vs. in-memory collection classification."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from typing import Any

from pyquo.ports import RelationPort


class UnderlyingKind(enum.Enum):
    """What a query resolves to once every query-object layer is unwrapped."""

    RELATION = "relation"
    COLLECTION = "collection"


def is_relation(value: Any) -> bool:
    """A lazy database relation."""
    return isinstance(value, RelationPort)


def is_collection(value: Any) -> bool:
    """An in-memory iterable of rows. Strings and bytes are not collections."""
    return (
        not is_relation(value)
        and not isinstance(value, (str, bytes, type))
        and isinstance(value, Iterable)
    )


def kind_of(value: Any) -> UnderlyingKind | None:
    if is_relation(value):
        return UnderlyingKind.RELATION
    if is_collection(value):
        return UnderlyingKind.COLLECTION
    return None


def is_sliceable(value: Any) -> bool:
    """Whether pagination can slice *value* by index (lists, tuples, ranges)."""
    return isinstance(value, Sequence)


def can_concatenate(value: Any) -> bool:
    return hasattr(type(value), "__add__")


def concatenate(left: Any, right: Iterable[Any]) -> Any:
    """``left + right``, converting *right* to *left*'s sequence type when needed."""
    if isinstance(left, list):
        return left + list(right)
    if isinstance(left, tuple):
        return left + tuple(right)
    return left + right
