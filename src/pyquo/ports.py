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
"""Outbound ports: the collaborators query objects are built on.

Query objects never talk to a database directly. They shape a
:class:`RelationPort` (a lazy, chainable query) and ask it to materialize,
and they hand loaded records to a :class:`PreloaderPort` to fill in
associations. The SQLAlchemy adapters in :mod:`pyquo.adapters.sqlalchemy`
are the default implementations.

Every builder method on a relation returns a *new* relation; a relation is
never mutated after construction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from typing import Any, Self


class RelationPort(ABC):
    """Lazy, chainable, materializable database query."""

    # -- shaping ---------------------------------------------------------

    @abstractmethod
    def select(self, *columns: Any) -> Self: ...

    @abstractmethod
    def where(self, *criteria: Any, **filters: Any) -> Self: ...

    @abstractmethod
    def order(self, *clauses: Any) -> Self: ...

    @abstractmethod
    def group(self, *columns: Any) -> Self: ...

    @abstractmethod
    def limit(self, value: int | None) -> Self: ...

    @abstractmethod
    def offset(self, value: int | None) -> Self: ...

    @abstractmethod
    def joins(self, *targets: Any) -> Self: ...

    @abstractmethod
    def left_outer_joins(self, *targets: Any) -> Self: ...

    @abstractmethod
    def includes(self, *associations: Any) -> Self: ...

    @abstractmethod
    def preload(self, *associations: Any) -> Self: ...

    @abstractmethod
    def eager_load(self, *associations: Any) -> Self: ...

    @abstractmethod
    def distinct(self, enabled: bool = True) -> Self: ...

    @abstractmethod
    def reorder(self, *clauses: Any) -> Self: ...

    @abstractmethod
    def extending(self, *extensions: Callable[[Any], Any]) -> Self: ...

    @abstractmethod
    def unscope(self, *parts: str) -> Self: ...

    @abstractmethod
    def merge(self, other: RelationPort) -> Self:
        """Intersect *other*'s conditions into this relation."""

    # -- materializing ---------------------------------------------------

    @abstractmethod
    def count(self) -> int:
        """Row count, re-selecting the primary key so any select list is ignored."""

    @abstractmethod
    def to_list(self) -> list[Any]: ...

    @abstractmethod
    def first(self, limit: int | None = None) -> Any: ...

    @abstractmethod
    def last(self, limit: int | None = None) -> Any: ...

    @abstractmethod
    def exists(self) -> bool: ...

    @abstractmethod
    def to_sql(self) -> str: ...

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())


class PreloaderPort(ABC):
    """Populates associations on records that are already loaded."""

    @abstractmethod
    def preload(self, records: Sequence[Any], associations: Sequence[Any]) -> Sequence[Any]:
        """Load *associations* for *records* in place and return *records*."""
