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
"""Materialized view over a configured query.

``Results`` is what a query object hands out when rows are actually needed.
Counting methods come in two flavours: ``total_count`` ignores paging,
``page_count`` counts only the current page. Every row returned passes
through the query's transformer, with the index local to that call::

    results = CommentsQuery(page=1, page_size=10).transform(lambda c, i: c.body).results()
    results.total_count(), results.first(3)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sized
from typing import TYPE_CHECKING, Any

from pyquo.exceptions import RecordNotFoundException

if TYPE_CHECKING:
    from pyquo.query import Query, Transformer


class Results(ABC):
    """Rows of a query, loaded on demand.

    Args:
        query: The query object the rows come from.
        configured: Its configured (paged) relation or collection.
        transformer: Applied as ``transformer(row, index)`` to returned rows.
    """

    def __init__(self, query: Query, configured: Any, transformer: Transformer | None = None) -> None:
        self._query = query
        self._configured = configured
        self._transformer = transformer

    @property
    def query(self) -> Query:
        return self._query

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _rows(self) -> list[Any]: ...

    @abstractmethod
    def _first_rows(self, limit: int) -> list[Any]: ...

    @abstractmethod
    def _last_rows(self, limit: int) -> list[Any]: ...

    @abstractmethod
    def exists(self) -> bool: ...

    @abstractmethod
    def total_count(self) -> int:
        """Number of rows ignoring paging."""

    @abstractmethod
    def page_count(self) -> int:
        """Number of rows on the current page."""

    # ------------------------------------------------------------------
    # Transformation
    # ------------------------------------------------------------------

    def _transform(self, rows: list[Any]) -> list[Any]:
        if self._transformer is None:
            return rows
        return [self._transformer(row, index) for index, row in enumerate(rows)]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.exists()

    def count(self) -> int:
        return self.total_count()

    def size(self) -> int:
        return self.total_count()

    def to_list(self) -> list[Any]:
        return self._transform(self._rows())

    def first(self, limit: int | None = None) -> Any:
        """First row (``None`` when empty), or a list of up to *limit* rows."""
        rows = self._transform(self._first_rows(1 if limit is None else limit))
        if limit is None:
            return rows[0] if rows else None
        return rows

    def first_or_raise(self, limit: int | None = None) -> Any:
        rows = self._transform(self._first_rows(1 if limit is None else limit))
        if not rows:
            raise RecordNotFoundException(
                f"No rows found for {self._query!r}",
                code="RECORD_NOT_FOUND",
                context={"query": type(self._query).__name__},
            )
        return rows[0] if limit is None else rows

    def last(self, limit: int | None = None) -> Any:
        """Last row (``None`` when empty), or a list of up to *limit* rows in order."""
        rows = self._transform(self._last_rows(1 if limit is None else limit))
        if limit is None:
            return rows[-1] if rows else None
        return rows

    def map(self, fn: Callable[[Any], Any]) -> list[Any]:
        return [fn(row) for row in self.to_list()]

    def group_by(self, fn: Callable[[Any], Any]) -> dict[Any, list[Any]]:
        """Group transformed rows by ``fn(row)``, keeping first-seen key order."""
        groups: dict[Any, list[Any]] = {}
        for row in self.to_list():
            groups.setdefault(fn(row), []).append(row)
        return groups

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())

    def __len__(self) -> int:
        return self.page_count()

    def __contains__(self, item: object) -> bool:
        return item in self.to_list()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._query!r})"


class RelationResults(Results):
    """Results of a relation; every call runs a query."""

    def _rows(self) -> list[Any]:
        return self._configured.to_list()

    def _first_rows(self, limit: int) -> list[Any]:
        return self._configured.first(limit)

    def _last_rows(self, limit: int) -> list[Any]:
        return self._configured.last(limit)

    def exists(self) -> bool:
        return self._configured.exists()

    def total_count(self) -> int:
        return self._query.unwrap_unpaginated().count()

    def page_count(self) -> int:
        return self._configured.count()


class CollectionResults(Results):
    """Results of an in-memory collection.

    Args:
        total_count: Known total, reported by :meth:`total_count` instead of
            the collection size.
    """

    def __init__(
        self,
        query: Query,
        configured: Any,
        transformer: Transformer | None = None,
        total_count: int | None = None,
    ) -> None:
        # One-shot iterables (generators) are read exactly once.
        if not isinstance(configured, Sized):
            configured = list(configured)
        super().__init__(query, configured, transformer)
        self._total_count = total_count

    def _rows(self) -> list[Any]:
        return list(self._configured)

    def _first_rows(self, limit: int) -> list[Any]:
        return self._rows()[:limit]

    def _last_rows(self, limit: int) -> list[Any]:
        rows = self._rows()
        return rows[max(len(rows) - limit, 0) :]

    def exists(self) -> bool:
        return self.page_count() > 0

    def total_count(self) -> int:
        if self._total_count is not None:
            return self._total_count
        return _size(self._query.unwrap_unpaginated())

    def page_count(self) -> int:
        return _size(self._configured)


def _size(collection: Any) -> int:
    if isinstance(collection, Sized):
        return len(collection)
    return sum(1 for _ in collection)
