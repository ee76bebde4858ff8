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
"""Query objects backed by a database relation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import PrivateAttr

from pyquo.exceptions import QueryDefinitionException
from pyquo.kinds import is_relation, is_sliceable
from pyquo.query import Query, unwrap_unpaginated
from pyquo.specification import Specification
from pyquo.struct import build_class, field_definition

if TYPE_CHECKING:
    from pyquo.collection_backed_query import CollectionBackedQuery


class RelationBackedQuery(Query):
    """A query whose :meth:`query` returns a relation or another query object.

    Query-shaping calls (``where``, ``order``, ``joins``, ...) are recorded on
    a :class:`~pyquo.specification.Specification` and applied to the relation
    when it is built, so the query object itself stays immutable::

        recent = RecentComments(since=yesterday).where(spam_score=None).order("-created_at")
        recent.page_count()

    The page offset is the read-only :attr:`offset`; a raw relation offset
    can still be set with ``with_(offset=n)``.
    """

    _specification: Specification = PrivateAttr(default_factory=Specification.blank)

    @classmethod
    def wrap(
        cls,
        data: Any = None,
        props: Mapping[str, Any] | None = None,
        factory: Callable[[Any], Any] | None = None,
    ) -> type[RelationBackedQuery]:
        """Build an anonymous query class around a relation or a factory.

        Args:
            data: Relation (or query object) returned as-is by ``query()``.
            props: Property declarations, e.g. ``{"since": datetime}`` or
                ``{"limit_to": (int, 10)}``.
            factory: Called with the query instance to build the relation;
                takes precedence over *data*.
        """
        if factory is not None:

            def query(self: RelationBackedQuery) -> Any:
                return factory(self)

        elif data is not None:

            def query(self: RelationBackedQuery) -> Any:
                return data

        else:
            raise QueryDefinitionException(
                "wrap() needs a relation or a factory", code="QUERY_WRAP_EMPTY", context={"query": cls.__name__}
            )
        fields = {name: field_definition(declaration) for name, declaration in (props or {}).items()}
        return build_class(
            f"{cls.__name__}Wrapper",
            (cls,),
            fields,
            {"query": query, "__pyquo_anonymous__": True},
        )

    # ------------------------------------------------------------------
    # Building the relation
    # ------------------------------------------------------------------

    @property
    def specification(self) -> Specification:
        return self._specification

    def validated_query(self) -> Any:
        """Call :meth:`query` and check it returned a relation or a query object."""
        built = self.query()
        if not (is_relation(built) or isinstance(built, Query)):
            raise TypeError(
                f"{type(self).__name__}.query() must return a relation or a query object, "
                f"got {type(built).__name__}"
            )
        return built

    def underlying_query(self) -> Any:
        relation = unwrap_unpaginated(self.validated_query())
        if is_relation(relation):
            return self._specification.apply_to(relation)
        return relation

    def configured_query(self) -> Any:
        underlying = self.underlying_query()
        if not self.is_paged():
            return underlying
        if is_relation(underlying):
            return underlying.offset(self.offset).limit(self.sanitized_page_size)
        if is_sliceable(underlying):
            return underlying[self.offset : self.offset + self.sanitized_page_size]
        return underlying

    @property
    def model(self) -> type | None:
        """Mapped class of the underlying relation."""
        return getattr(self.underlying_query(), "model", None)

    def to_sql(self) -> str | None:
        configured = self.configured_query()
        return configured.to_sql() if is_relation(configured) else None

    # ------------------------------------------------------------------
    # Specification
    # ------------------------------------------------------------------

    def _carry_state(self, clone: Query) -> None:
        super()._carry_state(clone)
        if isinstance(clone, RelationBackedQuery):
            clone._specification = self._specification

    def with_specification(self, specification: Specification) -> RelationBackedQuery:
        clone = self.copy()
        clone._specification = specification
        return clone

    def with_(self, **options: Any) -> RelationBackedQuery:
        """Merge raw specification options, e.g. ``with_(limit=5, offset=10)``."""
        return self.with_specification(self._specification.merge(options))

    def select(self, *columns: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.select(*columns))

    def where(self, *criteria: Any, **filters: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.where(*criteria, **filters))

    def order(self, *clauses: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.order(*clauses))

    def group(self, *columns: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.group(*columns))

    def limit(self, value: int | None) -> RelationBackedQuery:
        return self.with_specification(self._specification.limit(value))

    def joins(self, *targets: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.joins(*targets))

    def left_outer_joins(self, *targets: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.left_outer_joins(*targets))

    def includes(self, *associations: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.includes(*associations))

    def preload(self, *associations: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.preload(*associations))

    def eager_load(self, *associations: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.eager_load(*associations))

    def distinct(self, enabled: bool = True) -> RelationBackedQuery:
        return self.with_specification(self._specification.distinct(enabled))

    def reorder(self, *clauses: Any) -> RelationBackedQuery:
        return self.with_specification(self._specification.reorder(*clauses))

    def extending(self, *extensions: Callable[[Any], Any]) -> RelationBackedQuery:
        return self.with_specification(self._specification.extending(*extensions))

    def unscope(self, *parts: str) -> RelationBackedQuery:
        return self.with_specification(self._specification.unscope(*parts))

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_collection(self, total_count: int | None = None) -> CollectionBackedQuery:
        """Load the current page into a collection-backed query."""
        from pyquo.collection_backed_query import CollectionBackedQuery

        configured = self.configured_query()
        rows = configured.to_list() if is_relation(configured) else list(configured)
        collection = CollectionBackedQuery.wrap(rows)(total_count_override=total_count)
        collection._transformer = self._transformer
        return collection
