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
"""Query objects backed by an in-memory collection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, ClassVar

from pydantic import PrivateAttr
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import object_session

from pyquo.adapters.sqlalchemy import Relation, SqlAlchemyPreloader, mapping
from pyquo.exceptions import QueryDefinitionException
from pyquo.kinds import is_relation, is_sliceable
from pyquo.ports import PreloaderPort
from pyquo.query import Query, unwrap_unpaginated
from pyquo.struct import build_class, declared_fields, field_definition

logger = logging.getLogger(__name__)


class CollectionBackedQuery(Query):
    """A query over rows that are already in memory.

    Subclasses implement :meth:`collection`. Paging slices the collection by
    index, so it only applies to sequences; other iterables (sets,
    generators) are returned whole.

    Attributes:
        total_count_override: Known total row count. When set, the
            collection is taken to be a single, already-paged page: paging is
            disabled and ``total_count()`` reports this value.
        preloader: Fills associations requested with :meth:`preload`.
    """

    preloader: ClassVar[PreloaderPort] = SqlAlchemyPreloader()

    total_count_override: int | None = None

    _preload: tuple[Any, ...] = PrivateAttr(default=())

    @classmethod
    def wrap(
        cls,
        data: Any = None,
        props: Mapping[str, Any] | None = None,
        factory: Callable[[Any], Any] | None = None,
    ) -> type[CollectionBackedQuery]:
        """Build an anonymous collection-backed query class.

        Args:
            data: The collection returned by ``collection()``.
            props: Property declarations, as for ``RelationBackedQuery.wrap``.
            factory: Called with the query instance to build the collection;
                takes precedence over *data*.
        """
        if factory is not None:

            def collection(self: CollectionBackedQuery) -> Any:
                return factory(self)

        elif data is not None:

            def collection(self: CollectionBackedQuery) -> Any:
                return data

        else:
            raise QueryDefinitionException(
                "wrap() needs a collection or a factory", code="QUERY_WRAP_EMPTY", context={"query": cls.__name__}
            )
        fields = {name: field_definition(declaration) for name, declaration in (props or {}).items()}
        return build_class(
            f"{cls.__name__}Wrapper",
            (cls,),
            fields,
            {"collection": collection, "__pyquo_anonymous__": True},
        )

    def collection(self) -> Any:
        """Return the rows of this query."""
        raise NotImplementedError(f"{type(self).__name__} must define a 'collection' method")

    def query(self) -> Any:
        records = self.collection()
        if self._preload:
            if not isinstance(records, Sequence):
                records = list(records)
            self.preloader.preload(records, self._preload)
        return records

    def underlying_query(self) -> Any:
        return unwrap_unpaginated(self.query())

    def configured_query(self) -> Any:
        underlying = self.underlying_query()
        if not self.is_paged():
            return underlying
        if is_relation(underlying):
            return underlying.offset(self.offset).limit(self.sanitized_page_size)
        if is_sliceable(underlying):
            return underlying[self.offset : self.offset + self.sanitized_page_size]
        logger.debug("Not paging %s: %s cannot be sliced", type(self).__name__, type(underlying).__name__)
        return underlying

    def is_paged(self) -> bool:
        return self.total_count_override is None and super().is_paged()

    def is_eager(self) -> bool:
        return True

    def _known_total_count(self) -> int | None:
        return self.total_count_override

    # ------------------------------------------------------------------
    # Preloading
    # ------------------------------------------------------------------

    def _carry_state(self, clone: Query) -> None:
        super()._carry_state(clone)
        if isinstance(clone, CollectionBackedQuery):
            clone._preload = self._preload

    def preload(self, *associations: Any) -> CollectionBackedQuery:
        """Preload *associations* on the records returned by :meth:`collection`."""
        clone = self.copy()
        clone._preload = self._preload + associations
        return clone

    def includes(self, *associations: Any) -> CollectionBackedQuery:
        return self.preload(*associations)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_relation_backed_equivalent(self) -> Query:
        """Relation-backed query selecting the same entities by primary key.

        Raises:
            TypeError: The collection is empty, holds unmapped or mixed
                records, or the records are not attached to a session.
        """
        from pyquo.relation_backed_query import RelationBackedQuery

        records = list(self.underlying_query())
        if not records:
            raise TypeError("Cannot derive a relation from an empty collection")
        model = type(records[0])
        if not all(mapping.is_mapped_instance(record) and type(record) is model for record in records):
            raise TypeError("Only collections of mapped entities of a single class can become a relation")
        session = object_session(records[0])
        if session is None:
            raise TypeError(f"{model.__name__} records are not attached to a Session")

        key = mapping.primary_key(model)
        if len(key) != 1:
            raise TypeError(f"{model.__name__} has a composite primary key")
        ids = [sa_inspect(record).identity[0] for record in records]
        relation = Relation(model, session).where(key[0].in_(ids))

        props = declared_fields(type(self))
        props.pop("total_count_override", None)
        values = {name: value for name, value in self.to_dict().items() if name in props}
        equivalent = RelationBackedQuery.wrap(relation, props=props)(**values)
        equivalent._transformer = self._transformer
        return equivalent
