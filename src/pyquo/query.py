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
"""Query object base class.

A query object is an immutable set of declared properties (pydantic fields)
plus a :meth:`Query.query` method that builds either a relation or another
query object from them. Paging, result transformation and composition are
layered on top; nothing touches the database until a materializing call
(``count``, ``to_list``, ``first``, ``exists``, ...) is made.

Example::

    class UnreadComments(RelationBackedQuery):
        author_id: int

        def query(self):
            return comments.where(read=False, post={"author_id": self.author_id})

    UnreadComments(author_id=1, page=2, page_size=10).to_list()
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

from pyquo import settings
from pyquo.exceptions import QueryDefinitionException
from pyquo.kinds import is_collection, is_relation
from pyquo.settings import QuoProperties

if TYPE_CHECKING:
    from pyquo.results import Results

Transformer = Callable[[Any, int], Any]


def display_name(cls: type) -> str:
    """Class name, skipping anonymous classes made by ``wrap``."""
    for klass in cls.__mro__:
        if not klass.__dict__.get("__pyquo_anonymous__", False):
            return klass.__name__
    return cls.__name__


def describe_operand(operand: Any) -> str:
    """Short description of a composition operand (class, instance or relation)."""
    if isinstance(operand, type):
        return repr(operand) if hasattr(operand, "__pyquo_composition__") else display_name(operand)
    if isinstance(operand, Query):
        return repr(operand) if hasattr(operand, "__pyquo_composition__") else display_name(type(operand))
    return repr(operand)


def unwrap_unpaginated(value: Any) -> Any:
    """Resolve nested query objects down to a relation or collection, without paging."""
    return value.unwrap_unpaginated() if isinstance(value, Query) else value


def as_transformer(fn: Callable[..., Any]) -> Transformer:
    """Accept ``fn(row)`` as well as ``fn(row, index)``."""
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError):
        return lambda row, index: fn(row)
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return fn
    required = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    ]
    if len(required) >= 2:
        return fn
    return lambda row, index: fn(row)


class QueryMeta(type(BaseModel)):  # type: ignore[misc]
    """Metaclass giving query classes ``+`` (compose) and a readable ``repr``."""

    def __add__(cls, other: Any) -> type:
        return cls.compose(other)

    def __repr__(cls) -> str:
        return cls.describe_class()


class Query(BaseModel, metaclass=QueryMeta):
    """Base class of all query objects.

    Subclasses declare properties as pydantic fields and implement
    :meth:`query`. Instances are frozen; builder methods return copies.

    Attributes:
        page: 1-based page number; ``None`` disables paging.
        page_size: Rows per page, clamped to ``(0, max_page_size]`` when read
            through :attr:`sanitized_page_size`.
        quo_properties: Class-level paging settings. ``None`` uses the
            process-wide :func:`pyquo.settings.get_properties`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    quo_properties: ClassVar[QuoProperties | None] = None

    page: int | None = None
    page_size: int | None = None

    _transformer: Transformer | None = PrivateAttr(default=None)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        for name in cls.model_fields:
            owner = _method_owner(cls, name)
            if owner is not None:
                raise QueryDefinitionException(
                    f"Property '{name}' on {cls.__name__} would shadow the method defined on {owner.__name__}",
                    code="QUERY_PROPERTY_SHADOWS_METHOD",
                    context={"query": cls.__name__, "property": name},
                )

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------

    def query(self) -> Any:
        """Build the relation (or nested query object) this query stands for."""
        raise NotImplementedError(f"{type(self).__name__} must define a 'query' method")

    def underlying_query(self) -> Any:
        """The relation or collection, with options applied but without paging."""
        raise NotImplementedError

    def configured_query(self) -> Any:
        """:meth:`underlying_query` with paging applied."""
        raise NotImplementedError

    def unwrap(self) -> Any:
        return self.configured_query()

    def unwrap_unpaginated(self) -> Any:
        return self.underlying_query()

    # ------------------------------------------------------------------
    # Properties and copies
    # ------------------------------------------------------------------

    @classmethod
    def properties(cls) -> QuoProperties:
        return cls.quo_properties or settings.get_properties()

    def to_dict(self) -> dict[str, Any]:
        """Declared property values (shallow)."""
        return {name: getattr(self, name) for name in type(self).model_fields}

    def copy(self, **overrides: Any) -> Query:  # type: ignore[override]
        """New instance of the same class with *overrides* applied; keeps the transformer."""
        clone = type(self)(**{**self.to_dict(), **overrides})
        self._carry_state(clone)
        return clone

    def _carry_state(self, clone: Query) -> None:
        clone._transformer = self._transformer

    def transform(self, fn: Callable[..., Any]) -> Query:
        """Attach a row transformer and return ``self``.

        The transformer is called as ``fn(row, index)`` (or ``fn(row)``) on
        every materialized row; *index* is the row's position in the result
        of that call, not in the whole result set.
        """
        self._transformer = as_transformer(fn)
        return self

    def is_transforming(self) -> bool:
        return self._transformer is not None

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    def is_paged(self) -> bool:
        return self.page is not None

    @property
    def sanitized_page_size(self) -> int:
        props = self.properties()
        if self.page_size is not None and self.page_size > 0:
            return min(self.page_size, props.max_page_size)
        return props.default_page_size

    @property
    def offset(self) -> int:
        """Row offset of the current page."""
        return self.sanitized_page_size * (max(self.page or 1, 1) - 1)

    def next_page_query(self) -> Query:
        return self.copy(page=(self.page or 1) + 1)

    def previous_page_query(self) -> Query:
        return self.copy(page=max((self.page or 1) - 1, 1))

    # ------------------------------------------------------------------
    # Kind
    # ------------------------------------------------------------------

    def is_relation(self) -> bool:
        return is_relation(self.configured_query())

    def is_collection(self) -> bool:
        return is_collection(self.configured_query())

    def is_eager(self) -> bool:
        return False

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    @classmethod
    def compose(cls, right: Any, joins: Any = None) -> type:
        """Compose this class with another query class or a relation into a new class."""
        from pyquo import composing
        from pyquo.collection_backed_query import CollectionBackedQuery

        props = cls.properties()
        collection = issubclass(cls, CollectionBackedQuery) or (
            isinstance(right, type) and issubclass(right, CollectionBackedQuery)
        )
        if collection:
            base = settings.collection_backed_query_base_class(props)
        else:
            base = settings.relation_backed_query_base_class(props)
        return composing.composer(base, cls, right, joins=joins)

    def merge(self, right: Any, joins: Any = None) -> Query:
        """Merge with another query object or relation into a composed query instance."""
        from pyquo import composing

        return composing.merge_instances(self, right, joins=joins)

    def __add__(self, right: Any) -> Query:
        return self.merge(right)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def results(self) -> Results:
        """Materialization wrapper over :meth:`configured_query`."""
        from pyquo.results import CollectionResults, RelationResults

        configured = self.configured_query()
        if is_relation(configured):
            return RelationResults(self, configured, transformer=self._transformer)
        return CollectionResults(self, configured, transformer=self._transformer, total_count=self._known_total_count())

    def _known_total_count(self) -> int | None:
        return None

    def count(self) -> int:
        return self.results().count()

    def total_count(self) -> int:
        return self.results().total_count()

    def size(self) -> int:
        return self.results().size()

    def page_count(self) -> int:
        return self.results().page_count()

    def first(self, limit: int | None = None) -> Any:
        return self.results().first(limit)

    def first_or_raise(self, limit: int | None = None) -> Any:
        return self.results().first_or_raise(limit)

    def last(self, limit: int | None = None) -> Any:
        return self.results().last(limit)

    def to_list(self) -> list[Any]:
        return self.results().to_list()

    def exists(self) -> bool:
        return self.results().exists()

    def is_empty(self) -> bool:
        return self.results().is_empty()

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    @classmethod
    def describe_class(cls, paging: str | None = None) -> str:
        name = "(anonymous)" if cls.__dict__.get("__pyquo_anonymous__", False) else cls.__name__
        parent = display_name(cls.__mro__[1])
        return f"{name}<{parent}{' ' + paging if paging else ''}>"

    def __repr__(self) -> str:
        paging = "paginated" if self.is_paged() else "not paginated"
        fields = ", ".join(f"{name}={value!r}" for name, value in self.to_dict().items())
        return f"{type(self).describe_class(paging)}({fields})"

    __str__ = __repr__


def _method_owner(cls: type, name: str) -> type | None:
    for klass in cls.__mro__[1:]:
        if klass is BaseModel or klass is object:
            continue
        attr = klass.__dict__.get(name)
        if isinstance(attr, (property, classmethod, staticmethod)) or inspect.isfunction(attr):
            return klass
    return None
