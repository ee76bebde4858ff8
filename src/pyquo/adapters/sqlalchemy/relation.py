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
"""Lazy, chainable relation built on SQLAlchemy 2.0 ``Select``.

A :class:`Relation` records query-shaping calls as immutable state and only
compiles a ``Select`` when it is materialized (or when :attr:`statement` is
read). That keeps relations cheap to copy and lets :meth:`Relation.merge`
intersect two relations part by part.

Example::

    comments = Relation(Comment, session)
    unread = comments.where(read=False).order("-created_at")
    unread.joins("post").where(Post.title.contains("SQL")).count()
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, func, literal_column, select
from sqlalchemy.orm import Session

from pyquo.adapters.sqlalchemy import mapping
from pyquo.ports import RelationPort

logger = logging.getLogger(__name__)

_LOADER_KINDS = {
    "includes": "selectinload",
    "preload": "selectinload",
    "eager_load": "joinedload",
}


@dataclass(frozen=True, eq=False)
class _Join:
    target: Any
    outer: bool = False


@dataclass(frozen=True, eq=False)
class _Loader:
    kind: str
    option: Any


@dataclass(frozen=True)
class _RelationState:
    columns: tuple[Any, ...] = ()
    criteria: tuple[Any, ...] = ()
    orderings: tuple[Any, ...] = ()
    groupings: tuple[Any, ...] = ()
    limit: int | None = None
    offset: int | None = None
    joins: tuple[_Join, ...] = ()
    loaders: tuple[_Loader, ...] = ()
    distinct: bool = False
    extensions: tuple[Callable[[Select[Any]], Select[Any]], ...] = ()


def _add_joins(existing: tuple[_Join, ...], new: list[_Join]) -> tuple[_Join, ...]:
    # Attributes compare by SQL expression, not equality, so dedupe on identity.
    joins = list(existing)
    for join in new:
        if not any(j.target is join.target and j.outer == join.outer for j in joins):
            joins.append(join)
    return tuple(joins)


class Relation(RelationPort):
    """SQLAlchemy implementation of :class:`~pyquo.ports.RelationPort`.

    Args:
        model: The mapped class rows are selected from.
        session: Session used to materialize. Shaping works without one.
    """

    def __init__(self, model: type, session: Session | None = None, *, _state: _RelationState | None = None) -> None:
        self._model = model
        self._session = session
        self._state = _state or _RelationState()

    @property
    def model(self) -> type:
        return self._model

    @property
    def session(self) -> Session | None:
        return self._session

    def with_session(self, session: Session) -> Relation:
        return Relation(self._model, session, _state=self._state)

    def _replace(self, **changes: Any) -> Relation:
        return Relation(self._model, self._session, _state=dataclasses.replace(self._state, **changes))

    def __repr__(self) -> str:
        return f"Relation[{self._model.__name__}]"

    # ------------------------------------------------------------------
    # Shaping
    # ------------------------------------------------------------------

    def select(self, *columns: Any) -> Relation:
        return self._replace(columns=self._state.columns + tuple(mapping.column(self._model, c) for c in columns))

    def where(self, *criteria: Any, **filters: Any) -> Relation:
        return self._replace(criteria=self._state.criteria + tuple(mapping.criteria(self._model, criteria, filters)))

    def order(self, *clauses: Any) -> Relation:
        return self._replace(orderings=self._state.orderings + tuple(mapping.orderings(self._model, clauses)))

    def reorder(self, *clauses: Any) -> Relation:
        return self._replace(orderings=tuple(mapping.orderings(self._model, clauses)))

    def group(self, *columns: Any) -> Relation:
        return self._replace(groupings=self._state.groupings + tuple(mapping.column(self._model, c) for c in columns))

    def limit(self, value: int | None) -> Relation:
        return self._replace(limit=value)

    def offset(self, value: int | None) -> Relation:
        return self._replace(offset=value)

    def joins(self, *targets: Any) -> Relation:
        return self._join(targets, outer=False)

    def left_outer_joins(self, *targets: Any) -> Relation:
        return self._join(targets, outer=True)

    def _join(self, targets: tuple[Any, ...], outer: bool) -> Relation:
        steps = [_Join(step, outer) for target in targets for step in mapping.join_path(self._model, target)]
        return self._replace(joins=_add_joins(self._state.joins, steps))

    def includes(self, *associations: Any) -> Relation:
        return self._load("includes", associations)

    def preload(self, *associations: Any) -> Relation:
        return self._load("preload", associations)

    def eager_load(self, *associations: Any) -> Relation:
        return self._load("eager_load", associations)

    def _load(self, kind: str, associations: tuple[Any, ...]) -> Relation:
        options = mapping.loader_options(self._model, associations, _LOADER_KINDS[kind])
        return self._replace(loaders=self._state.loaders + tuple(_Loader(kind, o) for o in options))

    def distinct(self, enabled: bool = True) -> Relation:
        return self._replace(distinct=bool(enabled))

    def extending(self, *extensions: Callable[[Select[Any]], Select[Any]]) -> Relation:
        """Register functions applied to the compiled ``Select``, in order."""
        return self._replace(extensions=self._state.extensions + tuple(extensions))

    def unscope(self, *parts: str) -> Relation:
        """Drop previously configured parts, e.g. ``unscope("where", "order")``."""
        state = self._state
        changes: dict[str, Any] = {}
        for part in parts:
            if part == "select":
                changes["columns"] = ()
            elif part == "where":
                changes["criteria"] = ()
            elif part == "order":
                changes["orderings"] = ()
            elif part == "group":
                changes["groupings"] = ()
            elif part in ("limit", "offset"):
                changes[part] = None
            elif part == "joins":
                changes["joins"] = tuple(j for j in changes.get("joins", state.joins) if j.outer)
            elif part == "left_outer_joins":
                changes["joins"] = tuple(j for j in changes.get("joins", state.joins) if not j.outer)
            elif part in _LOADER_KINDS:
                changes["loaders"] = tuple(lo for lo in changes.get("loaders", state.loaders) if lo.kind != part)
            elif part == "distinct":
                changes["distinct"] = False
            elif part == "extending":
                changes["extensions"] = ()
            else:
                raise ValueError(f"Cannot unscope '{part}'")
        return self._replace(**changes)

    def merge(self, other: RelationPort) -> Relation:
        """Intersect *other* into this relation.

        Conditions, joins, orderings, groupings, select lists, loader options
        and extensions are appended; *other*'s limit and offset win when set.
        """
        if not isinstance(other, Relation):
            raise TypeError(f"Cannot merge {type(other).__name__} into {self!r}")
        mine, theirs = self._state, other._state
        state = _RelationState(
            columns=mine.columns + theirs.columns,
            criteria=mine.criteria + theirs.criteria,
            orderings=mine.orderings + theirs.orderings,
            groupings=mine.groupings + theirs.groupings,
            limit=theirs.limit if theirs.limit is not None else mine.limit,
            offset=theirs.offset if theirs.offset is not None else mine.offset,
            joins=_add_joins(mine.joins, list(theirs.joins)),
            loaders=mine.loaders + theirs.loaders,
            distinct=mine.distinct or theirs.distinct,
            extensions=mine.extensions + theirs.extensions,
        )
        return Relation(self._model, self._session if self._session is not None else other._session, _state=state)

    # ------------------------------------------------------------------
    # Compiling
    # ------------------------------------------------------------------

    @property
    def statement(self) -> Select[Any]:
        """The ``Select`` this relation stands for."""
        return self._build()

    def _build(self, columns: tuple[Any, ...] | None = None, with_loaders: bool = True) -> Select[Any]:
        state = self._state
        columns = columns if columns is not None else state.columns
        stmt = select(*columns).select_from(self._model) if columns else select(self._model)
        for join in state.joins:
            stmt = stmt.join(join.target, isouter=join.outer)
        if state.criteria:
            stmt = stmt.where(*state.criteria)
        if state.groupings:
            stmt = stmt.group_by(*state.groupings)
        if state.orderings:
            stmt = stmt.order_by(*state.orderings)
        if state.distinct:
            stmt = stmt.distinct()
        if state.limit is not None:
            stmt = stmt.limit(state.limit)
        if state.offset is not None:
            stmt = stmt.offset(state.offset)
        if with_loaders and state.loaders:
            stmt = stmt.options(*(loader.option for loader in state.loaders))
        for extension in state.extensions:
            stmt = extension(stmt)
        return stmt

    def _key_columns(self) -> tuple[Any, ...]:
        return mapping.primary_key(self._model) or (literal_column("*"),)

    def to_sql(self) -> str:
        """Render the statement with bound values inlined."""
        kwargs: dict[str, Any] = {"compile_kwargs": {"literal_binds": True}}
        if self._session is not None:
            kwargs["dialect"] = self._session.get_bind().dialect
        return str(self.statement.compile(**kwargs))

    # ------------------------------------------------------------------
    # Materializing
    # ------------------------------------------------------------------

    def _require_session(self) -> Session:
        """Return the session or raise if none is configured."""
        if self._session is None:
            raise RuntimeError(f"No Session configured for {self!r}; pass one to Relation() or use with_session()")
        return self._session

    def to_list(self) -> list[Any]:
        session = self._require_session()
        stmt = self.statement
        logger.debug("Loading %r: %s", self, stmt)
        result = session.execute(stmt)
        if self._state.columns:
            return list(result.all())
        scalars = result.scalars()
        if any(loader.kind == "eager_load" for loader in self._state.loaders):
            scalars = scalars.unique()
        return list(scalars.all())

    def count(self) -> int:
        """Count rows by re-selecting the primary key inside a subquery.

        The configured select list is replaced, so projections that are not
        valid inside ``COUNT`` never reach the database. Limit and offset are
        respected.
        """
        session = self._require_session()
        inner = self._build(columns=self._key_columns(), with_loaders=False)
        stmt = select(func.count()).select_from(inner.subquery())
        logger.debug("Counting %r: %s", self, stmt)
        return session.execute(stmt).scalar_one()

    def exists(self) -> bool:
        session = self._require_session()
        inner = self._build(columns=self._key_columns(), with_loaders=False)
        return bool(session.execute(select(inner.exists())).scalar())

    def _ordered(self) -> Relation:
        if self._state.orderings:
            return self
        return self.order(*(col.asc() for col in mapping.primary_key(self._model)))

    def first(self, limit: int | None = None) -> Any:
        """First row (or ``None``), or a list of up to *limit* rows.

        Rows come in primary-key order when no ordering is configured. An
        existing limit caps *limit*.
        """
        wanted = 1 if limit is None else limit
        current = self._state.limit
        rows = self._ordered().limit(wanted if current is None else min(wanted, current)).to_list()
        if limit is None:
            return rows[0] if rows else None
        return rows

    def last(self, limit: int | None = None) -> Any:
        """Last row (or ``None``), or a list of up to *limit* rows in forward order."""
        wanted = 1 if limit is None else limit
        state = self._state
        if state.orderings or state.limit is not None or state.offset is not None:
            rows = self._ordered().to_list()
            rows = rows[max(len(rows) - wanted, 0) :]
        else:
            descending = (col.desc() for col in mapping.primary_key(self._model))
            rows = list(reversed(self.reorder(*descending).limit(wanted).to_list()))
        if limit is None:
            return rows[-1] if rows else None
        return rows
