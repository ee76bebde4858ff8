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
"""Immutable bag of query-shaping options.

A :class:`Specification` records *what* should be done to a relation
(select, where, order, ...) separately from the relation itself, so a
relation-backed query can carry its options around, merge them with other
options, and apply them only when the underlying relation is built.

Merging is right-biased: a key set by the newer options replaces the older
value for that key; other keys are kept. Every operation returns a new
specification.

Example::

    spec = Specification.build(where={"read": False}).order("-created_at")
    spec = spec.limit(10)
    relation = spec.apply_to(Relation(Comment, session))
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar

from pyquo.ports import RelationPort

# Application order. ``reorder`` and ``unscope`` run after ``order`` and
# ``where`` so they can undo them; ``distinct`` runs after ``select``.
OPTION_ORDER: tuple[str, ...] = (
    "select",
    "where",
    "order",
    "group",
    "limit",
    "offset",
    "joins",
    "left_outer_joins",
    "includes",
    "preload",
    "eager_load",
    "distinct",
    "reorder",
    "extending",
    "unscope",
)


def _args(value: Any) -> tuple[Any, ...]:
    return tuple(value) if isinstance(value, (list, tuple)) else (value,)


_APPLIERS: dict[str, Callable[[RelationPort, Any], RelationPort]] = {
    "select": lambda rel, v: rel.select(*_args(v)),
    "where": lambda rel, v: rel.where(*_args(v)),
    "order": lambda rel, v: rel.order(*_args(v)),
    "group": lambda rel, v: rel.group(*_args(v)),
    "limit": lambda rel, v: rel.limit(v),
    "offset": lambda rel, v: rel.offset(v),
    "joins": lambda rel, v: rel.joins(*_args(v)),
    "left_outer_joins": lambda rel, v: rel.left_outer_joins(*_args(v)),
    "includes": lambda rel, v: rel.includes(*_args(v)),
    "preload": lambda rel, v: rel.preload(*_args(v)),
    "eager_load": lambda rel, v: rel.eager_load(*_args(v)),
    "distinct": lambda rel, v: rel.distinct(),
    "reorder": lambda rel, v: rel.reorder(*_args(v)),
    "extending": lambda rel, v: rel.extending(*_args(v)),
    "unscope": lambda rel, v: rel.unscope(*_args(v)),
}


@dataclass(frozen=True, eq=False)
class Specification:
    """Named query-shaping options, applied to a relation in a fixed order.

    Attributes:
        options: Read-only mapping of option name to value. Valid names are
            listed in :data:`OPTION_ORDER`.
    """

    options: Mapping[str, Any] = field(default_factory=dict)

    _blank: ClassVar[Specification | None] = None

    def __post_init__(self) -> None:
        unknown = set(self.options) - set(OPTION_ORDER)
        if unknown:
            raise ValueError(f"Unknown specification option(s) {sorted(unknown)}; expected one of {list(OPTION_ORDER)}")
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @classmethod
    def build(cls, options: Mapping[str, Any] | None = None, **kwargs: Any) -> Specification:
        """Create a specification from a mapping and/or keyword options."""
        return cls({**(options or {}), **kwargs})

    @classmethod
    def blank(cls) -> Specification:
        """The shared empty specification."""
        if cls._blank is None:
            cls._blank = cls()
        return cls._blank

    # ------------------------------------------------------------------
    # Merging and applying
    # ------------------------------------------------------------------

    def merge(self, new_options: Mapping[str, Any] | Specification | None = None, **kwargs: Any) -> Specification:
        """Return a new specification with *new_options* overriding same-named keys."""
        if isinstance(new_options, Specification):
            new_options = new_options.options
        return Specification({**self.options, **(new_options or {}), **kwargs})

    def with_(self, **options: Any) -> Specification:
        return self.merge(options)

    def apply_to(self, relation: RelationPort) -> RelationPort:
        """Apply every present option to *relation*, in :data:`OPTION_ORDER`.

        Options whose value is ``None`` or ``False`` are skipped.
        """
        for name in OPTION_ORDER:
            value = self.options.get(name)
            if value is None or value is False:
                continue
            relation = _APPLIERS[name](relation, value)
        return relation

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return key in self.options

    def __getitem__(self, key: str) -> Any:
        return self.options[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.options

    @property
    def is_blank(self) -> bool:
        return not self.options

    def __repr__(self) -> str:
        return f"Specification({dict(self.options)!r})"

    # ------------------------------------------------------------------
    # Fluent setters: each replaces a single key
    # ------------------------------------------------------------------

    def select(self, *columns: Any) -> Specification:
        return self.merge(select=columns)

    def where(self, *criteria: Any, **filters: Any) -> Specification:
        return self.merge(where=criteria + ((filters,) if filters else ()))

    def order(self, *clauses: Any) -> Specification:
        return self.merge(order=clauses)

    def group(self, *columns: Any) -> Specification:
        return self.merge(group=columns)

    def limit(self, value: int | None) -> Specification:
        return self.merge(limit=value)

    def offset(self, value: int | None) -> Specification:
        return self.merge(offset=value)

    def joins(self, *targets: Any) -> Specification:
        return self.merge(joins=targets)

    def left_outer_joins(self, *targets: Any) -> Specification:
        return self.merge(left_outer_joins=targets)

    def includes(self, *associations: Any) -> Specification:
        return self.merge(includes=associations)

    def preload(self, *associations: Any) -> Specification:
        return self.merge(preload=associations)

    def eager_load(self, *associations: Any) -> Specification:
        return self.merge(eager_load=associations)

    def distinct(self, enabled: bool = True) -> Specification:
        return self.merge(distinct=enabled)

    def reorder(self, *clauses: Any) -> Specification:
        return self.merge(reorder=clauses)

    def extending(self, *extensions: Callable[[Any], Any]) -> Specification:
        return self.merge(extending=extensions)

    def unscope(self, *parts: str) -> Specification:
        return self.merge(unscope=parts)
