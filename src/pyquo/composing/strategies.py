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
"""Composition strategies.

Class strategies turn two query classes (or a class and a relation) into a
new composed class. Instance strategies merge two query instances (or an
instance and a relation) into an instance of such a class, carrying the
operands' property values and specifications across.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from pyquo import settings
from pyquo.composed_query import ComposedQuery, Composition
from pyquo.exceptions import CompositionException
from pyquo.kinds import is_relation
from pyquo.query import Query
from pyquo.relation_backed_query import RelationBackedQuery
from pyquo.specification import Specification
from pyquo.struct import FieldDefinition, build_class, declared_fields

logger = logging.getLogger(__name__)


def is_query_class(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, Query)


def validate_instances(left: Any, right: Any) -> None:
    """Raise unless both operands are query instances or relations."""
    for side, operand in (("left", left), ("right", right)):
        if not (isinstance(operand, Query) or is_relation(operand)):
            raise CompositionException(
                f"Cannot merge: {side} operand has incompatible type {type(operand).__name__}",
                code="COMPOSE_INVALID_INSTANCE",
                context={"side": side, "type": type(operand).__name__},
            )


def normalize_joins(joins: Any) -> list[Any]:
    if joins is None:
        return []
    if isinstance(joins, (list, tuple)):
        return [join for join in joins if join is not None]
    return [joins]


class BaseStrategy(ABC):
    """A composition rule: a predicate plus the composition it performs."""

    @abstractmethod
    def applicable(self, left: Any, right: Any) -> bool: ...

    @abstractmethod
    def compose(self, *args: Any, **kwargs: Any) -> Any: ...

    def __repr__(self) -> str:
        return type(self).__name__


# ----------------------------------------------------------------------
# Class strategies
# ----------------------------------------------------------------------


class ClassStrategy(BaseStrategy):
    """Strategies that build a composed query class."""

    def validate_query_classes(self, left: Any, right: Any) -> None:
        for side, operand in (("left", left), ("right", right)):
            if not (is_query_class(operand) or is_relation(operand)):
                raise CompositionException(
                    f"Cannot compose {left!r} and {right!r}: both must be query classes or relations. "
                    "Use merge_instances() to merge query instances.",
                    code="COMPOSE_INVALID_CLASS",
                    context={"side": side, "type": type(operand).__name__},
                )

    def collect_properties(self, left: Any, right: Any) -> dict[str, FieldDefinition]:
        """Union of both operands' properties; the right side wins on name clashes."""
        fields: dict[str, FieldDefinition] = {}
        for operand in (left, right):
            if is_query_class(operand):
                fields.update(declared_fields(operand))
        return fields

    def create_composed_class(
        self,
        base: type,
        fields: Mapping[str, FieldDefinition],
        composition: Composition,
    ) -> type:
        return build_class(
            f"Composed{base.__name__}",
            (ComposedQuery, base),
            fields,
            {"__pyquo_composition__": composition},
        )


class QueryClassesStrategy(ClassStrategy):
    """Query class or relation on either side."""

    def applicable(self, left: Any, right: Any) -> bool:
        return (is_query_class(left) or is_relation(left)) and (is_query_class(right) or is_relation(right))

    def compose(
        self,
        base: type,
        left: Any,
        right: Any,
        joins: Any = None,
        left_spec: Specification | None = None,
        right_spec: Specification | None = None,
    ) -> type:
        self.validate_query_classes(left, right)
        composing_joins = normalize_joins(joins)
        if left_spec is not None:
            composing_joins += normalize_joins(left_spec.get("joins"))
        composition = Composition(
            left=left,
            right=right,
            joins=tuple(composing_joins),
            left_specification=left_spec,
            right_specification=right_spec,
        )
        composed = self.create_composed_class(base, self.collect_properties(left, right), composition)
        logger.debug("Composed %r", composed)
        return composed


# ----------------------------------------------------------------------
# Instance strategies
# ----------------------------------------------------------------------


class InstanceStrategy(BaseStrategy):
    """Strategies that merge two instances into a composed query instance."""

    def validate_instances(self, left: Any, right: Any) -> None:
        validate_instances(left, right)

    def base_class_for(self, left: Any, right: Any) -> type:
        """Relation-backed base when both operands are relation-backed queries, else collection-backed."""
        props = _properties_of(left, right)
        if isinstance(left, RelationBackedQuery) and isinstance(right, RelationBackedQuery):
            return settings.relation_backed_query_base_class(props)
        return settings.collection_backed_query_base_class(props)

    def base_class_for_query(self, query: Query) -> type:
        props = query.properties()
        if isinstance(query, RelationBackedQuery):
            return settings.relation_backed_query_base_class(props)
        return settings.collection_backed_query_base_class(props)

    def _composer(self) -> Any:
        from pyquo.composing import composer

        return composer


class QueryAndRelationStrategy(InstanceStrategy):
    def applicable(self, left: Any, right: Any) -> bool:
        return isinstance(left, Query) and is_relation(right)

    def compose(self, left: Query, right: Any, joins: Any = None) -> Query:
        left_spec = left.specification if isinstance(left, RelationBackedQuery) else None
        composed = self._composer()(
            self.base_class_for_query(left), type(left), right, joins=joins, left_spec=left_spec
        )
        return composed(**left.to_dict())


class RelationAndQueryStrategy(InstanceStrategy):
    def applicable(self, left: Any, right: Any) -> bool:
        return is_relation(left) and isinstance(right, Query)

    def compose(self, left: Any, right: Query, joins: Any = None) -> Query:
        right_spec = right.specification if isinstance(right, RelationBackedQuery) else None
        composed = self._composer()(
            self.base_class_for_query(right), left, type(right), joins=joins, right_spec=right_spec
        )
        return composed(**right.to_dict())


class QueryAndQueryStrategy(InstanceStrategy):
    def applicable(self, left: Any, right: Any) -> bool:
        return isinstance(left, Query) and isinstance(right, Query)

    def compose(self, left: Query, right: Query, joins: Any = None) -> Query:
        values = left.to_dict()
        values.update({name: value for name, value in right.to_dict().items() if value is not None})
        # A known total describes one operand only.
        values.pop("total_count_override", None)
        left_spec = left.specification if isinstance(left, RelationBackedQuery) else None
        right_spec = right.specification if isinstance(right, RelationBackedQuery) else None
        composed = self._composer()(
            self.base_class_for(left, right),
            type(left),
            type(right),
            joins=joins,
            left_spec=left_spec,
            right_spec=right_spec,
        )
        return composed(**values)


class RelationAndRelationStrategy(InstanceStrategy):
    def applicable(self, left: Any, right: Any) -> bool:
        return is_relation(left) and is_relation(right)

    def compose(self, left: Any, right: Any, joins: Any = None) -> Query:
        composed = self._composer()(settings.relation_backed_query_base_class(), left, right, joins=joins)
        return composed()


def _properties_of(left: Query, right: Query) -> settings.QuoProperties:
    return type(left).quo_properties or type(right).quo_properties or settings.get_properties()
