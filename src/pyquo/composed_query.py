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
"""Behaviour shared by composed query classes.

Composed classes are created at runtime by :mod:`pyquo.composing` with
:class:`ComposedQuery` mixed in front of a relation- or collection-backed
base. The operands and joins are kept on the class as a
:class:`Composition`; each evaluation rebuilds both operands from the
instance's properties and merges what they resolve to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar

from pyquo.exceptions import CompositionException
from pyquo.kinds import UnderlyingKind, can_concatenate, concatenate, kind_of
from pyquo.query import describe_operand, display_name, unwrap_unpaginated
from pyquo.specification import Specification

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Composition:
    """Operands of a composed query class.

    Attributes:
        left: Query class or relation on the left-hand side.
        right: Query class or relation on the right-hand side.
        joins: Joins applied to the left relation before merging.
        left_specification: Applied to the left operand when it is relation-backed.
        right_specification: Applied to the right operand when it is relation-backed.
    """

    left: Any
    right: Any
    joins: tuple[Any, ...] = ()
    left_specification: Specification | None = None
    right_specification: Specification | None = None


class ComposedQuery:
    """Mixin for composed query classes."""

    __pyquo_composition__: ClassVar[Composition]

    @classmethod
    def composition(cls) -> Composition:
        return cls.__pyquo_composition__

    def query(self) -> Any:
        composition = self.composition()
        return merge_left_and_right(self.left(), self.right(), composition.joins)

    def left(self) -> Any:
        """The left operand, instantiated from this query's properties when it is a class."""
        composition = self.composition()
        return self._operand(composition.left, composition.left_specification)

    def right(self) -> Any:
        composition = self.composition()
        return self._operand(composition.right, composition.right_specification)

    def _operand(self, operand: Any, specification: Specification | None) -> Any:
        from pyquo.relation_backed_query import RelationBackedQuery

        if not isinstance(operand, type):
            return operand
        values = {name: getattr(self, name) for name in operand.model_fields if name in type(self).model_fields}
        instance = operand(**values)
        if specification is not None and isinstance(instance, RelationBackedQuery):
            instance = instance.with_specification(specification)
        return instance

    @classmethod
    def describe_class(cls, paging: str | None = None) -> str:
        composition = cls.composition()
        return _describe(cls, describe_operand(composition.left), describe_operand(composition.right))

    def __repr__(self) -> str:
        return _describe(type(self), describe_operand(self.left()), describe_operand(self.right()))

    __str__ = __repr__


def _describe(cls: type, left: str, right: str) -> str:
    base = next(klass for klass in cls.__mro__ if not issubclass(klass, ComposedQuery))
    return f"{display_name(base)}<ComposedQuery>[{left}, {right}]"


def merge_left_and_right(left: Any, right: Any, joins: tuple[Any, ...] = ()) -> Any:
    """Merge two operands once both are resolved to relations or collections.

    Relation with relation merges the relations, applying *joins* to the left
    side first. A relation next to a collection is loaded and concatenated,
    relation rows first when the relation is on the left. Two collections are
    concatenated when the left one supports ``+``.

    Raises:
        CompositionException: The operands cannot be combined.
    """
    left_rel = unwrap_unpaginated(left)
    right_rel = unwrap_unpaginated(right)
    left_kind, right_kind = kind_of(left_rel), kind_of(right_rel)

    if left_kind is UnderlyingKind.RELATION and right_kind is UnderlyingKind.RELATION:
        logger.debug("Merging relations %r and %r with joins %r", left_rel, right_rel, joins)
        if joins:
            left_rel = left_rel.joins(*joins)
        return left_rel.merge(right_rel)
    if left_kind is UnderlyingKind.RELATION and right_kind is UnderlyingKind.COLLECTION:
        logger.debug("Loading %r to prepend it to a collection", left_rel)
        return left_rel.to_list() + list(right_rel)
    if left_kind is UnderlyingKind.COLLECTION and right_kind is not None and can_concatenate(left_rel):
        if right_kind is UnderlyingKind.RELATION:
            logger.debug("Loading %r to append it to a collection", right_rel)
            right_rel = right_rel.to_list()
        return concatenate(left_rel, right_rel)
    raise CompositionException(
        f"Cannot merge {type(left_rel).__name__} with {type(right_rel).__name__}",
        code="COMPOSE_INCOMPATIBLE",
        context={"left": type(left_rel).__name__, "right": type(right_rel).__name__},
    )
