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
"""Query composition: class-level ``composer`` and instance-level ``merge_instances``."""

from __future__ import annotations

from typing import Any

from pyquo.composing.registry import ClassStrategyRegistry, InstanceStrategyRegistry, StrategyRegistry
from pyquo.composing.strategies import (
    BaseStrategy,
    ClassStrategy,
    InstanceStrategy,
    QueryAndQueryStrategy,
    QueryAndRelationStrategy,
    QueryClassesStrategy,
    RelationAndQueryStrategy,
    RelationAndRelationStrategy,
)
from pyquo.specification import Specification

class_strategies = ClassStrategyRegistry()
instance_strategies = InstanceStrategyRegistry()


def composer(
    base: type,
    left: Any,
    right: Any,
    joins: Any = None,
    left_spec: Specification | None = None,
    right_spec: Specification | None = None,
) -> type:
    """Create a composed query class deriving from *base*.

    Args:
        base: Relation- or collection-backed base class of the result.
        left: Query class or relation.
        right: Query class or relation.
        joins: Join target(s) applied to the left relation before merging.
        left_spec: Specification applied to the left operand.
        right_spec: Specification applied to the right operand.

    Raises:
        CompositionException: No strategy applies to the operands.
    """
    strategy = class_strategies.find_strategy(left, right)
    return strategy.compose(base, left, right, joins=joins, left_spec=left_spec, right_spec=right_spec)


def merge_instances(left: Any, right: Any, joins: Any = None) -> Any:
    """Merge two query instances (or relations) into a composed query instance."""
    strategy = instance_strategies.find_strategy(left, right)
    return strategy.compose(left, right, joins=joins)


__all__ = [
    "BaseStrategy",
    "ClassStrategy",
    "ClassStrategyRegistry",
    "InstanceStrategy",
    "InstanceStrategyRegistry",
    "QueryAndQueryStrategy",
    "QueryAndRelationStrategy",
    "QueryClassesStrategy",
    "RelationAndQueryStrategy",
    "RelationAndRelationStrategy",
    "StrategyRegistry",
    "class_strategies",
    "composer",
    "instance_strategies",
    "merge_instances",
]
