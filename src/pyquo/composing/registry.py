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
"""Ordered strategy registries: the first applicable strategy wins."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from pyquo.composing.strategies import (
    BaseStrategy,
    ClassStrategy,
    InstanceStrategy,
    QueryAndQueryStrategy,
    QueryAndRelationStrategy,
    QueryClassesStrategy,
    RelationAndQueryStrategy,
    RelationAndRelationStrategy,
    validate_instances,
)
from pyquo.exceptions import CompositionException

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseStrategy)


class StrategyRegistry(Generic[S]):
    """Strategies tried in registration order."""

    kind = "composition"

    def __init__(self, strategies: Iterable[S] | None = None) -> None:
        self._strategies: list[S] = list(strategies) if strategies is not None else self.default_strategies()

    def default_strategies(self) -> list[S]:
        return []

    @property
    def strategies(self) -> tuple[S, ...]:
        return tuple(self._strategies)

    def register(self, strategy: S, index: int | None = None) -> None:
        """Add *strategy*, at *index* if given, otherwise last."""
        if index is None:
            self._strategies.append(strategy)
        else:
            self._strategies.insert(index, strategy)

    def find_strategy(self, left: Any, right: Any) -> S:
        for strategy in self._strategies:
            if strategy.applicable(left, right):
                logger.debug("Using %r for %s and %s", strategy, type(left).__name__, type(right).__name__)
                return strategy
        raise CompositionException(
            f"No {self.kind} strategy found for {_name(left)} and {_name(right)}",
            code="COMPOSE_NO_STRATEGY",
            context={"left": _name(left), "right": _name(right)},
        )


class ClassStrategyRegistry(StrategyRegistry[ClassStrategy]):
    kind = "class composition"

    def default_strategies(self) -> list[ClassStrategy]:
        return [QueryClassesStrategy()]


class InstanceStrategyRegistry(StrategyRegistry[InstanceStrategy]):
    kind = "instance composition"

    def default_strategies(self) -> list[InstanceStrategy]:
        return [
            QueryAndRelationStrategy(),
            RelationAndQueryStrategy(),
            QueryAndQueryStrategy(),
            RelationAndRelationStrategy(),
        ]

    def find_strategy(self, left: Any, right: Any) -> InstanceStrategy:
        validate_instances(left, right)
        return super().find_strategy(left, right)


def _name(value: Any) -> str:
    return value.__name__ if isinstance(value, type) else type(value).__name__
