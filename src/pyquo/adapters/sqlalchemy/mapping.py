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
"""Name resolution against mapped classes.

Relations accept plain names (``"post"``, ``"-created_at"``,
``"post.author"``) wherever SQLAlchemy wants attributes; these helpers turn
them into mapped attributes, orderings, and loader options.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from sqlalchemy import ColumnElement, inspect, literal_column, text
from sqlalchemy.orm import QueryableAttribute, RelationshipProperty, joinedload, selectinload

_LOADER_STRATEGIES: dict[str, Callable[..., Any]] = {
    "selectinload": selectinload,
    "joinedload": joinedload,
}


def attribute(model: type, name: str) -> QueryableAttribute[Any]:
    """Return the mapped attribute *name* of *model*."""
    attr = getattr(model, name, None)
    if not isinstance(attr, QueryableAttribute):
        raise ValueError(f"{model.__name__} has no mapped attribute named '{name}'")
    return attr


def relationship(model: type, name: str) -> QueryableAttribute[Any]:
    """Return the relationship attribute *name* of *model*."""
    attr = attribute(model, name)
    if not isinstance(attr.property, RelationshipProperty):
        raise ValueError(f"'{model.__name__}.{name}' is not a relationship")
    return attr


def related_class(attr: QueryableAttribute[Any]) -> type:
    """The class on the far side of a relationship attribute."""
    return attr.property.mapper.class_


def primary_key(model: type) -> tuple[Any, ...]:
    return tuple(inspect(model).primary_key)


def is_mapped_instance(obj: Any) -> bool:
    return not isinstance(obj, type) and inspect(obj, raiseerr=False) is not None


def column(model: type, value: Any) -> Any:
    """Resolve a select/group entry: attribute names become attributes, other strings raw SQL."""
    if isinstance(value, str):
        attr = getattr(model, value, None)
        return attr if isinstance(attr, QueryableAttribute) else literal_column(value)
    return value


def criteria(model: type, values: Iterable[Any], filters: dict[str, Any]) -> list[Any]:
    """Normalise ``where`` arguments into SQL expressions.

    Strings become ``text()``, dicts and keyword filters become equality tests
    (``None`` -> IS NULL, sequences -> IN, nested dicts keyed by relationship
    name filter the related model).
    """
    resolved: list[Any] = []
    for value in values:
        if value is None:
            continue
        if isinstance(value, str):
            resolved.append(text(value))
        elif isinstance(value, dict):
            resolved.extend(_equality(model, value))
        else:
            resolved.append(value)
    resolved.extend(_equality(model, filters))
    return resolved


def _equality(model: type, filters: dict[str, Any]) -> Iterator[ColumnElement[bool]]:
    for name, value in filters.items():
        if isinstance(value, dict):
            yield from _equality(related_class(relationship(model, name)), value)
            continue
        col = attribute(model, name)
        if value is None:
            yield col.is_(None)
        elif isinstance(value, (list, tuple, set, frozenset)):
            yield col.in_(list(value))
        else:
            yield col == value


def orderings(model: type, clauses: Iterable[Any]) -> list[Any]:
    """Resolve ``order`` arguments: ``"name"``, ``"-name"``, ``{"name": "desc"}`` or expressions."""
    resolved: list[Any] = []
    for clause in clauses:
        if clause is None:
            continue
        if isinstance(clause, dict):
            for name, direction in clause.items():
                col = attribute(model, name)
                resolved.append(col.desc() if str(direction).lower() == "desc" else col.asc())
        elif isinstance(clause, str):
            name = clause.removeprefix("-")
            col = getattr(model, name, None)
            if isinstance(col, QueryableAttribute):
                resolved.append(col.desc() if clause.startswith("-") else col.asc())
            else:
                resolved.append(text(clause))
        else:
            resolved.append(clause)
    return resolved


def join_path(model: type, target: Any) -> list[Any]:
    """Flatten a join argument into an ordered list of join targets.

    ``"post"`` -> ``[Comment.post]``; ``{"post": "author"}`` ->
    ``[Comment.post, Post.author]``; attributes and mapped classes pass through.
    """
    if target is None:
        return []
    if isinstance(target, (list, tuple)):
        return [step for item in target for step in join_path(model, item)]
    if isinstance(target, dict):
        steps: list[Any] = []
        for name, nested in target.items():
            attr = relationship(model, name) if isinstance(name, str) else name
            steps.append(attr)
            steps.extend(join_path(related_class(attr), nested))
        return steps
    if isinstance(target, str):
        return [relationship(model, target)]
    return [target]


def loader_options(model: type, associations: Iterable[Any], strategy: str) -> list[Any]:
    """Build loader options for relationship names, dotted paths, or attributes.

    Anything else is assumed to already be a loader option and passes through.
    """
    options: list[Any] = []
    for association in associations:
        for path in _paths(association):
            if isinstance(path, (str, QueryableAttribute)):
                options.append(_chain(model, path, strategy))
            else:
                options.append(path)
    return options


def _paths(association: Any) -> list[Any]:
    if association is None:
        return []
    if isinstance(association, (list, tuple)):
        return [path for item in association for path in _paths(item)]
    if isinstance(association, dict):
        return [
            f"{name}.{path}" if isinstance(path, str) else name
            for name, nested in association.items()
            for path in (_paths(nested) or [None])
        ]
    return [association]


def _chain(model: type, path: str | QueryableAttribute[Any], strategy: str) -> Any:
    steps: list[str | QueryableAttribute[Any]] = path.split(".") if isinstance(path, str) else [path]
    option: Any = None
    current = model
    for step in steps:
        attr = relationship(current, step) if isinstance(step, str) else step
        option = _LOADER_STRATEGIES[strategy](attr) if option is None else getattr(option, strategy)(attr)
        current = related_class(attr)
    return option
