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
"""Declared query properties and runtime query classes.

Query properties are pydantic fields. Wrapping and composing build new
query classes at runtime; these helpers translate property declarations
into field definitions and create the classes through the normal class
machinery, so pydantic sees them exactly as if they were written out.
"""

from __future__ import annotations

import copy
import types
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo

# (annotation, default-or-FieldInfo); _REQUIRED means no default.
FieldDefinition = tuple[Any, Any]

_REQUIRED: Any = object()


def field_definition(declaration: Any) -> FieldDefinition:
    """Normalise a property declaration.

    Accepted forms:
        ``float``: a required property of that type.
        ``(float, 0.5)``: type and default (default may be ``Field(...)``).
        ``Field(default=0.5)``: annotation taken from the field.
    """
    if isinstance(declaration, FieldInfo):
        return (declaration.annotation if declaration.annotation is not None else Any, declaration)
    if isinstance(declaration, tuple) and len(declaration) == 2:
        return declaration
    return (declaration, _REQUIRED)


def declared_fields(model: type[BaseModel]) -> dict[str, FieldDefinition]:
    """The property definitions of *model*, ready to be redeclared on another class."""
    return {name: (info.annotation, copy.copy(info)) for name, info in model.model_fields.items()}


def build_class(
    name: str,
    bases: tuple[type, ...],
    fields: Mapping[str, FieldDefinition],
    namespace: Mapping[str, Any] | None = None,
) -> type:
    """Create a class with *fields* declared as annotated attributes."""

    def exec_body(ns: dict[str, Any]) -> None:
        ns["__module__"] = bases[-1].__module__
        ns["__qualname__"] = name
        ns["__annotations__"] = {field: annotation for field, (annotation, _) in fields.items()}
        for field, (_, default) in fields.items():
            if default is not _REQUIRED:
                ns[field] = default
        ns.update(namespace or {})

    return types.new_class(name, bases, {}, exec_body)
