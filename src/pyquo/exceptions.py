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
"""Unified exception hierarchy for PyQuo.

All library exceptions inherit from PyQuoException, enabling unified
error handling. The concrete classes also inherit from the matching
builtin (``ValueError``, ``LookupError``) so callers that only know the
builtin contract keep working.

Categories:
- QueryDefinitionException: a query class or wrapper is declared incorrectly
- CompositionException: two operands cannot be composed or merged
- RecordNotFoundException: a strict accessor found no row
"""

from __future__ import annotations


class PyQuoException(Exception):
    """Base exception for all PyQuo errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "COMPOSE_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class QueryDefinitionException(PyQuoException, ValueError):
    """A query class declares a property that shadows a method, or a wrapper has nothing to wrap."""


class CompositionException(PyQuoException, ValueError):
    """Operands are of unsupported types or cannot be merged with each other."""


class RecordNotFoundException(PyQuoException, LookupError):
    """A strict accessor (``first_or_raise``) found no matching row."""
