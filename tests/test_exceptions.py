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
"""Tests for the PyQuo exception hierarchy."""

from pyquo import CompositionException, PyQuoException, QueryDefinitionException, RecordNotFoundException


class TestPyQuoException:
    def test_basic_creation(self):
        exc = PyQuoException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_code_and_context(self):
        exc = PyQuoException("cannot merge", code="COMPOSE_INCOMPATIBLE", context={"left": "int"})
        assert exc.code == "COMPOSE_INCOMPATIBLE"
        assert exc.context["left"] == "int"

    def test_context_is_not_shared(self):
        exc = PyQuoException("test")
        exc.context["key"] = "value"
        assert PyQuoException("test2").context == {}


class TestExceptionHierarchy:
    def test_query_definition_is_value_error(self):
        assert issubclass(QueryDefinitionException, PyQuoException)
        assert issubclass(QueryDefinitionException, ValueError)

    def test_composition_is_value_error(self):
        assert issubclass(CompositionException, PyQuoException)
        assert issubclass(CompositionException, ValueError)

    def test_record_not_found_is_lookup_error(self):
        assert issubclass(RecordNotFoundException, PyQuoException)
        assert issubclass(RecordNotFoundException, LookupError)
