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
"""Tests for the Query base: properties, paging, copies, and transformers."""

from __future__ import annotations

import pytest
from blog import CommentsQuery, NumbersQuery, UnreadCommentsQuery
from pydantic import ValidationError

from pyquo import CollectionBackedQuery, Query, QueryDefinitionException, QuoProperties, RelationBackedQuery, settings

# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestProperties:
    def test_declared_properties_are_validated(self):
        with pytest.raises(ValidationError):
            NumbersQuery(numbers="not a list")

    def test_unknown_property_rejected(self):
        with pytest.raises(ValidationError):
            NumbersQuery(colour="red")

    def test_page_coerced_to_int(self):
        assert NumbersQuery(page="2").page == 2

    def test_instances_are_frozen(self):
        query = NumbersQuery()
        with pytest.raises(ValidationError):
            query.page = 3

    def test_to_dict_lists_declared_properties(self):
        assert NumbersQuery(numbers=[1], page=1).to_dict() == {
            "page": 1,
            "page_size": None,
            "numbers": [1],
            "total_count_override": None,
        }

    def test_property_shadowing_a_method_is_rejected(self):
        with pytest.raises(QueryDefinitionException, match="shadow"):

            class CountingQuery(RelationBackedQuery):
                count: int = 0

    def test_property_shadowing_a_base_method_is_rejected(self):
        with pytest.raises(QueryDefinitionException) as exc_info:

            class TransformingQuery(CollectionBackedQuery):
                transform: str = "upper"

        assert exc_info.value.context == {"query": "TransformingQuery", "property": "transform"}

    def test_query_must_be_implemented(self):
        class Unfinished(RelationBackedQuery):
            pass

        with pytest.raises(NotImplementedError, match="must define a 'query' method"):
            Unfinished().to_list()


# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------


class TestPaging:
    def test_not_paged_without_page(self):
        assert not NumbersQuery().is_paged()
        assert NumbersQuery(page=1).is_paged()

    def test_offset(self):
        assert NumbersQuery(page=3, page_size=2).offset == 4
        assert NumbersQuery(page_size=2).offset == 0
        assert NumbersQuery(page=0, page_size=2).offset == 0

    def test_page_size_defaults(self):
        assert NumbersQuery().sanitized_page_size == 20

    def test_page_size_clamped_to_max(self):
        assert NumbersQuery(page_size=1000).sanitized_page_size == 200

    def test_non_positive_page_size_falls_back_to_default(self):
        assert NumbersQuery(page_size=0).sanitized_page_size == 20
        assert NumbersQuery(page_size=-5).sanitized_page_size == 20

    def test_process_wide_settings(self):
        settings.configure(default_page_size=5, max_page_size=10)
        assert NumbersQuery().sanitized_page_size == 5
        assert NumbersQuery(page_size=50).sanitized_page_size == 10

    def test_class_level_settings(self):
        class SmallPages(NumbersQuery):
            quo_properties = QuoProperties(default_page_size=2, max_page_size=3)

        assert SmallPages().sanitized_page_size == 2
        assert SmallPages(page_size=9).sanitized_page_size == 3
        assert NumbersQuery(page_size=9).sanitized_page_size == 9

    def test_next_and_previous_page(self):
        query = NumbersQuery(page=2, page_size=2)
        assert query.next_page_query().page == 3
        assert query.previous_page_query().page == 1
        assert query.previous_page_query().previous_page_query().page == 1

    def test_page_navigation_keeps_other_properties(self):
        query = NumbersQuery(numbers=[9, 8, 7], page=1, page_size=1)
        assert query.next_page_query().to_list() == [8]


# ---------------------------------------------------------------------------
# Copies and transformers
# ---------------------------------------------------------------------------


class TestCopy:
    def test_copy_with_overrides(self):
        query = NumbersQuery(numbers=[1, 2], page=1)
        copied = query.copy(page=2)
        assert copied is not query
        assert copied.page == 2
        assert copied.numbers == [1, 2]
        assert query.page == 1

    def test_copy_keeps_transformer(self):
        query = NumbersQuery(numbers=[1, 2]).transform(lambda n: n * 10)
        assert query.copy(page=1, page_size=1).to_list() == [10]

    def test_copy_keeps_specification(self, session, blog):
        query = CommentsQuery(session=session).where(read=True)
        assert query.copy(page=1).count() == 1


class TestTransform:
    def test_transform_returns_self(self):
        query = NumbersQuery()
        assert query.transform(str) is query
        assert query.is_transforming()

    def test_single_argument_transformer(self):
        assert NumbersQuery(numbers=[1, 2]).transform(lambda n: -n).to_list() == [-1, -2]

    def test_index_argument_transformer(self):
        assert NumbersQuery(numbers=[5, 5]).transform(lambda n, i: n + i).to_list() == [5, 6]

    def test_builtin_transformer(self):
        assert NumbersQuery(numbers=[1]).transform(str).to_list() == ["1"]

    def test_transformer_index_is_local_to_the_call(self):
        query = NumbersQuery(numbers=[1, 2, 3]).transform(lambda v, i: v + 100 + i)
        assert query.last(2) == [102, 104]
        assert query.first(2) == [101, 103]


# ---------------------------------------------------------------------------
# Kind and display
# ---------------------------------------------------------------------------


class TestKind:
    def test_relation_backed(self, session):
        query = CommentsQuery(session=session)
        assert query.is_relation()
        assert not query.is_collection()
        assert not query.is_eager()

    def test_collection_backed(self):
        query = NumbersQuery()
        assert query.is_collection()
        assert not query.is_relation()
        assert query.is_eager()

    def test_unwrap(self, session):
        query = NumbersQuery(numbers=[1, 2, 3], page=2, page_size=2)
        assert query.unwrap() == [3]
        assert query.unwrap_unpaginated() == [1, 2, 3]


class TestRepr:
    def test_class_repr(self):
        assert repr(UnreadCommentsQuery) == "UnreadCommentsQuery<RelationBackedQuery>"
        assert repr(Query) == "Query<BaseModel>"

    def test_anonymous_class_repr(self):
        assert repr(CollectionBackedQuery.wrap([1])) == "(anonymous)<CollectionBackedQuery>"

    def test_instance_repr(self):
        assert repr(NumbersQuery(numbers=[1], page=1)) == (
            "NumbersQuery<CollectionBackedQuery paginated>"
            "(page=1, page_size=None, total_count_override=None, numbers=[1])"
        )
        assert "not paginated" in str(NumbersQuery())
