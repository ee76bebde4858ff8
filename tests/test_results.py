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
"""Tests for Results: counting, access, and transformation of materialized rows."""

from __future__ import annotations

import pytest
from blog import CommentsQuery, NumbersQuery

from pyquo import CollectionBackedQuery, CollectionResults, RecordNotFoundException, RelationResults


class TestRelationResults:
    def test_results_type(self, session):
        assert isinstance(CommentsQuery(session=session).results(), RelationResults)

    def test_counts(self, session, blog):
        results = CommentsQuery(session=session, page=1, page_size=2).results()
        assert results.total_count() == 5
        assert results.count() == 5
        assert results.size() == 5
        assert results.page_count() == 2
        assert len(results) == 2

    def test_exists_and_empty(self, session, blog):
        assert CommentsQuery(session=session).results().exists()
        assert CommentsQuery(session=session).where(body="nope").results().is_empty()

    def test_first_and_last(self, session, blog):
        results = CommentsQuery(session=session).results()
        assert results.first().body == "Great post"
        assert [c.body for c in results.last(2)] == ["Old news", "Agreed"]

    def test_first_or_raise(self, session, blog):
        assert CommentsQuery(session=session).first_or_raise().body == "Great post"
        with pytest.raises(RecordNotFoundException) as exc_info:
            CommentsQuery(session=session).where(body="nope").first_or_raise()
        assert exc_info.value.code == "RECORD_NOT_FOUND"

    def test_record_not_found_is_a_lookup_error(self, session, blog):
        with pytest.raises(LookupError):
            CommentsQuery(session=session).where(body="nope").first_or_raise(3)

    def test_transformer_applies_to_every_access(self, session, blog):
        query = CommentsQuery(session=session).transform(lambda c, i: f"{i}:{c.body}")
        assert query.first() == "0:Great post"
        assert query.last() == "0:Agreed"
        assert query.to_list()[1] == "1:Buy cheap watches"
        assert list(query.results())[4] == "4:Agreed"

    def test_iteration_and_membership(self, session, blog):
        results = CommentsQuery(session=session).results()
        assert blog.comments[0] in results
        assert len(list(results)) == 5


class TestCollectionResults:
    def test_results_type(self):
        assert isinstance(NumbersQuery().results(), CollectionResults)

    def test_counts(self):
        results = NumbersQuery(page=3, page_size=2).results()
        assert results.total_count() == 5
        assert results.page_count() == 1
        assert len(results) == 1

    def test_first_and_last_with_limits(self):
        results = NumbersQuery().results()
        assert results.first() == 1
        assert results.first(2) == [1, 2]
        assert results.last() == 5
        assert results.last(2) == [4, 5]
        assert results.last(10) == [1, 2, 3, 4, 5]

    def test_first_or_raise_on_empty(self):
        with pytest.raises(RecordNotFoundException):
            NumbersQuery(numbers=[]).first_or_raise()

    def test_map(self):
        assert NumbersQuery(numbers=[1, 2]).results().map(lambda n: n * 2) == [2, 4]

    def test_group_by_uses_transformed_rows(self):
        query = NumbersQuery(numbers=[1, 2, 3, 4]).transform(lambda n: n * 10)
        assert query.results().group_by(lambda n: n > 20) == {False: [10, 20], True: [30, 40]}

    def test_membership(self):
        assert 3 in NumbersQuery().results()
        assert 9 not in NumbersQuery().results()

    def test_repr(self):
        assert repr(NumbersQuery().results()).startswith("CollectionResults(NumbersQuery<")

    def test_generator_collection_is_read_once(self):
        class SquaresQuery(CollectionBackedQuery):
            def collection(self):
                return (n * n for n in range(4))

        results = SquaresQuery().results()
        assert results.exists()
        assert results.to_list() == [0, 1, 4, 9]
        assert len(results) == 4
        assert 4 in results
        assert results.total_count() == 4
