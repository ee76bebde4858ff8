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
"""Tests for join accumulation across nested compositions."""

from __future__ import annotations

from blog import Author, Comment, Post, UnreadCommentsQuery

from pyquo import Relation, merge_instances


def _posts(session, title):
    return Relation(Post, session).where(title=title)


def _authors(session, name):
    return Relation(Author, session).where(name=name)


class TestNestedClassComposition:
    def test_explicit_joins_at_each_level(self, session, blog):
        inner = UnreadCommentsQuery.compose(_posts(session, "Goodbye"), joins="post")
        outer = inner.compose(_authors(session, "Bob"), joins={"post": "author"})
        assert outer.composition().joins == ({"post": "author"},)
        assert outer(session=session).count() == 1

    def test_shared_join_steps_are_applied_once(self, session, blog):
        inner = UnreadCommentsQuery.compose(_posts(session, "Hello World"), joins="post")
        outer = inner.compose(_authors(session, "Alice"), joins={"post": "author"})
        sql = outer(session=session).to_sql()
        assert sql.count("JOIN posts") == 1
        assert sql.count("JOIN authors") == 1

    def test_mismatched_author_gives_no_rows(self, session, blog):
        inner = UnreadCommentsQuery.compose(_posts(session, "Hello World"), joins="post")
        outer = inner.compose(_authors(session, "Bob"), joins={"post": "author"})
        assert not outer(session=session).exists()


class TestNestedInstanceMerging:
    def test_left_specification_joins_follow_explicit_joins(self, session, blog):
        query = UnreadCommentsQuery(session=session).joins("post")
        merged = query.merge(_authors(session, "Alice"), joins={"post": "author"})
        assert merged.composition().joins == ({"post": "author"}, "post")
        assert merged.count() == 3

    def test_merging_a_merged_instance(self, session, blog):
        inner = UnreadCommentsQuery(session=session).joins("post") + _posts(session, "Hello World")
        outer = inner.merge(_authors(session, "Alice"), joins={"post": "author"})
        assert outer.count() == 3
        assert {c.body for c in outer.to_list()} == {"Great post", "Buy cheap watches", "Agreed"}

    def test_relation_operands_keep_their_model(self, session, blog):
        merged = merge_instances(Relation(Comment, session).where(read=False), UnreadCommentsQuery(session=session))
        assert merged.model is Comment
