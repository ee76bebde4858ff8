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
"""Tests for SqlAlchemyPreloader."""

from __future__ import annotations

from blog import Comment
from sqlalchemy import inspect

from pyquo import PreloaderPort, Relation, SqlAlchemyPreloader


class TestSqlAlchemyPreloader:
    def test_is_a_preloader_port(self):
        assert isinstance(SqlAlchemyPreloader(), PreloaderPort)

    def test_fills_association_in_place(self, session, blog):
        comments = Relation(Comment, session).to_list()
        session.expire_all()
        result = SqlAlchemyPreloader().preload(comments, ["post"])
        assert result is comments
        assert all("post" not in inspect(comment).unloaded for comment in comments)

    def test_nested_associations(self, session, blog):
        comments = Relation(Comment, session).to_list()
        session.expire_all()
        SqlAlchemyPreloader().preload(comments, ["post.author"])
        assert "author" not in inspect(comments[0].post).unloaded

    def test_skips_plain_objects(self):
        records = [1, "two", {"three": 3}]
        assert SqlAlchemyPreloader().preload(records, ["post"]) == records

    def test_no_associations_is_a_no_op(self, session, blog):
        comments = Relation(Comment, session).to_list()
        assert SqlAlchemyPreloader().preload(comments, []) is comments
