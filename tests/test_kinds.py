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
"""Tests for relation and collection classification."""

import pytest
from blog import Comment

from pyquo import Relation, UnderlyingKind
from pyquo.kinds import can_concatenate, concatenate, is_sliceable, kind_of


class TestKindOf:
    def test_relation(self):
        assert kind_of(Relation(Comment)) is UnderlyingKind.RELATION

    @pytest.mark.parametrize("value", [[1], (1,), {1}, range(3), iter([1])])
    def test_collections(self, value):
        assert kind_of(value) is UnderlyingKind.COLLECTION

    @pytest.mark.parametrize("value", [None, 1, "abc", b"abc", list])
    def test_neither(self, value):
        assert kind_of(value) is None


class TestSequences:
    def test_sliceable(self):
        assert is_sliceable([1])
        assert is_sliceable(range(2))
        assert not is_sliceable({1})

    def test_concatenate_converts_right_operand(self):
        assert concatenate([1], (2, 3)) == [1, 2, 3]
        assert concatenate((1,), [2]) == (1, 2)

    def test_sets_cannot_concatenate(self):
        assert not can_concatenate({1})
