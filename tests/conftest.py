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
"""Shared fixtures: in-memory SQLite database seeded with the blog domain."""

from __future__ import annotations

import pytest
from blog import Base, Blog, seed
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from pyquo import settings


@pytest.fixture
def engine():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def blog(session: Session) -> Blog:
    return seed(session)


@pytest.fixture(autouse=True)
def _reset_settings():
    settings.reset()
    yield
    settings.reset()
