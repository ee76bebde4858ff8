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
"""PyQuo: composable query objects over SQLAlchemy relations and in-memory collections.

A query object declares its parameters as typed properties and builds a
relation (or another query object) from them. Query objects page, transform
their rows lazily, and compose: two query classes, two instances, or a query
and a relation merge into a new query whose SQL is the intersection of both.

Adapters:
    - ``pyquo.adapters.sqlalchemy``: default ``Relation`` and preloader on SQLAlchemy 2.0.
"""

from pyquo.adapters.sqlalchemy import Relation, SqlAlchemyPreloader
from pyquo.collection_backed_query import CollectionBackedQuery
from pyquo.composed_query import ComposedQuery, Composition
from pyquo.composing import composer, merge_instances
from pyquo.config import Config, config_properties
from pyquo.exceptions import (
    CompositionException,
    PyQuoException,
    QueryDefinitionException,
    RecordNotFoundException,
)
from pyquo.kinds import UnderlyingKind
from pyquo.ports import PreloaderPort, RelationPort
from pyquo.query import Query
from pyquo.relation_backed_query import RelationBackedQuery
from pyquo.results import CollectionResults, RelationResults, Results
from pyquo.settings import QuoProperties, configure
from pyquo.specification import Specification

__version__ = "0.1.0"

__all__ = [
    # Query objects
    "CollectionBackedQuery",
    "ComposedQuery",
    "Composition",
    "Query",
    "RelationBackedQuery",
    "Specification",
    "UnderlyingKind",
    # Results
    "CollectionResults",
    "RelationResults",
    "Results",
    # Composition
    "composer",
    "merge_instances",
    # Ports and adapters
    "PreloaderPort",
    "Relation",
    "RelationPort",
    "SqlAlchemyPreloader",
    # Configuration
    "Config",
    "QuoProperties",
    "config_properties",
    "configure",
    # Exceptions
    "CompositionException",
    "PyQuoException",
    "QueryDefinitionException",
    "RecordNotFoundException",
]
