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
"""Association preloading for records that are already in memory."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, cast

from sqlalchemy import inspect, select, tuple_
from sqlalchemy.orm import Session, object_session

from pyquo.adapters.sqlalchemy import mapping
from pyquo.ports import PreloaderPort

logger = logging.getLogger(__name__)


class SqlAlchemyPreloader(PreloaderPort):
    """Fill associations on loaded entities with one ``SELECT ... IN`` per model.

    Records are grouped by class and re-selected by primary key with
    ``selectinload`` options and ``populate_existing``, so the identity map
    updates the very instances passed in. Records that are not mapped
    entities, or that are detached from any session, are left untouched.
    """

    def preload(self, records: Sequence[Any], associations: Sequence[Any]) -> Sequence[Any]:
        if not associations:
            return records

        by_model: dict[type, list[Any]] = {}
        for record in records:
            if mapping.is_mapped_instance(record) and object_session(record) is not None:
                by_model.setdefault(type(record), []).append(record)

        for model, instances in by_model.items():
            session = cast(Session, object_session(instances[0]))
            key = mapping.primary_key(model)
            identities = [inspect(obj).identity for obj in instances]
            identities = [identity for identity in identities if identity is not None]
            if not identities:
                continue
            if len(key) == 1:
                condition = key[0].in_([identity[0] for identity in identities])
            else:
                condition = tuple_(*key).in_(identities)
            stmt = (
                select(model)
                .where(condition)
                .options(*mapping.loader_options(model, associations, "selectinload"))
                .execution_options(populate_existing=True)
            )
            logger.debug("Preloading %s for %d %s record(s)", list(associations), len(identities), model.__name__)
            session.execute(stmt).scalars().all()

        return records
