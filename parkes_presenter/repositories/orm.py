"""SQLAlchemy record store.

Projects mapped ORM instances loaded through an ``AsyncSession``. Residency
checks read the instance state directly so they never emit SQL; missing
relationships are loaded with ``AsyncSession.refresh``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Hashable

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import MANYTOONE, InstanceState
from sqlalchemy.orm.base import NO_VALUE

from parkes_presenter.projections.constants import MISSING
from parkes_presenter.repositories.base import RecordIdentity

logger = logging.getLogger(__name__)


def _primary_key(state: InstanceState) -> Hashable:
    """Get the primary key of an instance, unwrapping single-column keys."""
    if state.identity is None:
        # Transient and pending instances have no database identity yet
        return id(state.obj())
    return state.identity[0] if len(state.identity) == 1 else state.identity


def _loaded(state: InstanceState, key: str) -> Any:
    value = state.attrs[key].loaded_value
    return MISSING if value is NO_VALUE else value


class SQLAlchemyStore:
    """Record store over an async SQLAlchemy session.

    The type name of a record is its mapped class name. Fetches share one
    session, which does not allow concurrent operations, so they are
    serialized with a lock.
    """

    def __init__(self, db: AsyncSession):
        """Initialize store with database session.

        Args:
            db: Async SQLAlchemy session the records belong to.
        """
        self.db = db
        self._lock = asyncio.Lock()

    def identity(self, record: Any) -> RecordIdentity:
        state = inspect(record)
        return _primary_key(state), state.mapper.class_.__name__

    def get_attribute(self, record: Any, name: str) -> Any:
        state = inspect(record)
        if name in state.mapper.attrs:
            return _loaded(state, name)
        return getattr(record, name, MISSING)

    def get_resident_association(self, record: Any, name: str) -> Any:
        state = inspect(record)
        if name not in state.mapper.relationships:
            return MISSING
        return _loaded(state, name)

    async def fetch_association(self, record: Any, name: str) -> Any:
        state = inspect(record)
        if name not in state.mapper.relationships:
            return None
        async with self._lock:
            logger.debug("Loading %s.%s", state.mapper.class_.__name__, name)
            await self.db.refresh(record, [name])
        value = _loaded(state, name)
        return None if value is MISSING else value

    def association_identity(self, record: Any, name: str) -> RecordIdentity | None:
        state = inspect(record)
        relationships = state.mapper.relationships
        if name not in relationships or relationships[name].direction is not MANYTOONE:
            return None

        relationship = relationships[name]
        values = []
        for local_column, _ in relationship.local_remote_pairs:
            value = _loaded(state, state.mapper.get_property_by_column(local_column).key)
            if value is MISSING or value is None:
                return None
            values.append(value)

        related_key = values[0] if len(values) == 1 else tuple(values)
        return related_key, relationship.mapper.class_.__name__
