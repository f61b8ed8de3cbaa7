"""In-memory record store.

Holds plain ``Record`` objects. Associations missing from a record's
``associations`` mapping are not loaded; ``fetch_association`` serves them
from relations registered with ``MemoryStore.relate``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Hashable

from parkes_presenter.projections.constants import MISSING
from parkes_presenter.repositories.base import RecordIdentity


@dataclass(eq=False)
class Record:
    """A domain record with scalar attributes and resident associations."""

    id: Hashable
    type_name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    associations: dict[str, Any] = field(default_factory=dict, repr=False)


class MemoryStore:
    """Record store backed by dictionaries.

    Every fetch is recorded in ``fetch_log`` as ``(id, type_name, name)``.
    Errors registered with ``fail_on`` are raised by the matching fetch.
    """

    def __init__(self):
        self._relations: dict[tuple[Hashable, str, str], Any] = {}
        self._failures: dict[str, Exception] = {}
        self.fetch_log: list[tuple[Hashable, str, str]] = []

    @property
    def fetch_count(self) -> int:
        return len(self.fetch_log)

    def relate(self, record: Record, name: str, value: Record | list[Record] | None) -> None:
        """Register the value ``fetch_association(record, name)`` returns."""
        self._relations[(record.id, record.type_name, name)] = value

    def fail_on(self, name: str, error: Exception) -> None:
        """Make every fetch of association ``name`` raise ``error``."""
        self._failures[name] = error

    def identity(self, record: Record) -> RecordIdentity:
        return record.id, record.type_name

    def get_attribute(self, record: Record, name: str) -> Any:
        return record.attributes.get(name, MISSING)

    def get_resident_association(self, record: Record, name: str) -> Any:
        return record.associations.get(name, MISSING)

    async def fetch_association(self, record: Record, name: str) -> Any:
        self.fetch_log.append((record.id, record.type_name, name))
        # Yield like a real round trip so concurrent fetches interleave
        await asyncio.sleep(0)
        if name in self._failures:
            raise self._failures[name]
        return self._relations.get((record.id, record.type_name, name))

    def association_identity(self, record: Record, name: str) -> RecordIdentity | None:
        foreign_key = record.attributes.get(f"{name}Id")
        if foreign_key is None:
            return None
        return foreign_key, name
