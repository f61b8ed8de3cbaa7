"""Record store interface consumed by the projector.

A store knows how to identify records, read their attributes and
already-loaded associations, and lazily fetch associations that are not
resident yet. Reads are synchronous and must never trigger I/O; only
``fetch_association`` suspends.
"""

from typing import Any, Hashable, Protocol, runtime_checkable

RecordIdentity = tuple[Hashable, str]


@runtime_checkable
class RecordStore(Protocol):
    """Capabilities the projector needs from a record store."""

    def identity(self, record: Any) -> RecordIdentity:
        """Return ``(id, type_name)`` for a record."""
        ...

    def get_attribute(self, record: Any, name: str) -> Any:
        """Return an attribute value, or MISSING if the record has none."""
        ...

    def get_resident_association(self, record: Any, name: str) -> Any:
        """Return an already-loaded association, or MISSING if not loaded.

        A loaded but empty to-one association is ``None``.
        """
        ...

    async def fetch_association(self, record: Any, name: str) -> Any:
        """Load an association: a record, a list of records or ``None``."""
        ...

    def association_identity(self, record: Any, name: str) -> RecordIdentity | None:
        """Identity of a to-one related record known without loading it."""
        ...
