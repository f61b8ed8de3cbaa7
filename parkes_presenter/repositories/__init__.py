"""Record stores."""

from parkes_presenter.repositories.base import RecordIdentity, RecordStore
from parkes_presenter.repositories.memory import MemoryStore, Record
from parkes_presenter.repositories.orm import SQLAlchemyStore

__all__ = [
    "MemoryStore",
    "Record",
    "RecordIdentity",
    "RecordStore",
    "SQLAlchemyStore",
]
