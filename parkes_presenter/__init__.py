"""Project graphs of related records into plain JSON-serializable trees."""

from parkes_presenter.presenter import BoundPresenter, Presenter, extend_models
from parkes_presenter.projections import (
    ABORTED,
    MISSING,
    AssociationSpec,
    MissingAssociationPolicy,
    MissingMode,
    PresenterConfigurationError,
    PresenterRegistry,
    ProjectionMode,
    Projector,
    RecordDescriptor,
    SplitAssociations,
)
from parkes_presenter.repositories import MemoryStore, Record, RecordStore, SQLAlchemyStore

__all__ = [
    "ABORTED",
    "MISSING",
    "AssociationSpec",
    "BoundPresenter",
    "MemoryStore",
    "MissingAssociationPolicy",
    "MissingMode",
    "Presenter",
    "PresenterConfigurationError",
    "PresenterRegistry",
    "ProjectionMode",
    "Projector",
    "Record",
    "RecordDescriptor",
    "RecordStore",
    "SQLAlchemyStore",
    "SplitAssociations",
    "extend_models",
]
