"""Record projection system.

Projections turn records and their associations into plain trees of
dicts, lists and scalars for serialization.
"""

from parkes_presenter.projections.constants import ABORTED, MISSING, ProjectionMode
from parkes_presenter.projections.modes import ViewPlan, resolve_view
from parkes_presenter.projections.policy import MissingAssociationPolicy, MissingMode
from parkes_presenter.projections.projector import Projector
from parkes_presenter.projections.registry import (
    AssociationSpec,
    PresenterConfigurationError,
    PresenterRegistry,
    RecordDescriptor,
    SplitAssociations,
)

__all__ = [
    "ABORTED",
    "MISSING",
    "AssociationSpec",
    "MissingAssociationPolicy",
    "MissingMode",
    "PresenterConfigurationError",
    "PresenterRegistry",
    "ProjectionMode",
    "Projector",
    "RecordDescriptor",
    "SplitAssociations",
    "ViewPlan",
    "resolve_view",
]
