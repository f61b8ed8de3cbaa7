"""Mode resolution for public and private views.

Turns a record descriptor and a projection mode into the attribute list
and association specs the projector walks.
"""

from dataclasses import dataclass

from parkes_presenter.projections.constants import ProjectionMode
from parkes_presenter.projections.registry import (
    AssociationSpec,
    PresenterConfigurationError,
    RecordDescriptor,
)


@dataclass(frozen=True)
class ViewPlan:
    """Inputs for one projection of one record."""

    attributes: list[str]
    associations: list[AssociationSpec]
    mode: ProjectionMode


def resolve_view(descriptor: RecordDescriptor, mode: ProjectionMode) -> ViewPlan:
    """Build the view plan for ``descriptor`` in ``mode``.

    Public views use the public attributes and the public (or flat)
    association list. Private views append the private attributes and use
    the private (or flat) association list.

    Args:
        descriptor: Descriptor of the record's type.
        mode: Projection mode.

    Returns:
        ViewPlan for the projector.

    Raises:
        PresenterConfigurationError: If an attribute list the mode needs is
            not defined.
    """
    mode = ProjectionMode(mode)
    if descriptor.public_attributes is None:
        raise PresenterConfigurationError(f"public_attributes is not defined for '{descriptor.type_name}'")

    attributes = list(descriptor.public_attributes)
    if mode is ProjectionMode.PRIVATE:
        if descriptor.private_attributes is None:
            raise PresenterConfigurationError(f"private_attributes is not defined for '{descriptor.type_name}'")
        attributes += [name for name in descriptor.private_attributes if name not in attributes]

    return ViewPlan(
        attributes=attributes,
        associations=descriptor.associations_for(mode),
        mode=mode,
    )
