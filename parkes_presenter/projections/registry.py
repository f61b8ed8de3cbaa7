"""Presenter registry and record descriptors.

A descriptor declares, for one record type, which attributes are public,
which are private, which associations are nested into the output and how
missing associations are treated. Descriptors are kept in an explicit
registry handed to the presenter rather than on the record classes.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from parkes_presenter.projections.constants import DEFAULT_PRESENTATION_KEY, ProjectionMode
from parkes_presenter.projections.policy import MissingAssociationPolicy


class PresenterConfigurationError(ValueError):
    """Raised when a record type lacks the configuration a view needs."""

    pass


class AssociationSpec(BaseModel):
    """Maps an association read from the record to its output key.

    Args:
        association: Name of the association on the record.
        rename: Key used in the projection. Defaults to ``association``.
    """

    model_config = ConfigDict(frozen=True)

    association: str
    rename: str

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"association": value, "rename": value}
        if isinstance(value, dict):
            data = dict(value)
            # Older configs used "attribute" for the association name
            if "association" not in data and "attribute" in data:
                data["association"] = data.pop("attribute")
            data.setdefault("rename", data.get("association"))
            return data
        return value


class SplitAssociations(BaseModel):
    """Separate association lists for public and private projections."""

    model_config = ConfigDict(frozen=True)

    public: list[AssociationSpec] = Field(default_factory=list)
    private: list[AssociationSpec] = Field(default_factory=list)


class RecordDescriptor(BaseModel):
    """Presentation configuration for one record type."""

    model_config = ConfigDict(frozen=True)

    type_name: str
    public_attributes: list[str] | None = None
    private_attributes: list[str] | None = None
    nested_associations: list[AssociationSpec] | SplitAssociations = Field(default_factory=list)
    presentation_key: str = DEFAULT_PRESENTATION_KEY
    missing_associations: MissingAssociationPolicy = Field(default_factory=MissingAssociationPolicy)

    def associations_for(self, mode: ProjectionMode) -> list[AssociationSpec]:
        """Get the nested associations projected in ``mode``."""
        if isinstance(self.nested_associations, SplitAssociations):
            return list(getattr(self.nested_associations, mode.value))
        return list(self.nested_associations)


class PresenterRegistry:
    """Registry of record descriptors keyed by record type name."""

    def __init__(self, descriptors: list[RecordDescriptor] | None = None):
        self._descriptors: dict[str, RecordDescriptor] = {}
        for descriptor in descriptors or []:
            self.register(descriptor)

    def register(self, descriptor: RecordDescriptor) -> None:
        """Register (or replace) the descriptor for its record type.

        Args:
            descriptor: The descriptor to register.
        """
        self._descriptors[descriptor.type_name] = descriptor

    def get(self, type_name: str) -> RecordDescriptor | None:
        """Get the descriptor for a record type.

        Args:
            type_name: Record type name (e.g., 'post').

        Returns:
            RecordDescriptor if registered, None otherwise.
        """
        return self._descriptors.get(type_name)

    def require(self, type_name: str) -> RecordDescriptor:
        """Get the descriptor for a record type or fail.

        Raises:
            PresenterConfigurationError: If the type is not registered.
        """
        descriptor = self._descriptors.get(type_name)
        if descriptor is None:
            raise PresenterConfigurationError(f"No presenter descriptor registered for '{type_name}'")
        return descriptor

    def has_descriptor(self, type_name: str) -> bool:
        """Check if a record type has a registered descriptor."""
        return type_name in self._descriptors

    def all_descriptors(self) -> dict[str, RecordDescriptor]:
        """Get a copy of all registered descriptors."""
        return self._descriptors.copy()
