"""Presenter entry points.

``Presenter`` resolves public and private views of records from their
type's descriptor and hands them to the projector. ``extend_models``
builds the descriptor registry for a set of record types.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from parkes_presenter.config import settings
from parkes_presenter.projections.constants import DEFAULT_PRESENTATION_KEY, ProjectionMode
from parkes_presenter.projections.modes import resolve_view
from parkes_presenter.projections.projector import Projector
from parkes_presenter.projections.registry import PresenterRegistry, RecordDescriptor
from parkes_presenter.repositories.base import RecordStore

_DESCRIPTOR_FIELDS = (
    "public_attributes",
    "private_attributes",
    "nested_associations",
    "presentation_key",
    "missing_associations",
)


class Presenter:
    """Public and private views of records.

    The view methods validate configuration immediately and return the
    projection coroutine, so configuration errors surface at the call
    site before any store access.
    """

    def __init__(
        self,
        store: RecordStore,
        registry: PresenterRegistry,
        warn: Callable[[str], None] | None = None,
    ):
        """Initialize presenter.

        Args:
            store: Store the records belong to.
            registry: Descriptors for every record type that is presented.
            warn: Diagnostic sink for missing associations.
        """
        self.store = store
        self.registry = registry
        self.projector = Projector(store, registry, warn=warn)

    def project(
        self,
        record: Any,
        allowed_attributes: Iterable[str],
        association_specs: Iterable[Any] = (),
        *,
        presentation_key: str = DEFAULT_PRESENTATION_KEY,
        missing_associations: Any = None,
        mode: ProjectionMode = ProjectionMode.PUBLIC,
    ) -> Awaitable[dict[str, Any] | None]:
        """Project a record with an explicit attribute list and associations."""
        return self.projector.project(
            record,
            allowed_attributes,
            association_specs,
            presentation_key=presentation_key,
            missing_policy=missing_associations,
            mode=ProjectionMode(mode),
        )

    def to_public_view(self, record: Any) -> Awaitable[dict[str, Any]]:
        """Project ``record`` and its associations with public attributes.

        Raises:
            PresenterConfigurationError: If the record's type has no
                descriptor or no public attributes.
        """
        return self._view(record, ProjectionMode.PUBLIC)

    def to_private_view(self, record: Any) -> Awaitable[dict[str, Any]]:
        """Project ``record`` and its associations with private attributes.

        Raises:
            PresenterConfigurationError: If the record's type has no
                descriptor, or lacks public or private attributes.
        """
        return self._view(record, ProjectionMode.PRIVATE)

    def bind(self, record: Any) -> BoundPresenter:
        """Get the presenter operations bound to one record."""
        return BoundPresenter(self, record)

    def _view(self, record: Any, mode: ProjectionMode) -> Awaitable[dict[str, Any]]:
        _, type_name = self.store.identity(record)
        descriptor = self.registry.require(type_name)
        plan = resolve_view(descriptor, mode)
        return self.projector.project(
            record,
            plan.attributes,
            plan.associations,
            presentation_key=descriptor.presentation_key,
            missing_policy=descriptor.missing_associations,
            mode=plan.mode,
        )


@dataclass(frozen=True)
class BoundPresenter:
    """Presenter operations for a single record."""

    presenter: Presenter
    record: Any

    def project(
        self, allowed_attributes: Iterable[str], association_specs: Iterable[Any] = (), **options: Any
    ) -> Awaitable[dict[str, Any] | None]:
        """Project the bound record; see ``Presenter.project``."""
        return self.presenter.project(self.record, allowed_attributes, association_specs, **options)

    def to_public_view(self) -> Awaitable[dict[str, Any]]:
        """Public view of the bound record."""
        return self.presenter.to_public_view(self.record)

    def to_private_view(self) -> Awaitable[dict[str, Any]]:
        """Private view of the bound record."""
        return self.presenter.to_private_view(self.record)


def _descriptor_fields(model: Any) -> dict[str, Any]:
    """Read descriptor fields from a descriptor, a mapping or a class."""
    if isinstance(model, RecordDescriptor):
        return model.model_dump(exclude_unset=True, exclude={"type_name"})
    if isinstance(model, Mapping):
        return dict(model)
    return {name: getattr(model, name) for name in _DESCRIPTOR_FIELDS if hasattr(model, name)}


def extend_models(
    models: Mapping[str, Any] | Iterable[type],
    options: Mapping[str, Any] | None = None,
    registry: PresenterRegistry | None = None,
) -> PresenterRegistry:
    """Register presentation descriptors for a set of record types.

    Each model may be a ``RecordDescriptor``, a mapping of descriptor
    fields, or a class carrying them as class attributes (e.g. an ORM
    model with ``public_attributes = [...]``). A plain iterable of classes
    is keyed by class name.

    Field precedence: the model's own fields, then ``options``, then the
    package settings (``presentation_key`` and ``missing_associations``).

    Args:
        models: Record types to extend, keyed by type name.
        options: Shared ``presentation_key`` / ``missing_associations``.
        registry: Registry to add to. A new one is created if omitted.

    Returns:
        The registry holding the new descriptors.

    Raises:
        pydantic.ValidationError: If a descriptor is malformed.
    """
    registry = registry if registry is not None else PresenterRegistry()
    defaults = {
        "presentation_key": settings.presentation_key,
        "missing_associations": settings.missing_associations,
        **(options or {}),
    }

    items = models.items() if isinstance(models, Mapping) else ((model.__name__, model) for model in models)
    for type_name, model in items:
        fields = {**defaults, **_descriptor_fields(model), "type_name": type_name}
        registry.register(RecordDescriptor.model_validate(fields))

    return registry
