"""Recursive record projector.

Turns a record and its associations into a plain tree of dicts, lists and
scalars. Foreign-key attributes are translated to the related record's
presentation key, associations are renamed, missing associations are
loaded or reported according to the record type's policy, and records
already on the current recursion path are skipped so cyclic graphs
terminate.

Work inside one call is concurrent: key lookups, prefetches and nested
projections each run under ``asyncio.gather``. Every batch is awaited until
all of its members settle before the first failure is raised, so no fetch
is left running behind an error. The visited path is an immutable tuple
handed down each branch, so siblings never see each other's entries.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from parkes_presenter.projections.constants import (
    ABORTED,
    DEFAULT_PRESENTATION_KEY,
    MISSING,
    MISSING_ASSOCIATION_WARNING,
    MISSING_ATTRIBUTE_WARNING,
    ProjectionMode,
    key_suffix,
)
from parkes_presenter.projections.modes import resolve_view
from parkes_presenter.projections.policy import MissingAssociationPolicy, MissingMode
from parkes_presenter.projections.registry import (
    AssociationSpec,
    PresenterConfigurationError,
    PresenterRegistry,
)
from parkes_presenter.repositories.base import RecordIdentity, RecordStore

logger = logging.getLogger(__name__)

VisitedPath = tuple[RecordIdentity, ...]


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


async def _gather_settled(*aws: Awaitable[Any]) -> list[Any]:
    """Await all of ``aws``, then raise the first failure in argument order."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def normalize_specs(specs: Iterable[Any]) -> list[AssociationSpec]:
    """Normalize names and ``{association, rename}`` mappings into specs."""
    return [spec if isinstance(spec, AssociationSpec) else AssociationSpec.model_validate(spec) for spec in specs]


def split_key_attributes(attributes: Iterable[str], presentation_key: str) -> tuple[list[str], list[str]]:
    """Partition attributes into foreign-key attributes and plain attributes.

    Args:
        attributes: Allowed attribute names.
        presentation_key: Presentation key name (e.g., 'uuid').

    Returns:
        Tuple of (key attributes, plain attributes), each in input order.
    """
    suffix = key_suffix(presentation_key)
    keys, plain = [], []
    for name in attributes:
        if name.endswith(suffix) and len(name) > len(suffix):
            keys.append(name)
        else:
            plain.append(name)
    return keys, plain


class Projector:
    """Projects records into plain serializable trees.

    Nested records are projected with the descriptor registered for their
    own type, in the same mode as their parent.
    """

    def __init__(
        self,
        store: RecordStore,
        registry: PresenterRegistry,
        warn: Callable[[str], None] | None = None,
    ):
        """Initialize projector.

        Args:
            store: Store used to read records and load associations.
            registry: Descriptors for nested record types.
            warn: Diagnostic sink for missing associations. Defaults to
                this module's logger.
        """
        self.store = store
        self.registry = registry
        self.warn = warn or logger.warning

    async def project(
        self,
        record: Any,
        allowed_attributes: Iterable[str],
        association_specs: Iterable[Any] = (),
        *,
        presentation_key: str = DEFAULT_PRESENTATION_KEY,
        missing_policy: Any = None,
        mode: ProjectionMode = ProjectionMode.PUBLIC,
        visited: VisitedPath = (),
    ) -> dict[str, Any] | None:
        """Project one record and its associations.

        Args:
            record: Record to project.
            allowed_attributes: Attribute names copied into the result.
            association_specs: Association names or ``{association, rename}``
                mappings to nest.
            presentation_key: Attribute of related records substituted for
                foreign keys.
            missing_policy: MissingAssociationPolicy or one of its shorthands.
            mode: Projection mode used for nested records.
            visited: Identities on the current recursion path.

        Returns:
            The projection, or ABORTED if the record is already on the path.
        """
        identity = self.store.identity(record)
        if identity in visited:
            logger.debug("Skipping %s %s already on the projection path", identity[1], identity[0])
            return ABORTED

        path = tuple(visited) + (identity,)
        missing = MissingAssociationPolicy.coerce(missing_policy).resolve(identity[1])
        allowed_attributes = list(allowed_attributes)
        specs = normalize_specs(association_specs)
        cache: dict[str, Any] = {}

        values: dict[str, Any] = {}
        key_attributes, plain_attributes = split_key_attributes(allowed_attributes, presentation_key)
        for name in plain_attributes:
            value = self.store.get_attribute(record, name)
            if value is not MISSING:
                values[name] = value

        renames = {spec.rename: spec.association for spec in specs}
        suffix_length = len(key_suffix(presentation_key))
        key_associations = {
            name: renames.get(name[:-suffix_length], name[:-suffix_length]) for name in key_attributes
        }
        values.update(await self._resolve_keys(record, key_associations, presentation_key, missing, cache))

        result = {name: values[name] for name in allowed_attributes if name in values}

        if missing is MissingMode.LOAD:
            await self._prefetch(record, specs, cache, path)

        nested = await _gather_settled(*(self._descend(record, spec, cache, missing, mode, path) for spec in specs))
        for spec, value in zip(specs, nested):
            if value is not MISSING:
                result[spec.rename] = value

        return result

    async def _fetch(self, record: Any, association: str) -> Any:
        record_id, type_name = self.store.identity(record)
        logger.debug("Fetching %s for %s %s", association, type_name, record_id)
        return await self.store.fetch_association(record, association)

    def _presentation_key_of(self, related: Any, presentation_key: str) -> Any:
        if related is None:
            return None
        if _is_collection(related):
            return MISSING
        return self.store.get_attribute(related, presentation_key)

    async def _resolve_keys(
        self,
        record: Any,
        key_associations: dict[str, str],
        presentation_key: str,
        missing: MissingMode,
        cache: dict[str, Any],
    ) -> dict[str, Any]:
        """Resolve foreign-key attributes to presentation key values.

        Args:
            record: Record owning the attributes.
            key_associations: Key attribute name -> association it names.
            presentation_key: Attribute read from the related record.
            missing: Effective policy for ``record``'s type.
            cache: Receives every association fetched here.

        Returns:
            Resolved values by attribute; unresolved attributes are absent.
        """
        values: dict[str, Any] = {}
        to_load: dict[str, list[str]] = {}
        for attribute, association in key_associations.items():
            direct = self.store.get_attribute(record, attribute)
            if direct is not MISSING and direct is not None:
                values[attribute] = direct
                continue

            resident = self.store.get_resident_association(record, association)
            if resident is not MISSING:
                values[attribute] = self._presentation_key_of(resident, presentation_key)
            elif missing is MissingMode.LOAD:
                to_load.setdefault(association, []).append(attribute)
            elif missing is MissingMode.WARN:
                self.warn(MISSING_ATTRIBUTE_WARNING.format(attribute=attribute, association=association))

        # One fetch per association, however many attributes name it
        associations = list(to_load)
        fetched = await _gather_settled(*(self._fetch(record, name) for name in associations))
        for association, related in zip(associations, fetched):
            cache[association] = related
            for attribute in to_load[association]:
                values[attribute] = self._presentation_key_of(related, presentation_key)

        return {name: value for name, value in values.items() if value is not MISSING}

    def _is_back_edge(self, record: Any, association: str, path: VisitedPath) -> bool:
        related = self.store.association_identity(record, association)
        return related is not None and related in path

    async def _prefetch(self, record: Any, specs: list[AssociationSpec], cache: dict[str, Any], path: VisitedPath) -> None:
        """Load every association that is neither cached nor resident."""
        pending = [
            spec.association
            for spec in specs
            if spec.association not in cache
            and self.store.get_resident_association(record, spec.association) is MISSING
            and not self._is_back_edge(record, spec.association, path)
        ]
        pending = list(dict.fromkeys(pending))
        fetched = await _gather_settled(*(self._fetch(record, name) for name in pending))
        cache.update(zip(pending, fetched))

    async def _descend(
        self,
        record: Any,
        spec: AssociationSpec,
        cache: dict[str, Any],
        missing: MissingMode,
        mode: ProjectionMode,
        path: VisitedPath,
    ) -> Any:
        """Project one association of ``record``; MISSING leaves the key out."""
        if self._is_back_edge(record, spec.association, path):
            return MISSING

        if spec.association in cache:
            value = cache[spec.association]
        else:
            value = self.store.get_resident_association(record, spec.association)

        if value is MISSING:
            if missing is MissingMode.WARN:
                self.warn(MISSING_ASSOCIATION_WARNING.format(rename=spec.rename, association=spec.association))
            return MISSING
        if value is None:
            return MISSING

        if _is_collection(value):
            projected = await _gather_settled(*(self._project_nested(item, mode, path) for item in value))
            return [item for item in projected if item is not ABORTED]

        projected = await self._project_nested(value, mode, path)
        return MISSING if projected is ABORTED else projected

    async def _project_nested(self, record: Any, mode: ProjectionMode, path: VisitedPath) -> dict[str, Any] | None:
        """Project a related record with its own type's descriptor."""
        record_id, type_name = self.store.identity(record)
        if (record_id, type_name) in path:
            return ABORTED

        descriptor = self.registry.get(type_name)
        if descriptor is None:
            logger.warning("No presenter descriptor registered for '%s', omitting nested record", type_name)
            return ABORTED
        try:
            plan = resolve_view(descriptor, mode)
        except PresenterConfigurationError as e:
            logger.warning("Omitting nested %s record: %s", type_name, e)
            return ABORTED

        return await self.project(
            record,
            plan.attributes,
            plan.associations,
            presentation_key=descriptor.presentation_key,
            missing_policy=descriptor.missing_associations,
            mode=plan.mode,
            visited=path,
        )
