"""Missing-association policy.

Decides what the projector does when a record is asked for an association
that has not been loaded: nothing, a lazy load through the store, or a
diagnostic. The policy has a default mode plus per-type overrides.
"""

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MissingMode(str, enum.Enum):
    """Action taken for an association that is not resident on a record."""

    DISABLED = "disabled"
    LOAD = "load"
    WARN = "warn"


def _coerce_mode(value: Any) -> Any:
    """Map falsy shorthands (None, False) to the disabled mode."""
    if value is None or value is False:
        return MissingMode.DISABLED
    return value


class MissingAssociationPolicy(BaseModel):
    """Per-type missing-association behaviour.

    Accepts the structured form ``{"default": ..., "overrides": {...}}`` or
    one of the shorthands:

    - ``None`` / ``False`` / ``"disabled"``: disabled for every type
    - ``"load"`` / ``"warn"``: that mode for every type
    - ``{"comment": "warn"}``: that mode for the named types only,
      disabled for all others

    A mapping is read as the structured form when its only keys are
    ``default`` and/or ``overrides``. A per-type shorthand naming nothing
    but types called ``default`` or ``overrides`` is therefore ambiguous;
    spell such policies out as ``{"overrides": {"default": ...}}``.
    """

    model_config = ConfigDict(frozen=True)

    default: MissingMode = MissingMode.DISABLED
    overrides: dict[str, MissingMode] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, value: Any) -> Any:
        if value is None or value is False or isinstance(value, str):
            return {"default": _coerce_mode(value)}
        if isinstance(value, dict) and not value.keys() <= {"default", "overrides"}:
            return {"default": MissingMode.DISABLED, "overrides": value}
        return value

    @field_validator("default", mode="before")
    @classmethod
    def _default_mode(cls, value: Any) -> Any:
        return _coerce_mode(value)

    @field_validator("overrides", mode="before")
    @classmethod
    def _override_modes(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {type_name: _coerce_mode(mode) for type_name, mode in value.items()}
        return value

    @classmethod
    def coerce(cls, value: Any) -> "MissingAssociationPolicy":
        """Return ``value`` as a policy, expanding shorthands."""
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)

    def resolve(self, type_name: str) -> MissingMode:
        """Get the effective mode for a record type.

        Args:
            type_name: Record type being projected.

        Returns:
            The override for ``type_name`` if one exists, else the default.
        """
        return self.overrides.get(type_name, self.default)
