"""Shared constants for record projections.

Centralizes projection modes, sentinels and diagnostic message templates
used by the projector and the mode resolver.
"""

import enum
from typing import Any, Final

DEFAULT_PRESENTATION_KEY = "uuid"

# Returned by the projector when a record is already on the visited path
ABORTED: Final = None


class _Missing:
    """Marker for an attribute or association the record does not carry."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final[Any] = _Missing()


class ProjectionMode(str, enum.Enum):
    """Visibility level a projection is rendered at."""

    PUBLIC = "public"
    PRIVATE = "private"


MISSING_ATTRIBUTE_WARNING = "{attribute} attribute requested but {association} model was not included"
MISSING_ASSOCIATION_WARNING = "{rename} association requested but {association} model was not included"


def key_suffix(presentation_key: str) -> str:
    """Build the attribute suffix for a presentation key ('uuid' -> 'Uuid')."""
    return presentation_key.capitalize()
