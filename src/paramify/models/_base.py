"""Base model and identity type shared by paramify models.

Every provider-facing model inherits from :class:`ParamifyBaseModel` which
maps camelCase payload keys (``timeSeries``, ``siteName``) onto snake_case
fields. Domain records use the same frozen configuration so callers always
receive immutable snapshots.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

Principal = Annotated[str, StringConstraints(min_length=1)]
"""Opaque caller identity presented to every entry point. Never normalised."""

#: Identity used before any admin has been established.
ANONYMOUS_PRINCIPAL = "2vxsx-fae"


class ParamifyBaseModel(BaseModel):
    """Frozen base with camelCase aliases and name population."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
