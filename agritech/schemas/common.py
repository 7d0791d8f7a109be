"""
Common Schemas
==============

Shared Pydantic base model and helpers for API payloads.

Clients exchange camelCase JSON (``soilQuality``, ``audioText``) while the
AI microservices speak snake_case (``soil_quality``, ``audio_text``).
:class:`CamelModel` accepts both spellings on input and renders camelCase
on output, so one model can describe both sides of a pass-through.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase wire format."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())

    def to_response(self) -> dict[str, Any]:
        """Serialize for an API response (camelCase keys, JSON-safe values)."""
        return self.model_dump(by_alias=True, mode="json")


class StrictCamelModel(CamelModel):
    """Request body model that rejects undeclared properties."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, protected_namespaces=(), extra="forbid"
    )
