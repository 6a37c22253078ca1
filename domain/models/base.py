"""
Shared pydantic base for RtF domain models.

Models serialize with camelCase keys on the wire and in cache payloads,
and accept either snake_case or camelCase when parsing.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self, **kwargs) -> dict:
        """Dump to a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
