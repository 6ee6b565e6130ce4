"""Shared pydantic base for the staffing data contracts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ContractModel(BaseModel):
    """Immutable record keyed snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_payload(self) -> dict:
        """Return the camelCase JSON-compatible representation."""
        return self.model_dump(mode="json", by_alias=True)
