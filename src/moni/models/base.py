"""Shared base model for Google Cloud REST resource schemas.

The remote APIs speak camelCase JSON and omit unset fields. Models keep
snake_case attribute names, accept either spelling on input, and keep any
field the schema does not know about so a decoded payload re-encodes to the
same JSON.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base class for every request/response body exchanged with Google APIs."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        protected_namespaces=(),
    )

    def to_api_dict(self) -> Dict[str, Any]:
        """Serialize to the wire representation (aliases, no unset or null fields)."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_unset=True, exclude_none=True
        )

    @classmethod
    def from_api_dict(cls, data: Any):
        """Validate a decoded JSON payload into this model."""
        return cls.model_validate(data)
