"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema speaking camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """Standardized error response.

    Diagnostic fields such as ``firestoreError`` or ``identityDeleted``
    are repeated at the top level when present in ``details``.
    """

    model_config = ConfigDict(extra="allow")

    error: str
    error_code: str
    message: str
    details: Any | None = None
