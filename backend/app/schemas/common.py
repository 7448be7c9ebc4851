"""
Shared schema base classes.

The JSON wire format is camelCase (trackingNumber, isActive, ...);
request bodies also accept snake_case field names.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ActionResponse(CamelModel):
    """Acknowledgement for operations without a resource body."""
    success: bool
    message: str
    id: str
