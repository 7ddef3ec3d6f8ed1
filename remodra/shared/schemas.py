"""Shared Pydantic base for API payloads

Python attributes stay snake_case while JSON uses camelCase keys.
"""

from pydantic import BaseModel, ConfigDict


def to_camel(s: str) -> str:
    """Convert snake_case to camelCase for JSON aliasing."""
    parts = s.split("_")
    return parts[0] + "".join(p.capitalize() or "_" for p in parts[1:])


class CamelModel(BaseModel):
    """
    Base for request and response schemas.

    - Accepts either camelCase or snake_case input
    - Serializes with camelCase aliases (FastAPI dumps responses by alias)
    - Reads straight from ORM objects
    """

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        from_attributes=True,
        extra="ignore",
    )


class MessageResponse(CamelModel):
    message: str
