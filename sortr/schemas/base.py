from typing import Annotated
from pydantic import BaseModel, StringConstraints
from pydantic.alias_generators import to_camel

# Trimmed, non-empty display name
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


class MessageResponse(BaseModel):
    message: str


def reject_null(value, field: str):
    if value is None:
        raise ValueError(f"{field} cannot be null")
    return value
