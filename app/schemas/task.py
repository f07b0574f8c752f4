"""
Task Schemas
============

Pydantic model describing a stored task document, and the
message body used for acknowledgements and errors.
"""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TaskDocument(BaseModel):
    """
    Validation model for a task document.

    Unknown keys are kept as-is so that any field in a payload is
    persisted alongside the known ones.
    """

    model_config = ConfigDict(extra="allow")

    userId: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: Optional[str] = None
    # A bare date, or a full ISO datetime when a time of day is given.
    deadline: Optional[Union[date, datetime]] = Field(default=None, union_mode="left_to_right")


class MessageResponse(BaseModel):
    """Body carrying a single human-readable message."""

    message: str
