"""
Pydantic Schemas
================

Request/response schemas for API validation.
"""

from app.schemas.task import MessageResponse, TaskDocument

__all__ = [
    "MessageResponse",
    "TaskDocument",
]
