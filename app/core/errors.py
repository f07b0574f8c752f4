"""
Error Handling
==============

Task error kinds, their status mapping, and the exception handlers
that keep every error body in the ``{"message": ...}`` shape.
"""

import enum
import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.config import settings

logger = logging.getLogger(__name__)

TASK_NOT_FOUND_MESSAGE = "Task not found"


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(str, enum.Enum):
    """Outcome categories that reach the client."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORE_FAILURE = "store_failure"


# =============================================================================
# Custom Exceptions
# =============================================================================

class TaskStoreError(Exception):
    """Base class for errors raised by the task store."""

    kind = ErrorKind.STORE_FAILURE

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TaskValidationError(TaskStoreError):
    """A document failed the task model's validation."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class InvalidTaskIdError(TaskValidationError):
    """The given task id is not a well-formed identifier."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(
            f'Cast to task id failed for value "{task_id}"',
            field="id",
        )


class TaskNotFoundError(TaskStoreError):
    """No task with the given id."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = TASK_NOT_FOUND_MESSAGE):
        super().__init__(message)


def classify_error(exc: BaseException) -> ErrorKind:
    """Return the error kind for any exception raised below the handler."""
    return getattr(exc, "kind", ErrorKind.STORE_FAILURE)


def status_for_kind(kind: ErrorKind) -> int:
    """
    Map an error kind to an HTTP status code.

    Validation failures share the 500 path unless
    ``DISTINGUISH_VALIDATION_ERRORS`` is enabled.
    """
    if kind is ErrorKind.NOT_FOUND:
        return status.HTTP_404_NOT_FOUND
    if kind is ErrorKind.VALIDATION and settings.DISTINGUISH_VALIDATION_ERRORS:
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_message(exc: BaseException) -> str:
    """The message surfaced to the client, verbatim from the exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str):
        return message
    return str(exc)


# =============================================================================
# Exception Handlers
# =============================================================================

async def http_exception_handler(
    request: Request,
    exc: HTTPException,
) -> JSONResponse:
    """Handler for standard HTTPException."""
    if isinstance(exc.detail, dict) and "message" in exc.detail:
        content = exc.detail
    else:
        content = {"message": str(exc.detail)}

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for request validation errors."""
    from fastapi.exceptions import RequestValidationError

    if isinstance(exc, RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Validation error") if errors else "Validation error"
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "message": message,
                "details": [
                    {"loc": list(e.get("loc", [])), "msg": e.get("msg")}
                    for e in errors
                ],
            },
        )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": str(exc)},
    )


async def global_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled error: %s: %s", type(exc).__name__, exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "An unexpected error occurred"},
    )


def setup_exception_handlers(app):
    """
    Register exception handlers with FastAPI app.

    Usage:
        from app.core.errors import setup_exception_handlers
        setup_exception_handlers(app)
    """
    from fastapi.exceptions import RequestValidationError

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
