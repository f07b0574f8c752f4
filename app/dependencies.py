"""
Common Dependencies
===================

Shared dependencies used across the application.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.core.security import decode_token
from app.services.task_handler import TaskHandler
from app.services.task_store import TaskStore

logger = logging.getLogger(__name__)

# Security scheme for JWT authentication
security = HTTPBearer(auto_error=False)

# Development test user ID (consistent value for testing)
DEV_USER_ID = "00000000-0000-0000-0000-000000000001"


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """
    Get the authenticated user's id from the bearer token.

    Raises 401 if not authenticated or the token is invalid.
    In development with DEV_AUTH_DISABLED=True, returns the dev user id.
    """
    if settings.auth_disabled:
        user_id = DEV_USER_ID
    else:
        if credentials is None:
            raise _unauthorized("Not authenticated")

        payload = decode_token(credentials.credentials)
        if payload is None or payload.get("type") != "access":
            raise _unauthorized("Invalid or expired token")

        user_id = payload.get("sub")
        if not user_id:
            raise _unauthorized("Invalid or expired token")

    # Picked up by the transaction middleware
    request.state.user_id = user_id
    return str(user_id)


def get_task_store() -> TaskStore:
    """Task store dependency."""
    return TaskStore()


def get_task_handler(
    store: Annotated[TaskStore, Depends(get_task_store)],
) -> TaskHandler:
    """Per-request task handler."""
    return TaskHandler(store)


# Type aliases for route signatures
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
TaskHandlerDep = Annotated[TaskHandler, Depends(get_task_handler)]
