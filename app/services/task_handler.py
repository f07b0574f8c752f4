"""
Task Request Handler
====================

Turns each task operation into exactly one status code and JSON body.

Every operation makes one store call and maps its outcome:
a record (success), ``None`` (not found) or an exception (error).
Exceptions are caught here and rendered with their message verbatim.
"""

import logging
from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.errors import (
    TaskNotFoundError,
    classify_error,
    error_message,
    status_for_kind,
)
from app.services.task_access import TaskAccessPolicy
from app.services.task_store import TaskStore

logger = logging.getLogger(__name__)


class TaskHandler:
    """Request handling for task CRUD over a ``TaskStore``."""

    def __init__(
        self,
        store: TaskStore,
        policy: Optional[TaskAccessPolicy] = None,
    ):
        self.store = store
        self.policy = policy or TaskAccessPolicy()

    def _error_response(self, operation: str, exc: Exception) -> JSONResponse:
        kind = classify_error(exc)
        status_code = status_for_kind(kind)
        if status_code >= 500:
            logger.warning("%s failed: %s: %s", operation, type(exc).__name__, exc)
        return JSONResponse(
            status_code=status_code,
            content={"message": error_message(exc)},
        )

    async def create_task(self, user_id: str, payload: dict[str, Any]) -> JSONResponse:
        """Persist a task owned by *user_id*; 201 with the stored record."""
        record = {**payload, "userId": user_id}
        try:
            task = await self.store.create(record)
        except Exception as exc:
            return self._error_response("create_task", exc)
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=jsonable_encoder(task))

    async def get_tasks(self, user_id: str) -> JSONResponse:
        """All tasks owned by *user_id*, in store order."""
        try:
            tasks = await self.store.find({"userId": user_id})
        except Exception as exc:
            return self._error_response("get_tasks", exc)
        return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(tasks))

    async def update_task(
        self,
        task_id: str,
        payload: dict[str, Any],
        user_id: Optional[str] = None,
    ) -> JSONResponse:
        """Apply *payload* to one task; 404 if the store has no such task."""
        try:
            task = await self.store.find_by_id_and_update(
                task_id,
                payload,
                owner_id=self.policy.owner_scope(user_id),
            )
        except Exception as exc:
            return self._error_response("update_task", exc)

        if task is None:
            return self._error_response("update_task", TaskNotFoundError())
        return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(task))

    async def delete_task(
        self,
        task_id: str,
        user_id: Optional[str] = None,
    ) -> JSONResponse:
        """Remove one task; 404 if the store has no such task."""
        try:
            task = await self.store.find_by_id_and_delete(
                task_id,
                owner_id=self.policy.owner_scope(user_id),
            )
        except Exception as exc:
            return self._error_response("delete_task", exc)

        if task is None:
            return self._error_response("delete_task", TaskNotFoundError())
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"message": "Task deleted successfully"},
        )
