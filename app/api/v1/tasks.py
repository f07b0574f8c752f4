"""
Tasks API Endpoints
===================

Create, list, update and delete the current user's tasks.
"""

from typing import Any

from fastapi import APIRouter, Body, status

from app.dependencies import CurrentUserId, TaskHandlerDep
from app.schemas.task import MessageResponse

router = APIRouter()

_ERROR_RESPONSES = {
    500: {"model": MessageResponse, "description": "Store failure"},
}
_ID_ERROR_RESPONSES = {
    404: {"model": MessageResponse, "description": "Task not found"},
    **_ERROR_RESPONSES,
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
)
async def create_task(
    current_user_id: CurrentUserId,
    handler: TaskHandlerDep,
    payload: dict[str, Any] = Body(...),
):
    """
    Create a new task owned by the current user.
    """
    return await handler.create_task(current_user_id, payload)


@router.get(
    "",
    responses=_ERROR_RESPONSES,
)
async def get_tasks(
    current_user_id: CurrentUserId,
    handler: TaskHandlerDep,
):
    """
    List the current user's tasks.
    """
    return await handler.get_tasks(current_user_id)


@router.put(
    "/{task_id}",
    responses=_ID_ERROR_RESPONSES,
)
@router.patch(
    "/{task_id}",
    responses=_ID_ERROR_RESPONSES,
)
async def update_task(
    task_id: str,
    current_user_id: CurrentUserId,
    handler: TaskHandlerDep,
    payload: dict[str, Any] = Body(...),
):
    """
    Update a task. Fields missing from the body keep their values.
    """
    return await handler.update_task(task_id, payload, user_id=current_user_id)


@router.delete(
    "/{task_id}",
    responses=_ID_ERROR_RESPONSES,
)
async def delete_task(
    task_id: str,
    current_user_id: CurrentUserId,
    handler: TaskHandlerDep,
):
    """
    Delete a task.
    """
    return await handler.delete_task(task_id, user_id=current_user_id)
