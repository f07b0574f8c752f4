"""
Task Request Handler Tests
==========================

Status code and body mapping for each operation, with the store mocked:
- success paths echo what the store returned
- ``None`` from an id lookup becomes 404
- any store exception becomes 500 with its message verbatim
"""

import json
from unittest.mock import AsyncMock

import pytest

from app.core.errors import InvalidTaskIdError, TaskValidationError
from app.services.task_access import TaskAccessPolicy
from app.services.task_handler import TaskHandler
from app.services.task_store import TaskStore

USER_ID = "65f1c0ffee0000000000abcd"


def _body(response) -> object:
    return json.loads(response.body)


@pytest.fixture()
def store() -> AsyncMock:
    return AsyncMock(spec=TaskStore)


@pytest.fixture()
def handler(store: AsyncMock) -> TaskHandler:
    return TaskHandler(store, TaskAccessPolicy(enforce_ownership=False))


class TestCreateTask:
    """Tests for TaskHandler.create_task"""

    @pytest.mark.asyncio
    async def test_creates_task_for_requesting_user(self, handler, store):
        payload = {
            "title": "New Task",
            "description": "Task description",
            "deadline": "2025-12-31",
        }
        created = {"id": "abc", **payload, "userId": USER_ID}
        store.create.return_value = created

        response = await handler.create_task(USER_ID, payload)

        store.create.assert_awaited_once_with({
            "userId": USER_ID,
            "title": "New Task",
            "description": "Task description",
            "deadline": "2025-12-31",
        })
        assert response.status_code == 201
        assert _body(response) == created

    @pytest.mark.asyncio
    async def test_payload_cannot_change_owner(self, handler, store):
        store.create.return_value = {"id": "abc"}

        await handler.create_task(USER_ID, {"title": "x", "userId": "someone-else"})

        record = store.create.await_args.args[0]
        assert record["userId"] == USER_ID

    @pytest.mark.asyncio
    async def test_unknown_fields_are_passed_through(self, handler, store):
        store.create.return_value = {"id": "abc"}

        await handler.create_task(USER_ID, {"title": "x", "priority": "high"})

        assert store.create.await_args.args[0]["priority"] == "high"

    @pytest.mark.asyncio
    async def test_returns_500_on_store_error(self, handler, store):
        store.create.side_effect = Exception("DB Error")

        response = await handler.create_task(USER_ID, {"title": "New Task"})

        assert response.status_code == 500
        assert _body(response) == {"message": "DB Error"}

    @pytest.mark.asyncio
    async def test_validation_error_is_500_by_default(self, handler, store):
        store.create.side_effect = TaskValidationError(
            "Task validation failed: title: Field required", field="title",
        )

        response = await handler.create_task(USER_ID, {})

        assert response.status_code == 500
        assert _body(response) == {"message": "Task validation failed: title: Field required"}

    @pytest.mark.asyncio
    async def test_validation_error_is_400_when_distinguished(
        self, handler, store, distinguish_validation,
    ):
        store.create.side_effect = TaskValidationError("Task validation failed: title: Field required")

        response = await handler.create_task(USER_ID, {})

        assert response.status_code == 400


class TestGetTasks:
    """Tests for TaskHandler.get_tasks"""

    @pytest.mark.asyncio
    async def test_returns_tasks_for_user(self, handler, store):
        store.find.return_value = [{"title": "Task 1"}]

        response = await handler.get_tasks("12345")

        store.find.assert_awaited_once_with({"userId": "12345"})
        assert response.status_code == 200
        assert _body(response) == [{"title": "Task 1"}]

    @pytest.mark.asyncio
    async def test_keeps_store_order(self, handler, store):
        tasks = [{"title": "b"}, {"title": "c"}, {"title": "a"}]
        store.find.return_value = tasks

        response = await handler.get_tasks(USER_ID)

        assert _body(response) == tasks

    @pytest.mark.asyncio
    async def test_empty_list_is_200(self, handler, store):
        store.find.return_value = []

        response = await handler.get_tasks(USER_ID)

        assert response.status_code == 200
        assert _body(response) == []

    @pytest.mark.asyncio
    async def test_returns_500_on_store_error(self, handler, store):
        store.find.side_effect = ConnectionError("DB Error")

        response = await handler.get_tasks("12345")

        assert response.status_code == 500
        assert _body(response) == {"message": "DB Error"}


class TestUpdateTask:
    """Tests for TaskHandler.update_task"""

    @pytest.mark.asyncio
    async def test_updates_task(self, handler, store):
        store.find_by_id_and_update.return_value = {"title": "Updated Task"}

        response = await handler.update_task("123", {"title": "Updated Task"}, user_id=USER_ID)

        store.find_by_id_and_update.assert_awaited_once_with(
            "123", {"title": "Updated Task"}, owner_id=None,
        )
        assert response.status_code == 200
        assert _body(response) == {"title": "Updated Task"}

    @pytest.mark.asyncio
    async def test_returns_404_when_not_found(self, handler, store):
        store.find_by_id_and_update.return_value = None

        response = await handler.update_task("123", {"title": "Updated Task"})

        assert response.status_code == 404
        assert _body(response) == {"message": "Task not found"}

    @pytest.mark.asyncio
    async def test_returns_500_on_store_error(self, handler, store):
        store.find_by_id_and_update.side_effect = Exception("DB Error")

        response = await handler.update_task("123", {"title": "Updated Task"})

        assert response.status_code == 500
        assert _body(response) == {"message": "DB Error"}

    @pytest.mark.asyncio
    async def test_malformed_id_is_500(self, handler, store):
        store.find_by_id_and_update.side_effect = InvalidTaskIdError("123")

        response = await handler.update_task("123", {"title": "Updated Task"})

        assert response.status_code == 500
        assert _body(response) == {"message": 'Cast to task id failed for value "123"'}

    @pytest.mark.asyncio
    async def test_enforced_policy_scopes_to_owner(self, store):
        handler = TaskHandler(store, TaskAccessPolicy(enforce_ownership=True))
        store.find_by_id_and_update.return_value = None

        response = await handler.update_task("123", {"title": "x"}, user_id=USER_ID)

        store.find_by_id_and_update.assert_awaited_once_with(
            "123", {"title": "x"}, owner_id=USER_ID,
        )
        assert response.status_code == 404


class TestDeleteTask:
    """Tests for TaskHandler.delete_task"""

    @pytest.mark.asyncio
    async def test_deletes_task(self, handler, store):
        store.find_by_id_and_delete.return_value = {"id": "123"}

        response = await handler.delete_task("123")

        store.find_by_id_and_delete.assert_awaited_once_with("123", owner_id=None)
        assert response.status_code == 200
        assert _body(response) == {"message": "Task deleted successfully"}

    @pytest.mark.asyncio
    async def test_returns_404_when_not_found(self, handler, store):
        store.find_by_id_and_delete.return_value = None

        response = await handler.delete_task("123")

        assert response.status_code == 404
        assert _body(response) == {"message": "Task not found"}

    @pytest.mark.asyncio
    async def test_returns_500_on_store_error(self, handler, store):
        store.find_by_id_and_delete.side_effect = Exception("DB Error")

        response = await handler.delete_task("123")

        assert response.status_code == 500
        assert _body(response) == {"message": "DB Error"}

    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, handler, store):
        store.find_by_id_and_delete.side_effect = [{"id": "123"}, None]

        first = await handler.delete_task("123")
        second = await handler.delete_task("123")

        assert first.status_code == 200
        assert second.status_code == 404
