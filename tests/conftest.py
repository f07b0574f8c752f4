# tests/conftest.py

from __future__ import annotations

from typing import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.core.security import create_access_token
from app.dependencies import get_task_store
from app.main import app

from .fakes import FakeTaskStore

USER_ID = "65f1c0ffee0000000000abcd"
OTHER_USER_ID = "65f1c0ffee0000000000ef01"


@pytest.fixture()
def store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest_asyncio.fixture()
async def client(store: FakeTaskStore) -> AsyncIterator[AsyncClient]:
    """
    HTTP client bound to the app with the task store replaced by a fake.

    ASGITransport does not run the lifespan, so no Redis connection is made.
    """
    app.dependency_overrides[get_task_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    token = create_access_token({"sub": USER_ID})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def other_auth_headers() -> dict[str, str]:
    token = create_access_token({"sub": OTHER_USER_ID})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def enforce_ownership(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "TASK_OWNERSHIP_ENFORCED", True)


@pytest.fixture()
def distinguish_validation(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "DISTINGUISH_VALIDATION_ERRORS", True)
