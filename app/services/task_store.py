"""
Task Store
==========

Document store for tasks backed by Redis.

Redis Data Model:
    task:{task_id}          -> String   JSON task document
    tasks:user:{user_id}    -> ZSet     task ids scored by creation time (ms)
    tasks:all               -> ZSet     every task id, same scoring

Operations return plain JSON-ready dicts. A lookup that matches no
document returns ``None``; every other failure raises.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from app.core.errors import InvalidTaskIdError, TaskValidationError
from app.db.session import get_redis
from app.schemas.task import TaskDocument

logger = logging.getLogger(__name__)

# Keys a partial update can never overwrite.
_IMMUTABLE_FIELDS = frozenset({"id", "userId", "createdAt"})

_ALL_KEY = "tasks:all"


# ---------------------------------------------------------------------------
# Key helpers
# ---------------------------------------------------------------------------

def _task_key(task_id: str) -> str:
    return f"task:{task_id}"


def _user_index_key(user_id: str) -> str:
    return f"tasks:user:{user_id}"


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _check_task_id(task_id: str) -> str:
    """Return the canonical form of *task_id* or raise ``InvalidTaskIdError``."""
    try:
        return str(uuid.UUID(str(task_id)))
    except ValueError:
        raise InvalidTaskIdError(str(task_id)) from None


def _validate(record: dict[str, Any]) -> dict[str, Any]:
    """Run *record* through ``TaskDocument`` and return its JSON form."""
    try:
        document = TaskDocument.model_validate(record)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(loc) for loc in first.get("loc", ())) or None
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in e.get('loc', ()))}: {e.get('msg')}"
            for e in exc.errors()
        )
        raise TaskValidationError(
            f"Task validation failed: {problems}",
            field=field,
        ) from exc
    return document.model_dump(mode="json", exclude_unset=True)


# ---------------------------------------------------------------------------
# TaskStore
# ---------------------------------------------------------------------------

class TaskStore:
    """
    Single-document operations over the ``task:*`` keyspace.

    Every method is ``async``. Redis errors are not caught here.
    """

    async def create(self, record: dict[str, Any]) -> dict[str, Any]:
        """
        Validate *record*, assign ``id`` and ``createdAt``, and persist it.

        Raises ``TaskValidationError`` if the record is not a valid task.
        """
        fields = {k: v for k, v in record.items() if k not in ("id", "createdAt")}
        document = _validate(fields)

        task_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        document = {"id": task_id, **document, "createdAt": now.isoformat()}
        score = int(time.time() * 1000)

        client = await get_redis()
        pipe = client.pipeline(transaction=True)
        pipe.set(_task_key(task_id), json.dumps(document))
        pipe.zadd(_user_index_key(document["userId"]), {task_id: score})
        pipe.zadd(_ALL_KEY, {task_id: score})
        await pipe.execute()

        logger.debug("task_store created task %s for user %s", task_id, document["userId"])
        return document

    async def find(self, filter: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """
        Return every task whose fields equal those in *filter*,
        in creation order.
        """
        filter = filter or {}
        client = await get_redis()

        if "userId" in filter:
            index_key = _user_index_key(str(filter["userId"]))
        else:
            index_key = _ALL_KEY

        ids: list[str] = await client.zrange(index_key, 0, -1)
        if not ids:
            return []

        raw = await client.mget([_task_key(task_id) for task_id in ids])
        tasks: list[dict[str, Any]] = []
        for value in raw:
            # Index entries can outlive a document removed by another writer.
            if value is None:
                continue
            task = json.loads(value)
            if all(task.get(k) == v for k, v in filter.items()):
                tasks.append(task)
        return tasks

    async def find_by_id(
        self,
        task_id: str,
        *,
        owner_id: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """Return one task, or ``None`` if it does not exist (or is not *owner_id*'s)."""
        task_id = _check_task_id(task_id)
        client = await get_redis()
        raw = await client.get(_task_key(task_id))
        if raw is None:
            return None
        task = json.loads(raw)
        if owner_id is not None and task.get("userId") != owner_id:
            return None
        return task

    async def find_by_id_and_update(
        self,
        task_id: str,
        partial: dict[str, Any],
        *,
        owner_id: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Merge *partial* over the stored task and return the updated document.

        Fields absent from *partial* are left untouched; ``id``, ``userId``
        and ``createdAt`` never change. Returns ``None`` if there is no such
        task.
        """
        current = await self.find_by_id(task_id, owner_id=owner_id)
        if current is None:
            return None

        changes = {k: v for k, v in partial.items() if k not in _IMMUTABLE_FIELDS}
        merged = {**current, **changes}
        document = _validate(
            {k: v for k, v in merged.items() if k not in ("id", "createdAt")}
        )
        document = {"id": current["id"], **document, "createdAt": current["createdAt"]}

        client = await get_redis()
        written = await client.set(_task_key(current["id"]), json.dumps(document), xx=True)
        # Deleted between the read and the write.
        if written is None:
            return None

        logger.debug("task_store updated task %s (%s)", current["id"], ", ".join(changes))
        return document

    async def find_by_id_and_delete(
        self,
        task_id: str,
        *,
        owner_id: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """Remove a task and its index entries; return it, or ``None`` if absent."""
        current = await self.find_by_id(task_id, owner_id=owner_id)
        if current is None:
            return None

        client = await get_redis()
        pipe = client.pipeline(transaction=True)
        pipe.delete(_task_key(current["id"]))
        pipe.zrem(_user_index_key(current["userId"]), current["id"])
        pipe.zrem(_ALL_KEY, current["id"])
        deleted, _, _ = await pipe.execute()

        # A concurrent delete got there first.
        if not deleted:
            return None

        logger.debug("task_store deleted task %s", current["id"])
        return current
