from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from taskboard.errors import InvalidRequestError, NotFoundError, TaskboardError
from taskboard.schemas import TaskRead, UserSummary


class FakeTaskApi:
    """
    In-memory stand-in for ``TaskApiClient``.

    ``fail`` maps a method name to the error its next call raises; the entry
    is consumed by that call. ``gate``, when set, holds every response until
    the event fires, so tests can look at the store mid-flight.
    """

    def __init__(self, tasks: Optional[List[TaskRead]] = None) -> None:
        self.tasks: Dict[int, TaskRead] = {t.id: t for t in tasks or []}
        self.users: Dict[int, UserSummary] = {}
        self.calls: List[Tuple] = []
        self.fail: Dict[str, TaskboardError] = {}
        self.gate: Optional[asyncio.Event] = None
        self.update_returns_body = True
        self._next_id = max(self.tasks, default=0) + 1

    async def _enter(self, name: str, *args) -> None:
        self.calls.append((name,) + args)
        if self.gate is not None:
            await self.gate.wait()
        error = self.fail.pop(name, None)
        if error is not None:
            raise error

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    async def list_tasks(self, owner_id: Optional[int] = None) -> List[TaskRead]:
        await self._enter("list_tasks", owner_id)
        tasks = [t for t in self.tasks.values() if owner_id is None or t.owner_id == owner_id]
        return sorted(tasks, key=lambda t: (t.order, t.id))

    async def create_task(self, dto: dict) -> TaskRead:
        await self._enter("create_task", dto)
        now = datetime.now(timezone.utc)
        task = TaskRead(id=self._next_id, created_at=now, updated_at=now, **dto)
        self._next_id += 1
        self.tasks[task.id] = task
        return task

    async def update_task(self, task_id: int, dto: dict) -> Optional[TaskRead]:
        await self._enter("update_task", task_id, dto)
        if task_id not in self.tasks:
            raise NotFoundError("Task not found", 404)
        task = self.tasks[task_id].model_copy(update={**dto, "updated_at": datetime.now(timezone.utc)})
        self.tasks[task_id] = task
        return task if self.update_returns_body else None

    async def delete_task(self, task_id: int) -> None:
        await self._enter("delete_task", task_id)
        if self.tasks.pop(task_id, None) is None:
            raise NotFoundError("Task not found", 404)

    async def reorder_tasks(self, pairs) -> None:
        pairs = list(pairs)
        await self._enter("reorder_tasks", pairs)
        for task_id, order in pairs:
            if task_id in self.tasks:
                self.tasks[task_id] = self.tasks[task_id].model_copy(update={"order": order})

    async def toggle_task(self, task_id: int, is_completed: bool) -> TaskRead:
        await self._enter("toggle_task", task_id, is_completed)
        if task_id not in self.tasks:
            raise NotFoundError("Task not found", 404)
        task = self.tasks[task_id].model_copy(update={"is_completed": is_completed})
        self.tasks[task_id] = task
        return task

    async def list_users(self) -> List[UserSummary]:
        await self._enter("list_users")
        return list(self.users.values())

    async def create_user(self, dto: dict) -> UserSummary:
        await self._enter("create_user", dto)
        if any(u.email == dto["email"] for u in self.users.values()):
            raise InvalidRequestError(f"Email {dto['email']} is already registered.", 400)
        user = UserSummary(id=len(self.users) + 1, name=dto["name"], email=dto["email"])
        self.users[user.id] = user
        return user

    async def update_user(self, user_id: int, dto: dict) -> None:
        await self._enter("update_user", user_id, dto)
        if user_id not in self.users:
            raise NotFoundError("User not found", 404)
        changes = {k: v for k, v in dto.items() if k in ("name", "email")}
        self.users[user_id] = self.users[user_id].model_copy(update=changes)

    async def delete_user(self, user_id: int) -> None:
        await self._enter("delete_user", user_id)
        if self.users.pop(user_id, None) is None:
            raise NotFoundError("User not found", 404)


def make_task(task_id: int, title: str, order: int, owner_id: int = 1, **fields) -> TaskRead:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return TaskRead(
        id=task_id,
        title=title,
        order=order,
        owner_id=owner_id,
        created_at=now,
        updated_at=now,
        **fields,
    )
