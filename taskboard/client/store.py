"""
Client-side working copy of the task list.

Every write is applied to ``tasks`` before the request goes out and is
reconciled when the response arrives: confirmed records replace the
optimistic ones, failures restore the snapshot taken before the write.
``tasks`` holds frozen models, so a snapshot is just a copy of the list.

Nothing is queued or serialized. Overlapping writes race, and whichever
response is applied last wins locally.
"""
from __future__ import annotations

import itertools
import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Union

from taskboard.client.reorder import (
    apply_order,
    dense_order,
    filter_tasks,
    resolve_drag,
    resolve_step,
)
from taskboard.errors import InvalidRequestError, NotFoundError, TaskboardError
from taskboard.schemas import TaskRead

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = ("title", "description", "is_completed", "order", "owner_id")


def _message(exc: BaseException) -> str:
    return getattr(exc, "message", None) or str(exc) or exc.__class__.__name__


def _write_dto(task: TaskRead) -> dict:
    return {name: getattr(task, name) for name in WRITABLE_FIELDS}


class TaskStore:
    def __init__(self, api: Any, owner_id: Optional[int] = None) -> None:
        self.api = api
        self.owner_id = owner_id
        self.tasks: List[TaskRead] = []
        self.loading = False
        self.error: Optional[str] = None

        self._loaded = False
        self._in_flight = 0
        # Provisional records get negative ids; the server only hands out positive ones.
        self._temp_ids = itertools.count(-1, -1)

    @property
    def syncing(self) -> bool:
        """True while any write is waiting on the server."""
        return self._in_flight > 0

    @contextmanager
    def _sync(self) -> Iterator[None]:
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    def _find(self, task_id: int) -> Optional[TaskRead]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def _replace(self, task_id: int, task: TaskRead) -> None:
        self.tasks = [task if t.id == task_id else t for t in self.tasks]

    @staticmethod
    def _ensure_saved(task_id: int, operation: str) -> None:
        # Provisional ids only exist locally; the server must never see them.
        if task_id < 0:
            raise InvalidRequestError(f"Cannot {operation} a task that is still being created")

    def _restore(self, snapshot: List[TaskRead], operation: str, exc: BaseException) -> None:
        self.tasks = snapshot
        self.error = _message(exc)
        logger.warning("%s failed, rolled back: %s", operation, self.error)

    def visible(self, query: str = "") -> List[TaskRead]:
        return filter_tasks(self.tasks, query)

    async def refresh(self) -> None:
        """
        Replaces local state with the server's list. A failed fetch only
        records ``error``; the current tasks stay as they are.
        """
        first = not self._loaded
        if first:
            self.loading = True
        try:
            tasks = await self.api.list_tasks(self.owner_id)
        except TaskboardError as exc:
            self.error = _message(exc)
            logger.warning("refresh failed: %s", self.error)
            return
        finally:
            if first:
                self.loading = False

        self.tasks = list(tasks)
        self._loaded = True
        self.error = None

    async def create(self, title: str, owner_id: int, description: Optional[str] = None) -> TaskRead:
        provisional = TaskRead(
            id=next(self._temp_ids),
            title=title.strip(),
            description=(description or "").strip() or None,
            is_completed=False,
            order=max((t.order for t in self.tasks), default=-1) + 1,
            owner_id=owner_id,
        )
        temp_id = provisional.id
        self.tasks = [provisional] + self.tasks

        with self._sync():
            try:
                created = await self.api.create_task(_write_dto(provisional))
            except Exception as exc:
                self.tasks = [t for t in self.tasks if t.id != temp_id]
                self.error = _message(exc)
                logger.warning("create failed, dropped provisional task: %s", self.error)
                raise

        if self._find(temp_id) is not None:
            self._replace(temp_id, created)
        elif self._find(created.id) is None:
            # A refresh dropped the provisional record before the server had the task.
            self.tasks = [created] + self.tasks
        return created

    async def update(self, task_id: int, patch: Mapping[str, Any]) -> TaskRead:
        """
        Merges ``patch`` into the task and saves the whole record. Keys other
        than the writable fields are ignored.
        """
        self._ensure_saved(task_id, "update")
        current = self._find(task_id)
        if current is None:
            raise NotFoundError(f"Task {task_id} is not loaded", 404)

        snapshot = list(self.tasks)
        changes = {k: v for k, v in patch.items() if k in WRITABLE_FIELDS}
        merged = current.model_copy(update=changes)
        self._replace(task_id, merged)

        with self._sync():
            try:
                saved = await self.api.update_task(task_id, _write_dto(merged))
            except Exception as exc:
                self._restore(snapshot, "update", exc)
                raise

        # No content means the optimistic merge is what the server stored.
        if saved is None:
            return merged
        self._replace(task_id, saved)
        return saved

    async def remove(self, task_id: int) -> None:
        self._ensure_saved(task_id, "remove")
        snapshot = list(self.tasks)
        self.tasks = [t for t in self.tasks if t.id != task_id]

        with self._sync():
            try:
                await self.api.delete_task(task_id)
            except Exception as exc:
                self._restore(snapshot, "remove", exc)
                raise

    async def toggle(self, id_or_task: Union[int, TaskRead]) -> Optional[TaskRead]:
        """
        Flips ``is_completed``. A task that is missing locally or on the
        server means the list is stale, so it is reloaded instead of failing.
        """
        task_id = id_or_task if isinstance(id_or_task, int) else id_or_task.id
        self._ensure_saved(task_id, "toggle")
        current = self._find(task_id)
        if current is None:
            logger.warning("toggle: task %s not found locally, refreshing", task_id)
            await self.refresh()
            return None

        snapshot = list(self.tasks)
        flipped = not current.is_completed
        self._replace(task_id, current.model_copy(update={"is_completed": flipped}))

        with self._sync():
            try:
                saved = await self.api.toggle_task(task_id, flipped)
            except NotFoundError:
                self.tasks = snapshot
                logger.warning("toggle: task %s gone on the server, refreshing", task_id)
                saved = None
            except Exception as exc:
                self._restore(snapshot, "toggle", exc)
                raise

        if saved is None:
            await self.refresh()
            return None
        self._replace(task_id, saved)
        return saved

    async def reorder(self, new_list: Sequence[TaskRead]) -> None:
        """
        Numbers ``new_list`` 0..n-1, shows the result immediately and saves
        all pairs in one request. Only the tasks in ``new_list`` are touched.
        """
        pairs = dense_order(new_list)
        if not pairs:
            return
        for task_id, _ in pairs:
            self._ensure_saved(task_id, "reorder")

        snapshot = list(self.tasks)
        self.tasks = apply_order(self.tasks, pairs)

        with self._sync():
            try:
                await self.api.reorder_tasks(pairs)
            except Exception as exc:
                self._restore(snapshot, "reorder", exc)
                raise

    async def drag_end(self, active_id: int, over_id: Optional[int], query: str = "") -> bool:
        """Pointer drop over the visible list. Returns False for a no-op drop."""
        new_list = resolve_drag(self.visible(query), active_id, over_id)
        if new_list is None:
            return False
        await self.reorder(new_list)
        return True

    async def move(self, task_id: int, step: int, query: str = "") -> bool:
        """Keyboard move by ``step`` slots within the visible list."""
        new_list = resolve_step(self.visible(query), task_id, step)
        if new_list is None:
            return False
        await self.reorder(new_list)
        return True
