"""
Turning drag-and-drop gestures into a dense per-list ordering.

The functions here are pure: they take the visible (filtered) sequence of
tasks and return a new sequence, or ``None`` when the gesture changes
nothing. ``dense_order`` then numbers a sequence 0..n-1, discarding
whatever order values it had before.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from taskboard.schemas import TaskRead

T = TypeVar("T")

OrderPairs = List[Tuple[int, int]]


def filter_tasks(tasks: Iterable[TaskRead], query: str = "") -> List[TaskRead]:
    """Tasks whose title or description contains ``query``, in display order."""
    needle = (query or "").lower()
    matched = [
        t for t in tasks
        if needle in t.title.lower() or needle in (t.description or "").lower()
    ]
    return sorted(matched, key=lambda t: t.order)


def array_move(items: Sequence[T], old_index: int, new_index: int) -> List[T]:
    moved = list(items)
    moved.insert(new_index, moved.pop(old_index))
    return moved


def _index_of(visible: Sequence[TaskRead], task_id: int) -> Optional[int]:
    for i, task in enumerate(visible):
        if task.id == task_id:
            return i
    return None


def resolve_drag(
    visible: Sequence[TaskRead], active_id: int, over_id: Optional[int]
) -> Optional[List[TaskRead]]:
    """
    New visible sequence after dropping ``active_id`` onto ``over_id``.
    Dropping outside any target, or onto itself, is a no-op.
    """
    if over_id is None or active_id == over_id:
        return None
    old_index = _index_of(visible, active_id)
    new_index = _index_of(visible, over_id)
    if old_index is None or new_index is None:
        return None
    return array_move(visible, old_index, new_index)


def resolve_step(visible: Sequence[TaskRead], task_id: int, step: int) -> Optional[List[TaskRead]]:
    """Keyboard move: ``step=-1`` moves up one slot, ``step=1`` down one."""
    old_index = _index_of(visible, task_id)
    if old_index is None or step == 0:
        return None
    new_index = old_index + step
    if new_index < 0 or new_index >= len(visible):
        return None
    return array_move(visible, old_index, new_index)


def dense_order(sequence: Iterable[TaskRead]) -> OrderPairs:
    return [(task.id, index) for index, task in enumerate(sequence)]


def apply_order(tasks: Iterable[TaskRead], pairs: OrderPairs) -> List[TaskRead]:
    """
    Copies of ``tasks`` with the given order values applied, stably sorted
    by order. Tasks outside ``pairs`` keep their current value.
    """
    new_orders = dict(pairs)
    updated = [
        t.model_copy(update={"order": new_orders[t.id]}) if t.id in new_orders else t
        for t in tasks
    ]
    return sorted(updated, key=lambda t: t.order)
