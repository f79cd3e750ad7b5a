import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlmodel import Session, col, select

from taskboard.database import get_session
from taskboard.models import Task, User, utcnow
from taskboard.schemas import TaskOrderUpdate, TaskRead, TaskWrite

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _ensure_owner_exists(db: Session, owner_id: int) -> None:
    if db.get(User, owner_id) is None:
        logger.info("Rejected task write for unknown owner %s", owner_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid owner_id - user with id {owner_id} does not exist.",
        )


def _get_task_or_404(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.get("", response_model=List[TaskRead])
def list_tasks(owner_id: Optional[int] = None, db: Session = Depends(get_session)):
    """
    Lists tasks in display order, optionally only those of one owner.
    """
    query = select(Task)
    if owner_id is not None:
        query = query.where(Task.owner_id == owner_id)
    query = query.order_by(col(Task.order), col(Task.id))
    return db.exec(query).all()


@router.get("/{task_id}", response_model=TaskRead)
def get_task(task_id: int, db: Session = Depends(get_session)):
    return _get_task_or_404(db, task_id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(task_in: TaskWrite, response: Response, db: Session = Depends(get_session)):
    """
    Creates a task for an existing owner.
    """
    _ensure_owner_exists(db, task_in.owner_id)

    now = utcnow()
    db_task = Task(**task_in.model_dump(), created_at=now, updated_at=now)
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    logger.info("Created task %s for owner %s", db_task.id, db_task.owner_id)

    response.headers["Location"] = f"{router.prefix}/{db_task.id}"
    return db_task


@router.put("/{task_id}", response_model=TaskRead)
def update_task(task_id: int, task_in: TaskWrite, db: Session = Depends(get_session)):
    """
    Replaces every writable field of a task.
    """
    _ensure_owner_exists(db, task_in.owner_id)
    task = _get_task_or_404(db, task_id)

    for key, value in task_in.model_dump().items():
        setattr(task, key, value)
    task.updated_at = utcnow()

    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, db: Session = Depends(get_session)):
    task = _get_task_or_404(db, task_id)
    db.delete(task)
    db.commit()
    logger.info("Deleted task %s", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/reorder", status_code=status.HTTP_204_NO_CONTENT)
def reorder_tasks(updates: List[TaskOrderUpdate], db: Session = Depends(get_session)):
    """
    Applies a batch of ``(id, order)`` pairs in one commit. Ids that do not
    exist are skipped.
    """
    ids = [u.id for u in updates]
    tasks = {}
    if ids:
        tasks = {t.id: t for t in db.exec(select(Task).where(col(Task.id).in_(ids))).all()}

    now = utcnow()
    applied = 0
    for update in updates:
        task = tasks.get(update.id)
        if task is None:
            continue
        task.order = update.order
        task.updated_at = now
        db.add(task)
        applied += 1
    db.commit()

    logger.info("Reordered %d of %d tasks", applied, len(updates))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{task_id}/toggle", response_model=TaskRead)
def toggle_task(task_id: int, is_completed: bool = Body(...), db: Session = Depends(get_session)):
    """
    Sets the completion flag. The body is a bare JSON boolean.
    """
    task = _get_task_or_404(db, task_id)
    task.is_completed = is_completed
    task.updated_at = utcnow()

    db.add(task)
    db.commit()
    db.refresh(task)
    return task
