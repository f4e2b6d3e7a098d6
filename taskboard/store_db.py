# PURPOSE: task persistence. Every function takes the caller's owner_id (or a
# ListPlan that carries it); a task owned by someone else looks exactly like a
# missing one.

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .db_models import MAX_INT64, TaskDB, now_utc
from .models import PRIORITIES, STATUSES, TaskCreate, TaskUpdate

if TYPE_CHECKING:
    from .query import ListPlan


# --- Session dependency ----------------------------------------------------


def get_db():
    """Yield a SQLAlchemy session (used as a FastAPI dependency)."""
    from .db import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# --- Listing ---------------------------------------------------------------


def list_tasks(db: Session, plan: ListPlan) -> List[TaskDB]:
    """Return one page of tasks with the plan's filters and ordering applied."""
    query = (
        db.query(TaskDB)
        .filter(*plan.conditions())
        .order_by(*plan.ordering())
        .offset(plan.offset)
        .limit(plan.limit)
    )
    return query.all()


def count_tasks(db: Session, plan: ListPlan) -> int:
    """Return total count for the plan's filters (no pagination)."""
    query = db.query(func.count(TaskDB.id)).filter(*plan.conditions())
    return int(query.scalar() or 0)


# --- CRUD ------------------------------------------------------------------


def create_task(db: Session, data: TaskCreate, *, owner_id: int) -> TaskDB:
    now = now_utc()
    row = TaskDB(
        title=data.title,
        description=data.description,
        status=data.status,
        priority=data.priority,
        due_date=data.due_date,
        owner_id=owner_id,
        created_at=now,
        updated_at=now,
    )
    row.tags = data.tags
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_task(db: Session, task_id: int, *, owner_id: int) -> Optional[TaskDB]:
    if not 0 < task_id <= MAX_INT64:
        # no row can carry this id, and the driver cannot bind it
        return None
    query = db.query(TaskDB).filter(TaskDB.owner_id == owner_id, TaskDB.id == task_id)
    return query.one_or_none()


# explicit null in the body is a no-op for these; the rest can be cleared
_NOT_NULLABLE = ("title", "status", "priority", "tags")


def update_task(db: Session, task_id: int, data: TaskUpdate, *, owner_id: int) -> Optional[TaskDB]:
    """Partial update. Returns updated row or None if not found/not owned."""
    row = get_task(db, task_id, owner_id=owner_id)
    if not row:
        return None
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in _NOT_NULLABLE:
            continue
        setattr(row, field, value)
    row.updated_at = now_utc()
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def delete_task(db: Session, task_id: int, *, owner_id: int) -> bool:
    """Delete a task; returns True if deleted, False if not found/not owned."""
    row = get_task(db, task_id, owner_id=owner_id)
    if not row:
        return False
    db.delete(row)
    db.commit()
    return True


# --- Stats -----------------------------------------------------------------


def task_stats(db: Session, *, owner_id: int) -> dict:
    """Per-status and per-priority counts, zero-filled, in enumeration order."""
    by_status = dict(
        db.query(TaskDB.status, func.count(TaskDB.id))
        .filter(TaskDB.owner_id == owner_id)
        .group_by(TaskDB.status)
        .all()
    )
    by_priority = dict(
        db.query(TaskDB.priority, func.count(TaskDB.id))
        .filter(TaskDB.owner_id == owner_id)
        .group_by(TaskDB.priority)
        .all()
    )
    return {
        "total": sum(by_status.values()),
        "by_status": [{"status": s, "count": by_status.get(s, 0)} for s in STATUSES],
        "by_priority": [{"priority": p, "count": by_priority.get(p, 0)} for p in PRIORITIES],
    }
