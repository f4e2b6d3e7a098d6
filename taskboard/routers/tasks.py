# taskboard/routers/tasks.py
# PURPOSE: per-user task CRUD, filtered listing and stats under /tasks

from fastapi import APIRouter, Response, status, Depends
from sqlalchemy.orm import Session

from ..api.deps import task_list_plan
from ..auth import get_current_user
from ..errors import NotFound
from ..models import (
    MessageResponse,
    StatsEnvelope,
    Task,
    TaskCreate,
    TaskEnvelope,
    TaskPage,
    TaskStats,
    TaskUpdate,
    UserPublic,
)
from ..query import ListPlan
from ..store_db import (
    get_db,
    list_tasks as db_list_tasks,
    count_tasks as db_count_tasks,
    create_task as db_create_task,
    get_task as db_get_task,
    update_task as db_update_task,
    delete_task as db_delete_task,
    task_stats as db_task_stats,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])

TASK_NOT_FOUND = "Task not found"


@router.get("", response_model=TaskPage)
def list_tasks(
    plan: ListPlan = Depends(task_list_plan),
    db: Session = Depends(get_db),
):
    total = db_count_tasks(db, plan)
    items = [Task.model_validate(row) for row in db_list_tasks(db, plan)]
    return TaskPage(count=len(items), total=total, pagination=plan.paginate(total), data=items)


# declared before /{task_id} so "stats" is not parsed as an id
@router.get("/stats", response_model=StatsEnvelope)
def task_stats(
    db: Session = Depends(get_db),
    user: UserPublic = Depends(get_current_user),
):
    return StatsEnvelope(data=TaskStats.model_validate(db_task_stats(db, owner_id=user.id)))


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    item: TaskCreate,
    response: Response,
    db: Session = Depends(get_db),
    user: UserPublic = Depends(get_current_user),
):
    row = db_create_task(db, item, owner_id=user.id)
    response.headers["Location"] = f"/api/v1/tasks/{row.id}"
    return TaskEnvelope(message="Task created successfully", data=Task.model_validate(row))


@router.get("/{task_id}", response_model=TaskEnvelope)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    user: UserPublic = Depends(get_current_user),
):
    row = db_get_task(db, task_id, owner_id=user.id)
    if not row:
        raise NotFound(TASK_NOT_FOUND)
    return TaskEnvelope(data=Task.model_validate(row))


@router.put("/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_id: int,
    item: TaskUpdate,
    db: Session = Depends(get_db),
    user: UserPublic = Depends(get_current_user),
):
    row = db_update_task(db, task_id, item, owner_id=user.id)
    if not row:
        raise NotFound(TASK_NOT_FOUND)
    return TaskEnvelope(message="Task updated successfully", data=Task.model_validate(row))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    user: UserPublic = Depends(get_current_user),
):
    if not db_delete_task(db, task_id, owner_id=user.id):
        raise NotFound(TASK_NOT_FOUND)
    return MessageResponse(message="Task deleted successfully")
