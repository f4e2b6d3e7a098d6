from fastapi import Depends, Query

from ..auth import get_current_user
from ..models import UserPublic
from ..query import ListPlan, build_list_plan


def task_list_plan(
    status: str | None = Query(None, description="pending | in-progress | completed; other values are ignored"),
    priority: str | None = Query(None, description="low | medium | high; other values are ignored"),
    search: str | None = Query(None, description="Case-insensitive match on title, description or tags"),
    page: str | None = Query(None, description="Page number, starting at 1"),
    limit: str | None = Query(None, description="Page size (default 10, max 100)"),
    sort: str | None = Query(None, description="e.g. -created_at, priority, -due_date,title"),
    user: UserPublic = Depends(get_current_user),  # noqa: B008 (FastAPI Depends)
) -> ListPlan:
    # Raw strings on purpose: anything unparseable falls back to a default
    return build_list_plan(
        user.id,
        status=status,
        priority=priority,
        search=search,
        page=page,
        limit=limit,
        sort=sort,
    )
