"""Turn raw ``GET /tasks`` query parameters into a bounded list plan.

Every value that reaches SQL goes through here: enumerated filters are
checked against their closed sets, free-text search is sanitized and
LIKE-escaped, and page/limit are clamped. Anything unrecognized is dropped
rather than rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import case, func, or_

from .config import settings
from .db_models import MAX_INT64, TaskDB, TaskTagDB
from .models import PRIORITIES, STATUSES, PageRef, Pagination
from .validation import sanitize_text

LIKE_ESCAPE = "\\"
# OFFSET is bound as a 64-bit integer; pages beyond it are clamped and come back empty
MAX_OFFSET = MAX_INT64

# accepted sort names (snake_case and camelCase) -> canonical field
SORT_FIELDS = {
    "created_at": "created_at",
    "createdAt": "created_at",
    "updated_at": "updated_at",
    "updatedAt": "updated_at",
    "due_date": "due_date",
    "dueDate": "due_date",
    "title": "title",
    "priority": "priority",
    "status": "status",
}


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


DEFAULT_SORT = (SortKey("created_at", descending=True),)


@dataclass(frozen=True)
class ListPlan:
    owner_id: int
    status: str | None = None
    priority: str | None = None
    search: str | None = None
    page: int = 1
    limit: int = field(default_factory=lambda: settings.TASKS_PAGE_SIZE_DEFAULT)
    sort: tuple[SortKey, ...] = DEFAULT_SORT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def conditions(self) -> list[Any]:
        """WHERE conjuncts; the owner clause always comes first."""
        clauses: list[Any] = [TaskDB.owner_id == self.owner_id]
        if self.status is not None:
            clauses.append(TaskDB.status == self.status)
        if self.priority is not None:
            clauses.append(TaskDB.priority == self.priority)
        if self.search:
            pattern = f"%{escape_like(self.search)}%"
            clauses.append(
                or_(
                    TaskDB.title.ilike(pattern, escape=LIKE_ESCAPE),
                    TaskDB.description.ilike(pattern, escape=LIKE_ESCAPE),
                    TaskDB.tag_rows.any(TaskTagDB.name.ilike(pattern, escape=LIKE_ESCAPE)),
                )
            )
        return clauses

    def ordering(self) -> list[Any]:
        """ORDER BY expressions, closed with a tiebreaker so paging is stable."""
        order: list[Any] = []
        for key in self.sort:
            for expr, directional in _sort_expressions(key.field):
                if not directional:
                    order.append(expr)
                else:
                    order.append(expr.desc() if key.descending else expr.asc())

        fields = [k.field for k in self.sort]
        if "created_at" in fields:
            created_desc = self.sort[fields.index("created_at")].descending
            order.append(TaskDB.id.desc() if created_desc else TaskDB.id.asc())
        else:
            order.extend([TaskDB.created_at.desc(), TaskDB.id.desc()])
        return order

    def paginate(self, total: int) -> Pagination:
        has_next = self.offset + self.limit < total
        has_prev = self.offset > 0
        return Pagination(
            page=self.page,
            limit=self.limit,
            has_next=has_next,
            has_prev=has_prev,
            next=PageRef(page=self.page + 1, limit=self.limit) if has_next else None,
            prev=PageRef(page=self.page - 1, limit=self.limit) if has_prev else None,
        )


def _sort_expressions(name: str) -> list[tuple[Any, bool]]:
    """(expression, follows requested direction) pairs for one sort field."""
    if name == "priority":
        # rank instead of alphabetical: low(0) < medium(1) < high(2)
        return [(case(*((TaskDB.priority == p, i) for i, p in enumerate(PRIORITIES)), else_=0), True)]
    if name == "status":
        return [(case(*((TaskDB.status == s, i) for i, s in enumerate(STATUSES)), else_=0), True)]
    if name == "due_date":
        # tasks without a due date go last in both directions
        return [(case((TaskDB.due_date.is_(None), 1), else_=0).asc(), False), (TaskDB.due_date, True)]
    if name == "title":
        return [(func.lower(TaskDB.title), True)]
    return [(getattr(TaskDB, name), True)]


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term only ever matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def parse_sort(raw: str | None) -> tuple[SortKey, ...]:
    """Parse "-created_at,title"-style specifiers; unknown fields are skipped."""
    if not raw:
        return DEFAULT_SORT
    keys: list[SortKey] = []
    seen: set[str] = set()
    for part in raw.split(","):
        part = part.strip()
        descending = part.startswith("-")
        name = part.lstrip("+-")
        canonical = SORT_FIELDS.get(name)
        if canonical is None or canonical in seen:
            continue
        seen.add(canonical)
        keys.append(SortKey(canonical, descending))
    return tuple(keys) or DEFAULT_SORT


def _positive_int(raw: str | None, default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def build_list_plan(
    owner_id: int,
    *,
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    sort: str | None = None,
) -> ListPlan:
    """Validate loosely-typed inputs into a ListPlan scoped to `owner_id`."""
    term = None
    if search:
        term = sanitize_text(search)[: settings.SEARCH_MAX_LENGTH] or None

    size = min(_positive_int(limit, settings.TASKS_PAGE_SIZE_DEFAULT), settings.TASKS_PAGE_SIZE_MAX)
    number = min(_positive_int(page, 1), MAX_OFFSET // size + 1)

    return ListPlan(
        owner_id=owner_id,
        status=status if status in STATUSES else None,
        priority=priority if priority in PRIORITIES else None,
        search=term,
        page=number,
        limit=size,
        sort=parse_sort(sort),
    )
