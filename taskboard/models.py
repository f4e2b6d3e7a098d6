# PURPOSE: Pydantic schemas for request bodies and JSON responses.

from datetime import datetime
from typing import Annotated, Literal, get_args

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .validation import sanitize_tags, sanitize_text

Status = Literal["pending", "in-progress", "completed"]
Priority = Literal["low", "medium", "high"]
Role = Literal["user", "admin"]

STATUSES: tuple[str, ...] = get_args(Status)
PRIORITIES: tuple[str, ...] = get_args(Priority)

Tag = Annotated[str, Field(max_length=20)]
# request bodies also accept the camelCase wire name, matching the sort keys
DUE_DATE_ALIASES = AliasChoices("due_date", "dueDate")


def _clean_text(value):
    return sanitize_text(value) if isinstance(value, str) else value


def _clean_tags(value):
    return sanitize_tags(value) if isinstance(value, list) else value


# --- Task schemas ---


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    status: Status = "pending"
    priority: Priority = "medium"
    due_date: datetime | None = Field(default=None, validation_alias=DUE_DATE_ALIASES)
    tags: list[Tag] = Field(default_factory=list)
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"title": "Buy milk", "priority": "low"},
                {"title": "Plan trip", "priority": "high", "due_date": "2025-12-31T18:00:00Z", "tags": ["travel"]},
            ]
        },
    )

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize_text_fields(cls, value):
        return _clean_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def sanitize_tag_list(cls, value):
        return _clean_tags(value)


class TaskUpdate(BaseModel):
    """Partial update: only fields present in the body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    status: Status | None = None
    priority: Priority | None = None
    due_date: datetime | None = Field(default=None, validation_alias=DUE_DATE_ALIASES)
    tags: list[Tag] | None = None
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"status": "in-progress"},
                {"priority": "high"},
                {"title": "New title", "tags": ["work"]},
            ]
        },
    )

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize_text_fields(cls, value):
        return _clean_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def sanitize_tag_list(cls, value):
        return _clean_tags(value)


class Task(BaseModel):
    id: int
    title: str
    description: str | None
    status: Status
    priority: Priority
    due_date: datetime | None
    tags: list[str]
    owner_id: int
    is_completed: bool
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)  # ORM -> schema


class PageRef(BaseModel):
    page: int
    limit: int


class Pagination(BaseModel):
    page: int
    limit: int
    has_next: bool
    has_prev: bool
    next: PageRef | None = None
    prev: PageRef | None = None


class TaskEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    data: Task


class TaskPage(BaseModel):
    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: list[Task]


class StatusCount(BaseModel):
    status: Status
    count: int


class PriorityCount(BaseModel):
    priority: Priority
    count: int


class TaskStats(BaseModel):
    total: int
    by_status: list[StatusCount]
    by_priority: list[PriorityCount]


class StatsEnvelope(BaseModel):
    success: bool = True
    data: TaskStats


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# --- User / Auth schemas ---


class RegisterRequest(BaseModel):
    # Raw password only in requests; never echoed back
    name: str
    email: str
    password: str
    model_config = ConfigDict(
        json_schema_extra={"examples": [{"name": "Ada", "email": "ada@example.com", "password": "Passw0rd"}]}
    )


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    avatar: str | None = None


class UserPublic(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    avatar: str | None
    is_verified: bool
    last_login: datetime | None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)  # allow ORM -> schema


class UserEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    data: UserPublic


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    token_type: Literal["bearer"] = "bearer"
    user: UserPublic
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"success": True, "message": "Login successful", "token": "<jwt>", "token_type": "bearer"}]
        }
    )
