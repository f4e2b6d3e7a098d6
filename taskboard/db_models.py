# PURPOSE: define how users, tasks and task tags look in the database.

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from .db import Base

# largest value a signed 64-bit INTEGER column (or bound parameter) holds
MAX_INT64 = 2**63 - 1


def now_utc():
    """Return timezone-aware UTC datetime (stored in DB)."""
    return datetime.now(UTC)


class UserDB(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    # stored lower-cased; the unique index is what settles concurrent sign-ups
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String(16), default="user", nullable=False)
    avatar: Mapped[str | None] = mapped_column(String, nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc, onupdate=now_utc)
    # relationship to tasks
    tasks = relationship("TaskDB", back_populates="owner")


class TaskDB(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # pending | in-progress | completed
    priority = Column(String(10), default="medium", nullable=False)  # low | medium | high
    due_date = Column(DateTime, nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=now_utc)
    updated_at = Column(DateTime, default=now_utc)

    owner = relationship("UserDB", back_populates="tasks")
    tag_rows = relationship(
        "TaskTagDB",
        order_by="TaskTagDB.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [t.name for t in self.tag_rows]

    @tags.setter
    def tags(self, names) -> None:
        self.tag_rows = [TaskTagDB(position=i, name=name) for i, name in enumerate(names)]

    @validates("status")
    def _sync_completion(self, key, value):
        """Keep is_completed/completed_at in lockstep with status."""
        if value == "completed":
            self.is_completed = True
            if self.completed_at is None:
                self.completed_at = now_utc()
        else:
            self.is_completed = False
            self.completed_at = None
        return value


class TaskTagDB(Base):
    __tablename__ = "task_tags"

    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String(20), nullable=False)


# Helpful indexes for per-owner filtering/sorting
Index("ix_tasks_owner_status", TaskDB.owner_id, TaskDB.status)
Index("ix_tasks_owner_priority", TaskDB.owner_id, TaskDB.priority)
Index("ix_tasks_owner_created_at", TaskDB.owner_id, TaskDB.created_at)
