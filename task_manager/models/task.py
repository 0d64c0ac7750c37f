"""Task and TaskTag models."""

from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, or_
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from task_manager.extensions import db
from task_manager.utils import utcnow


STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in-progress"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED)

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"
PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH, PRIORITY_URGENT)

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
TAG_MAX_LENGTH = 20


class Task(db.Model):
    """A work item owned by its creator and optionally delegated to an assignee."""

    __tablename__ = "tasks"
    __table_args__ = (Index("ix_tasks_status_priority", "status", "priority"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_PENDING, nullable=False)
    priority: Mapped[str] = mapped_column(String(10), default=PRIORITY_MEDIUM, nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(default=None, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(default=None)
    is_public: Mapped[bool] = mapped_column(default=False, nullable=False)
    assigned_to_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), index=True)
    created_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    creator: Mapped["User"] = relationship(  # noqa: F821
        "User", back_populates="created_tasks", foreign_keys=[created_by_id]
    )
    assignee: Mapped["User"] = relationship(  # noqa: F821
        "User", back_populates="assigned_tasks", foreign_keys=[assigned_to_id]
    )
    tag_links: Mapped[list["TaskTag"]] = relationship(
        "TaskTag",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskTag.id",
    )

    # Plain list of tag names; assigning a list replaces the stored tags
    tags: AssociationProxy[list[str]] = association_proxy(
        "tag_links", "name", creator=lambda name: TaskTag(name=name)
    )

    @validates("status")
    def _track_completion(self, key: str, value: str) -> str:
        """Keep completed_at in step with status transitions."""
        if value == STATUS_COMPLETED:
            if self.status != STATUS_COMPLETED or self.completed_at is None:
                self.completed_at = utcnow()
        else:
            self.completed_at = None
        return value

    @property
    def is_overdue(self) -> bool:
        if self.due_date is None or self.status == STATUS_COMPLETED:
            return False
        return utcnow() > self.due_date

    @property
    def age(self) -> int:
        """Whole days since the task was created."""
        created = self.created_at or utcnow()
        return (utcnow() - created).days

    def is_visible_to(self, user: "User | None") -> bool:  # noqa: F821
        """Check whether the given user may read this task.

        Args:
            user: Requesting user, or None for anonymous access.

        Returns:
            True for public tasks and for the creator or assignee.
        """
        if self.is_public:
            return True
        if user is None:
            return False
        return self.created_by_id == user.id or self.assigned_to_id == user.id

    def is_editable_by(self, user: "User") -> bool:  # noqa: F821
        """Only the creator may edit all fields or delete the task."""
        return self.created_by_id == user.id

    def can_change_status(self, user: "User") -> bool:  # noqa: F821
        """The creator and the assignee may change the status."""
        return self.created_by_id == user.id or self.assigned_to_id == user.id

    @classmethod
    def visible_filter(cls, user_id: int):
        """SQL criterion matching tasks created by, assigned to, or public for a user."""
        return or_(cls.created_by_id == user_id, cls.assigned_to_id == user_id, cls.is_public.is_(True))

    def __repr__(self) -> str:
        return f"<Task {self.id} {self.title!r}>"


class TaskTag(db.Model):
    """A single tag attached to a task."""

    __tablename__ = "task_tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(TAG_MAX_LENGTH), index=True, nullable=False)

    task: Mapped["Task"] = relationship("Task", back_populates="tag_links")

    def __repr__(self) -> str:
        return f"<TaskTag task={self.task_id} {self.name!r}>"
