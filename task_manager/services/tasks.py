"""Task query construction and field application."""

from typing import Any

from marshmallow import ValidationError
from sqlalchemy import or_

from task_manager.extensions import db
from task_manager.models import Task, TaskTag, User
from task_manager.utils import LIKE_ESCAPE, like_pattern


def visible_tasks_query(
    user: User,
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
):
    """Tasks the user created, was assigned, or that are public.

    Args:
        user: Requesting user.
        status: Exact status filter.
        priority: Exact priority filter.
        search: Case-insensitive substring matched against title,
            description and each tag.

    Returns:
        Query ordered newest first.
    """
    query = db.session.query(Task).filter(Task.visible_filter(user.id))

    if status:
        query = query.filter(Task.status == status)
    if priority:
        query = query.filter(Task.priority == priority)
    if search:
        pattern = like_pattern(search)
        query = query.filter(
            or_(
                Task.title.ilike(pattern, escape=LIKE_ESCAPE),
                Task.description.ilike(pattern, escape=LIKE_ESCAPE),
                Task.tag_links.any(TaskTag.name.ilike(pattern, escape=LIKE_ESCAPE)),
            )
        )

    return query.order_by(Task.created_at.desc(), Task.id.desc())


def public_tasks_query():
    """All public tasks, newest first."""
    return (
        db.session.query(Task)
        .filter(Task.is_public.is_(True))
        .order_by(Task.created_at.desc(), Task.id.desc())
    )


def get_assignee(user_id: int | None) -> User | None:
    """Resolve an ``assignedTo`` id to a user.

    Raises:
        ValidationError: If the id does not match an existing user.
    """
    if user_id is None:
        return None
    # The task being built may not be in the session yet
    with db.session.no_autoflush:
        user = db.session.get(User, user_id)
    if user is None:
        raise ValidationError({"assignedTo": ["Assigned user not found"]})
    return user


def apply_task_fields(task: Task, data: dict[str, Any]) -> bool:
    """Copy validated schema data onto a task.

    ``created_by`` is never touched here; callers set it once at creation.

    Args:
        task: Task to mutate.
        data: Output of TaskCreateSchema or TaskUpdateSchema.

    Returns:
        True if the assignee changed to a different user.
    """
    assignee_changed = False

    if "assigned_to" in data:
        assignee = get_assignee(data["assigned_to"])
        new_id = assignee.id if assignee else None
        assignee_changed = new_id is not None and new_id != task.assigned_to_id
        task.assignee = assignee

    for field in ("title", "description", "priority", "due_date", "is_public", "status"):
        if field in data:
            setattr(task, field, data[field])

    if "tags" in data:
        task.tags = data["tags"]

    return assignee_changed
