"""User lookup helpers."""

from sqlalchemy import or_

from task_manager.extensions import db
from task_manager.models import User
from task_manager.utils import LIKE_ESCAPE, like_pattern


def find_conflicting_user(
    username: str | None = None, email: str | None = None, exclude_id: int | None = None
) -> User | None:
    """Return a user that already holds ``username`` or ``email``.

    Args:
        username: Username to check, skipped if empty.
        email: Email to check, skipped if empty.
        exclude_id: User id to ignore, so an account never conflicts with itself.

    Returns:
        The first conflicting user, or None.
    """
    criteria = []
    if username:
        criteria.append(User.username == username)
    if email:
        criteria.append(User.email == email)
    if not criteria:
        return None

    query = db.session.query(User).filter(or_(*criteria))
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first()


def search_users_query(term: str):
    """Users whose username or email contains ``term``, case-insensitively."""
    pattern = like_pattern(term)
    return (
        db.session.query(User)
        .filter(
            or_(
                User.username.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
        .order_by(User.created_at.desc(), User.id.desc())
    )


def delete_user(user: User) -> None:
    """Delete a user, the tasks they created, and their task assignments.

    The caller commits.
    """
    for task in user.assigned_tasks.all():
        task.assignee = None
    for task in user.created_tasks.all():
        db.session.delete(task)
    db.session.flush()
    db.session.delete(user)
