"""Database models."""

from task_manager.models.task import Task, TaskTag
from task_manager.models.user import User


__all__ = ["User", "Task", "TaskTag"]
