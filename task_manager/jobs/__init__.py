"""Background job modules."""

from task_manager.jobs.celery import celery
from task_manager.jobs.tasks import send_task_assignment_notification


__all__ = ["celery", "send_task_assignment_notification"]
