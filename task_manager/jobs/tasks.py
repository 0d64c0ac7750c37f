"""Background jobs."""

import logging

from opentelemetry import trace

from task_manager.jobs.celery import celery


logger = logging.getLogger(__name__)


@celery.task
def send_task_assignment_notification(task_id: int, assignee_id: int, assigned_by_id: int):
    """Notify a user that a task was assigned to them.

    Delivery is a structured log line; the payload carries only ids so the
    worker needs no database access.
    """
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span("task.notify_assignee") as span:
        span.set_attribute("task.id", task_id)
        span.set_attribute("assignee.id", assignee_id)
        logger.info(
            f"Task {task_id} assigned to user {assignee_id} by user {assigned_by_id}",
            extra={"task_id": task_id, "assignee_id": assignee_id, "assigned_by_id": assigned_by_id},
        )
        return {"task_id": task_id, "assignee_id": assignee_id, "status": "sent"}
