"""Task CRUD and listing endpoints."""

import logging

from flask import Blueprint, g, jsonify, request
from kombu.exceptions import OperationalError as KombuOperationalError
from marshmallow import ValidationError

from task_manager.errors import error_response, validation_error_response
from task_manager.extensions import db
from task_manager.middleware.auth import token_optional, token_required
from task_manager.models import Task
from task_manager.pagination import paginated_response
from task_manager.schemas import (
    PublicTaskSchema,
    TaskCreateSchema,
    TaskFilterSchema,
    TaskSchema,
    TaskStatusSchema,
    TaskUpdateSchema,
)
from task_manager.services.tasks import apply_task_fields, public_tasks_query, visible_tasks_query
from task_manager.telemetry import get_meter, get_tracer


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)

tasks_created = meter.create_counter(
    name="tasks.created",
    description="Tasks created",
    unit="1",
)
status_changes = meter.create_counter(
    name="tasks.status_changes",
    description="Task status transitions",
    unit="1",
)

tasks_bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")


def _notify_assignee(task: Task) -> None:
    from task_manager.jobs.tasks import send_task_assignment_notification

    try:
        send_task_assignment_notification.delay(task.id, task.assigned_to_id, g.current_user.id)
    except KombuOperationalError:
        logger.exception(
            f"Could not enqueue assignment notification for task {task.id}",
            extra={"user_id": g.current_user.id},
        )


def _load_task(task_id: int) -> Task | None:
    return db.session.get(Task, task_id)


@tasks_bp.route("", methods=["GET"])
@token_required
def list_tasks():
    """List tasks the user created, was assigned, or that are public.

    Query params:
        status: Exact status filter
        priority: Exact priority filter
        search: Case-insensitive match on title, description or tags
        page: Page number (default 1)
        limit: Items per page (default 10)

    Returns:
        JSON response with ``data`` and ``pagination``.
    """
    try:
        filters = TaskFilterSchema().load({key: value for key, value in request.args.items() if value})
    except ValidationError as err:
        return validation_error_response(err)

    query = visible_tasks_query(
        g.current_user,
        status=filters.get("status"),
        priority=filters.get("priority"),
        search=filters.get("search"),
    )
    return jsonify(paginated_response(query, TaskSchema()))


@tasks_bp.route("/public", methods=["GET"])
@token_optional
def list_public_tasks():
    """List public tasks; no authentication required."""
    return jsonify(paginated_response(public_tasks_query(), PublicTaskSchema()))


@tasks_bp.route("/<id:task_id>", methods=["GET"])
@token_required
def get_task(task_id: int):
    """Get a single task visible to the requester."""
    task = _load_task(task_id)
    if task is None:
        return error_response("Task not found", 404)

    if not task.is_visible_to(g.current_user):
        logger.warning(
            f"Task {task_id} read denied for user {g.current_user.id}",
            extra={"user_id": g.current_user.id},
        )
        return error_response("Access denied", 403)

    return jsonify({"task": TaskSchema().dump(task)})


@tasks_bp.route("", methods=["POST"])
@token_required
def create_task():
    """Create a task owned by the requester."""
    with tracer.start_as_current_span("task.create") as span:
        try:
            data = TaskCreateSchema().load(request.get_json(silent=True) or {})
            task = Task(creator=g.current_user)
            assignee_changed = apply_task_fields(task, data)
        except ValidationError as err:
            db.session.rollback()
            return validation_error_response(err)

        db.session.add(task)
        db.session.commit()

        span.set_attribute("user.id", g.current_user.id)
        span.set_attribute("task.id", task.id)

        tasks_created.add(1, {"priority": task.priority})
        logger.info(f"Task created: {task.id}", extra={"user_id": g.current_user.id})

        if assignee_changed and task.assigned_to_id != g.current_user.id:
            _notify_assignee(task)

        return jsonify({"message": "Task created successfully", "task": TaskSchema().dump(task)}), 201


@tasks_bp.route("/<id:task_id>", methods=["PUT"])
@token_required
def update_task(task_id: int):
    """Update any field of a task; creator only."""
    with tracer.start_as_current_span("task.update") as span:
        span.set_attribute("task.id", task_id)

        task = _load_task(task_id)
        if task is None:
            return error_response("Task not found", 404)

        if not task.is_editable_by(g.current_user):
            span.set_attribute("auth.status", "forbidden")
            return error_response("Access denied", 403)

        previous_status = task.status
        try:
            data = TaskUpdateSchema().load(request.get_json(silent=True) or {})
            assignee_changed = apply_task_fields(task, data)
        except ValidationError as err:
            db.session.rollback()
            return validation_error_response(err)

        db.session.commit()

        if task.status != previous_status:
            status_changes.add(1, {"status": task.status})
        logger.info(f"Task updated: {task.id}", extra={"user_id": g.current_user.id})

        if assignee_changed and task.assigned_to_id != g.current_user.id:
            _notify_assignee(task)

        return jsonify({"message": "Task updated successfully", "task": TaskSchema().dump(task)})


@tasks_bp.route("/<id:task_id>/status", methods=["PATCH"])
@token_required
def update_task_status(task_id: int):
    """Change only the status of a task; creator or assignee."""
    with tracer.start_as_current_span("task.update_status") as span:
        span.set_attribute("task.id", task_id)

        try:
            data = TaskStatusSchema().load(request.get_json(silent=True) or {})
        except ValidationError as err:
            return validation_error_response(err)

        task = _load_task(task_id)
        if task is None:
            return error_response("Task not found", 404)

        if not task.can_change_status(g.current_user):
            span.set_attribute("auth.status", "forbidden")
            return error_response("Access denied", 403)

        previous_status = task.status
        task.status = data["status"]
        db.session.commit()

        span.set_attribute("task.status", task.status)
        if task.status != previous_status:
            status_changes.add(1, {"status": task.status})
        logger.info(
            f"Task {task.id} status {previous_status} -> {task.status}",
            extra={"user_id": g.current_user.id},
        )

        return jsonify(
            {"message": "Task status updated successfully", "task": TaskSchema().dump(task)}
        )


@tasks_bp.route("/<id:task_id>", methods=["DELETE"])
@token_required
def delete_task(task_id: int):
    """Delete a task; creator only."""
    with tracer.start_as_current_span("task.delete") as span:
        span.set_attribute("task.id", task_id)

        task = _load_task(task_id)
        if task is None:
            return error_response("Task not found", 404)

        if not task.is_editable_by(g.current_user):
            span.set_attribute("auth.status", "forbidden")
            return error_response("Access denied", 403)

        db.session.delete(task)
        db.session.commit()

        logger.info(f"Task deleted: {task_id}", extra={"user_id": g.current_user.id})

        return jsonify({"message": "Task deleted successfully"})
