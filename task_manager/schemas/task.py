"""Task-related Marshmallow schemas."""

from datetime import datetime

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, pre_load, validate

from task_manager.models.task import (
    DESCRIPTION_MAX_LENGTH,
    PRIORITIES,
    STATUSES,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from task_manager.schemas.common import UTCDateTime
from task_manager.schemas.user import UserSummarySchema
from task_manager.utils import MAX_DB_INT, to_naive_utc, utcnow


STATUS_CHOICE = validate.OneOf(
    STATUSES, error="Status must be pending, in-progress, completed, or cancelled"
)
PRIORITY_CHOICE = validate.OneOf(PRIORITIES, error="Priority must be low, medium, high, or urgent")


def _in_future(value: datetime) -> None:
    if to_naive_utc(value) <= utcnow():
        raise ValidationError("Due date must be in the future")


class TaskSchema(Schema):
    """Schema for task serialization."""

    id = fields.Int(dump_only=True)
    title = fields.Str(dump_only=True)
    description = fields.Str(dump_only=True, allow_none=True)
    status = fields.Str(dump_only=True)
    priority = fields.Str(dump_only=True)
    due_date = UTCDateTime(dump_only=True, data_key="dueDate")
    completed_at = UTCDateTime(dump_only=True, data_key="completedAt")
    tags = fields.List(fields.Str(), dump_only=True)
    assigned_to = fields.Nested(
        UserSummarySchema, attribute="assignee", dump_only=True, data_key="assignedTo"
    )
    created_by = fields.Nested(
        UserSummarySchema, attribute="creator", dump_only=True, data_key="createdBy"
    )
    is_public = fields.Bool(dump_only=True, data_key="isPublic")
    is_overdue = fields.Bool(dump_only=True, data_key="isOverdue")
    age = fields.Int(dump_only=True)
    created_at = UTCDateTime(dump_only=True, data_key="createdAt")
    updated_at = UTCDateTime(dump_only=True, data_key="updatedAt")


class PublicTaskSchema(TaskSchema):
    """Task serialization for anonymous readers; user emails are withheld."""

    assigned_to = fields.Nested(
        UserSummarySchema,
        only=("id", "username"),
        attribute="assignee",
        dump_only=True,
        data_key="assignedTo",
    )
    created_by = fields.Nested(
        UserSummarySchema,
        only=("id", "username"),
        attribute="creator",
        dump_only=True,
        data_key="createdBy",
    )


class TaskCreateSchema(Schema):
    """Schema for task creation validation.

    Unknown keys (``status``, ``createdBy``, ...) are dropped rather than
    rejected; new tasks always start out pending and belong to the requester.
    """

    class Meta:
        unknown = EXCLUDE

    title = fields.Str(
        required=True,
        validate=validate.Length(
            min=1,
            max=TITLE_MAX_LENGTH,
            error=f"Task title is required and must be less than {TITLE_MAX_LENGTH} characters",
        ),
    )
    description = fields.Str(
        allow_none=True,
        validate=validate.Length(
            max=DESCRIPTION_MAX_LENGTH,
            error=f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters",
        ),
    )
    priority = fields.Str(validate=PRIORITY_CHOICE)
    due_date = fields.DateTime(allow_none=True, data_key="dueDate", validate=_in_future)
    tags = fields.List(
        fields.Str(
            validate=validate.Length(
                min=1, max=TAG_MAX_LENGTH, error=f"Tags must be 1 to {TAG_MAX_LENGTH} characters"
            )
        )
    )
    assigned_to = fields.Int(
        allow_none=True,
        strict=True,
        data_key="assignedTo",
        validate=validate.Range(min=1, max=MAX_DB_INT, error="Assigned user not found"),
    )
    is_public = fields.Bool(data_key="isPublic")

    @pre_load
    def strip_text(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("title", "description"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        if isinstance(data.get("tags"), list):
            data["tags"] = [tag.strip() if isinstance(tag, str) else tag for tag in data["tags"]]
        return data

    @post_load
    def normalize_due_date(self, data, **kwargs):
        if data.get("due_date") is not None:
            data["due_date"] = to_naive_utc(data["due_date"])
        return data


class TaskUpdateSchema(TaskCreateSchema):
    """Schema for full task updates; every field is optional."""

    title = fields.Str(
        validate=validate.Length(
            min=1,
            max=TITLE_MAX_LENGTH,
            error=f"Task title must be less than {TITLE_MAX_LENGTH} characters",
        ),
    )
    status = fields.Str(validate=STATUS_CHOICE)


class TaskStatusSchema(Schema):
    """Schema for status-only updates."""

    class Meta:
        unknown = EXCLUDE

    status = fields.Str(required=True, validate=STATUS_CHOICE)


class TaskFilterSchema(Schema):
    """Query-string filters for task listings."""

    class Meta:
        unknown = EXCLUDE

    status = fields.Str(validate=STATUS_CHOICE)
    priority = fields.Str(validate=PRIORITY_CHOICE)
    search = fields.Str()
