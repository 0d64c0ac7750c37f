"""Marshmallow schemas for serialization and validation."""

from task_manager.schemas.task import (
    PublicTaskSchema,
    TaskCreateSchema,
    TaskFilterSchema,
    TaskSchema,
    TaskStatusSchema,
    TaskUpdateSchema,
)
from task_manager.schemas.user import (
    AdminUserUpdateSchema,
    LoginSchema,
    ProfileUpdateSchema,
    RegisterSchema,
    UserSchema,
    UserSummarySchema,
)


__all__ = [
    "UserSchema",
    "UserSummarySchema",
    "RegisterSchema",
    "LoginSchema",
    "ProfileUpdateSchema",
    "AdminUserUpdateSchema",
    "TaskSchema",
    "PublicTaskSchema",
    "TaskCreateSchema",
    "TaskUpdateSchema",
    "TaskStatusSchema",
    "TaskFilterSchema",
]
