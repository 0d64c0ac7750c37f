"""User-related Marshmallow schemas."""

from marshmallow import Schema, fields, pre_load, validate

from task_manager.models.user import ROLES
from task_manager.schemas.common import UTCDateTime


USERNAME_LENGTH = validate.Length(min=3, max=30, error="Username must be between 3 and 30 characters")


class UserSchema(Schema):
    """Public profile of a user; the password hash is never dumped."""

    id = fields.Int(dump_only=True)
    username = fields.Str(dump_only=True)
    email = fields.Email(dump_only=True)
    role = fields.Str(dump_only=True)
    is_active = fields.Bool(dump_only=True, data_key="isActive")
    last_login = UTCDateTime(dump_only=True, data_key="lastLogin")
    created_at = UTCDateTime(dump_only=True, data_key="createdAt")
    updated_at = UTCDateTime(dump_only=True, data_key="updatedAt")


class UserSummarySchema(Schema):
    """Compact user reference embedded in task payloads."""

    id = fields.Int(dump_only=True)
    username = fields.Str(dump_only=True)
    email = fields.Email(dump_only=True)


class _NormalizedUserInput(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if isinstance(data.get("username"), str):
            data["username"] = data["username"].strip()
        if isinstance(data.get("email"), str):
            data["email"] = data["email"].strip().lower()
        return data


class RegisterSchema(_NormalizedUserInput):
    """Schema for user registration validation."""

    username = fields.Str(required=True, validate=USERNAME_LENGTH)
    email = fields.Email(required=True)
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error="Password must be at least 6 characters long"),
    )


class LoginSchema(_NormalizedUserInput):
    """Schema for user login validation."""

    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True)


class ProfileUpdateSchema(_NormalizedUserInput):
    """Fields a user may change on their own profile."""

    username = fields.Str(validate=USERNAME_LENGTH)
    email = fields.Email()


class AdminUserUpdateSchema(ProfileUpdateSchema):
    """Fields an admin may change on any account."""

    role = fields.Str(validate=validate.OneOf(ROLES, error="Role must be either user or admin"))
    is_active = fields.Bool(data_key="isActive")
