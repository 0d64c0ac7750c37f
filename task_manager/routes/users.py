"""User management endpoints."""

import logging

from flask import Blueprint, g, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from task_manager.errors import error_response, validation_error_response
from task_manager.extensions import db
from task_manager.middleware.auth import admin_required, token_required
from task_manager.models import User
from task_manager.pagination import paginated_response
from task_manager.schemas import AdminUserUpdateSchema, UserSchema
from task_manager.services.users import delete_user, find_conflicting_user, search_users_query
from task_manager.telemetry import get_tracer


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("", methods=["GET"])
@admin_required
def list_users():
    """List all users, newest first (admin only).

    Query params:
        page: Page number (default 1)
        limit: Items per page (default 10)
    """
    query = db.session.query(User).order_by(User.created_at.desc(), User.id.desc())
    return jsonify(paginated_response(query, UserSchema()))


@users_bp.route("/search/<query>", methods=["GET"])
@admin_required
def search_users(query: str):
    """Search users by username or email (admin only)."""
    return jsonify(paginated_response(search_users_query(query), UserSchema()))


@users_bp.route("/<id:user_id>", methods=["GET"])
@token_required
def get_user(user_id: int):
    """Get a user profile; non-admins may only read their own."""
    user = db.session.get(User, user_id)
    if user is None:
        return error_response("User not found", 404)

    if not g.current_user.is_admin and g.current_user.id != user.id:
        return error_response("Access denied", 403)

    return jsonify({"user": UserSchema().dump(user)})


@users_bp.route("/<id:user_id>", methods=["PUT"])
@admin_required
def update_user(user_id: int):
    """Update username, email, role or active flag of any user (admin only)."""
    with tracer.start_as_current_span("user.admin_update") as span:
        span.set_attribute("user.id", user_id)

        try:
            data = AdminUserUpdateSchema().load(request.get_json(silent=True) or {})
        except ValidationError as err:
            return validation_error_response(err)

        user = db.session.get(User, user_id)
        if user is None:
            return error_response("User not found", 404)

        if find_conflicting_user(data.get("username"), data.get("email"), exclude_id=user.id):
            return error_response("Username or email already exists", 400)

        for field in ("username", "email", "role", "is_active"):
            if field in data:
                setattr(user, field, data[field])

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return error_response("Username or email already exists", 400)

        logger.info(
            f"User {user.id} updated by admin {g.current_user.id}",
            extra={"user_id": g.current_user.id, "fields": sorted(data)},
        )

        return jsonify({"message": "User updated successfully", "user": UserSchema().dump(user)})


@users_bp.route("/<id:user_id>", methods=["DELETE"])
@admin_required
def remove_user(user_id: int):
    """Delete a user (admin only); admins cannot delete themselves here."""
    with tracer.start_as_current_span("user.delete") as span:
        span.set_attribute("user.id", user_id)

        user = db.session.get(User, user_id)
        if user is None:
            return error_response("User not found", 404)

        if user.id == g.current_user.id:
            span.set_attribute("auth.status", "self_delete")
            return error_response("Cannot delete your own account", 400)

        delete_user(user)
        db.session.commit()

        logger.info(f"User {user_id} deleted by admin {g.current_user.id}", extra={"user_id": g.current_user.id})

        return jsonify({"message": "User deleted successfully"})
