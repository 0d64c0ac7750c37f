"""Authentication endpoints."""

import logging

from flask import Blueprint, g, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from task_manager.errors import error_response, validation_error_response
from task_manager.extensions import db
from task_manager.middleware.auth import token_required
from task_manager.models import User
from task_manager.schemas import LoginSchema, ProfileUpdateSchema, RegisterSchema, UserSchema
from task_manager.services.auth import generate_token
from task_manager.services.users import find_conflicting_user
from task_manager.telemetry import get_meter, get_tracer
from task_manager.utils import utcnow


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)

auth_attempts = meter.create_counter(
    name="auth.login.attempts",
    description="Login attempts",
    unit="1",
)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

DUPLICATE_USER_MESSAGE = "User with this email or username already exists"
TAKEN_MESSAGE = "Username or email already exists"
INVALID_CREDENTIALS = "Invalid credentials"


@auth_bp.route("/register", methods=["POST"])
def register():
    """Register a new user.

    Returns:
        JSON response with user data and JWT token.
    """
    with tracer.start_as_current_span("user.register") as span:
        try:
            data = RegisterSchema().load(request.get_json(silent=True) or {})
        except ValidationError as err:
            return validation_error_response(err)

        if find_conflicting_user(username=data["username"], email=data["email"]):
            span.set_attribute("auth.status", "duplicate_user")
            return error_response(DUPLICATE_USER_MESSAGE, 400)

        user = User(username=data["username"], email=data["email"])
        user.set_password(data["password"])

        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return error_response(DUPLICATE_USER_MESSAGE, 400)

        span.set_attribute("user.id", user.id)

        token = generate_token(user)
        logger.info(f"User registered: {user.username}", extra={"user_id": user.id})

        return jsonify(
            {
                "message": "User registered successfully",
                "token": token,
                "user": UserSchema().dump(user),
            }
        ), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """Authenticate user and return JWT token.

    Unknown email and wrong password produce the same response.
    """
    with tracer.start_as_current_span("user.login") as span:
        try:
            data = LoginSchema().load(request.get_json(silent=True) or {})
        except ValidationError as err:
            auth_attempts.add(1, {"status": "invalid_request"})
            return validation_error_response(err)

        user = db.session.query(User).filter(User.email == data["email"]).first()
        if user is None or not user.check_password(data["password"]):
            status = "user_not_found" if user is None else "invalid_password"
            auth_attempts.add(1, {"status": status})
            span.set_attribute("auth.status", status)
            logger.warning(f"Login failed ({status}) for {data['email']}")
            return error_response(INVALID_CREDENTIALS, 401)

        if not user.is_active:
            auth_attempts.add(1, {"status": "inactive"})
            span.set_attribute("auth.status", "inactive")
            return error_response("Account is deactivated.", 401)

        user.last_login = utcnow()
        db.session.commit()

        auth_attempts.add(1, {"status": "success"})
        span.set_attribute("user.id", user.id)
        span.set_attribute("auth.status", "success")

        token = generate_token(user)
        logger.info(f"User logged in: {user.username}", extra={"user_id": user.id})

        return jsonify(
            {
                "message": "Login successful",
                "token": token,
                "user": UserSchema().dump(user),
            }
        )


@auth_bp.route("/me", methods=["GET"])
@token_required
def get_me():
    """Return the authenticated user's profile."""
    return jsonify({"user": UserSchema().dump(g.current_user)})


@auth_bp.route("/me", methods=["PUT"])
@token_required
def update_me():
    """Update the authenticated user's username and/or email."""
    with tracer.start_as_current_span("user.update_self") as span:
        user = g.current_user
        span.set_attribute("user.id", user.id)

        try:
            data = ProfileUpdateSchema().load(request.get_json(silent=True) or {})
        except ValidationError as err:
            return validation_error_response(err)

        if find_conflicting_user(data.get("username"), data.get("email"), exclude_id=user.id):
            return error_response(TAKEN_MESSAGE, 400)

        for field in ("username", "email"):
            if field in data:
                setattr(user, field, data[field])

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return error_response(TAKEN_MESSAGE, 400)

        logger.info(f"Profile updated: {user.username}", extra={"user_id": user.id})

        return jsonify({"message": "Profile updated successfully", "user": UserSchema().dump(user)})
