"""JWT authentication middleware."""

import logging
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

import jwt
from flask import g, request

from task_manager.errors import error_response
from task_manager.extensions import db
from task_manager.models import User
from task_manager.services.auth import decode_token


logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class AuthenticationError(Exception):
    """Raised when a request's bearer token cannot be turned into an active user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def authenticate_request() -> User:
    """Resolve the current request's bearer token to a user.

    Returns:
        The authenticated, active user.

    Raises:
        AuthenticationError: If the token is missing, invalid or expired,
            or the user no longer exists or is deactivated.
    """
    token = _bearer_token()
    if token is None:
        raise AuthenticationError("Access denied. No token provided.")

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired.")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token.")

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError("Invalid token.")

    user = db.session.get(User, user_id)
    if user is None:
        raise AuthenticationError("Invalid token.")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated.")

    return user


def token_required(f: Callable[P, T]) -> Callable[P, T]:
    """Decorator to require valid JWT token.

    Sets g.current_user if token is valid.
    Returns 401 if token is missing or invalid.
    """

    @wraps(f)
    def decorated(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            g.current_user = authenticate_request()
        except AuthenticationError as err:
            return error_response(err.message, 401)
        return f(*args, **kwargs)

    return decorated


def token_optional(f: Callable[P, T]) -> Callable[P, T]:
    """Decorator to optionally parse JWT token.

    Sets g.current_user if token is valid, otherwise None.
    """

    @wraps(f)
    def decorated(*args: P.args, **kwargs: P.kwargs) -> T:
        g.current_user = None
        if _bearer_token() is not None:
            try:
                g.current_user = authenticate_request()
            except AuthenticationError as err:
                logger.debug(f"Ignoring optional token: {err.message}")
        return f(*args, **kwargs)

    return decorated


def admin_required(f: Callable[P, T]) -> Callable[P, T]:
    """Decorator to require a valid JWT token belonging to an admin.

    Returns 401 like token_required, or 403 for non-admin users.
    """

    @wraps(f)
    def decorated(*args: P.args, **kwargs: P.kwargs) -> T:
        if not g.current_user.is_admin:
            logger.warning(
                f"Admin route denied for user {g.current_user.id}",
                extra={"user_id": g.current_user.id, "path": request.path},
            )
            return error_response("Access denied. Admin privileges required.", 403)
        return f(*args, **kwargs)

    return token_required(decorated)
