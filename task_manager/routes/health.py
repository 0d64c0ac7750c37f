"""Health check endpoint."""

import logging
from typing import Any

import redis
from flask import Blueprint, current_app, jsonify
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from task_manager.extensions import db
from task_manager.telemetry import SERVICE_NAME


logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.route("/health", methods=["GET"])
def health_check():
    """Report database and Redis reachability.

    Returns:
        200 when every component is healthy, 503 otherwise.
    """
    components = {"database": "healthy", "redis": "healthy"}

    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as err:
        db.session.rollback()
        logger.warning(f"Health check: database unreachable: {err}")
        components["database"] = "unhealthy"

    try:
        redis.from_url(current_app.config["REDIS_URL"]).ping()
    except RedisError as err:
        logger.warning(f"Health check: redis unreachable: {err}")
        components["redis"] = "unhealthy"

    healthy = all(state == "healthy" for state in components.values())
    body: dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "components": components,
        "service": {"name": SERVICE_NAME, "version": "1.0.0"},
    }
    return jsonify(body), 200 if healthy else 503
