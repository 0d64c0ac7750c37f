"""API route blueprints."""

from task_manager.routes.auth import auth_bp
from task_manager.routes.health import health_bp
from task_manager.routes.tasks import tasks_bp
from task_manager.routes.users import users_bp


__all__ = ["health_bp", "auth_bp", "users_bp", "tasks_bp"]
