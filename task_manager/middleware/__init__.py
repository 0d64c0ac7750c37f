"""Middleware modules."""

from task_manager.middleware.auth import admin_required, token_optional, token_required
from task_manager.middleware.metrics import register_metrics_middleware


__all__ = ["token_required", "token_optional", "admin_required", "register_metrics_middleware"]
