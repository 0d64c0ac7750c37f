"""Flask application factory for the task manager API."""

import logging
import os

from flask import Flask

from task_manager.extensions import db, ma


def create_app(config_class: type | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use. Defaults to Config.

    Returns:
        Configured Flask application instance.
    """
    # Initialize telemetry BEFORE creating Flask app
    if not os.getenv("OTEL_SDK_DISABLED"):
        from task_manager.telemetry import (
            get_otel_log_handler,
            instrument_flask_app,
            setup_telemetry,
        )

        setup_telemetry()

    app = Flask(__name__)

    # Instrument Flask app (needed for Gunicorn worker forks)
    if not os.getenv("OTEL_SDK_DISABLED"):
        instrument_flask_app(app)

    if config_class is None:
        from task_manager.config import Config

        config_class = Config
    app.config.from_object(config_class)

    db.init_app(app)
    ma.init_app(app)

    from task_manager.utils import IdConverter

    app.url_map.converters["id"] = IdConverter

    from task_manager.routes.auth import auth_bp
    from task_manager.routes.health import health_bp
    from task_manager.routes.tasks import tasks_bp
    from task_manager.routes.users import users_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(tasks_bp)

    from task_manager.errors import register_error_handlers

    register_error_handlers(app)

    if not os.getenv("OTEL_SDK_DISABLED"):
        from task_manager.middleware.metrics import register_metrics_middleware

        register_metrics_middleware(app)

        # Attach OTel log handler after app setup
        handler = get_otel_log_handler()
        if handler:
            root_logger = logging.getLogger()
            if handler not in root_logger.handlers:
                root_logger.addHandler(handler)

    _configure_logging()

    with app.app_context():
        db.create_all()

    return app


def _configure_logging() -> None:
    """Configure logging for the application."""
    # App loggers - propagate to root (where OTel handler is)
    logging.getLogger("task_manager").setLevel(logging.DEBUG)
    logging.getLogger("task_manager").propagate = True

    # Reduce noise from framework loggers
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
