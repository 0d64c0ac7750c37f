"""Pytest fixtures for Flask application testing."""

import os
from unittest.mock import patch

import pytest


# Disable OpenTelemetry for tests
os.environ["OTEL_SDK_DISABLED"] = "true"


@pytest.fixture
def app():
    """Create test application."""
    from task_manager import create_app
    from task_manager.config import TestConfig

    app = create_app(TestConfig)
    app.config["TESTING"] = True

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def db(app):
    """Create test database."""
    from task_manager.extensions import db as _db

    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(autouse=True)
def notify_mock():
    """Keep Celery from reaching for a broker."""
    with patch("task_manager.jobs.tasks.send_task_assignment_notification") as mock:
        yield mock


def _create_user(db, username, email, password="password123", role="user", is_active=True):
    from task_manager.models import User

    user = User(username=username, email=email, role=role, is_active=is_active)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def make_user(db):
    """Factory for extra users: make_user(username, email, **kwargs)."""

    def _make(username, email, **kwargs):
        return _create_user(db, username, email, **kwargs)

    return _make


def headers_for(app, user):
    from task_manager.services.auth import generate_token

    with app.app_context():
        return {"Authorization": f"Bearer {generate_token(user)}"}


@pytest.fixture
def user(db):
    """Create test user."""
    return _create_user(db, "testuser", "test@example.com")


@pytest.fixture
def other_user(db):
    return _create_user(db, "otheruser", "other@example.com")


@pytest.fixture
def admin(db):
    return _create_user(db, "adminuser", "admin@example.com", role="admin")


@pytest.fixture
def auth_headers(app, user):
    """Authorization headers for the test user."""
    return headers_for(app, user)


@pytest.fixture
def other_headers(app, other_user):
    return headers_for(app, other_user)


@pytest.fixture
def admin_headers(app, admin):
    return headers_for(app, admin)
