"""Tests for authentication middleware, error handlers and health check."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
from redis.exceptions import ConnectionError as RedisConnectionError


def _token(app, **overrides):
    payload = {
        "user_id": 1,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    payload.update(overrides)
    return jwt.encode(payload, app.config["JWT_SECRET_KEY"], algorithm="HS256")


class TestTokenRequired:
    def test_non_bearer_header(self, client, db):
        response = client.get("/api/auth/me", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401
        assert "No token provided" in response.get_json()["message"]

    def test_expired_token(self, app, client, user):
        token = _token(app, user_id=user.id, exp=datetime.now(timezone.utc) - timedelta(minutes=1))
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.get_json()["message"] == "Token expired."

    def test_wrong_signature(self, app, client, user):
        token = jwt.encode({"user_id": user.id}, "not-the-secret", algorithm="HS256")
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid token."

    def test_token_for_missing_user(self, app, client, db):
        token = _token(app, user_id=4242)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid token."

    def test_token_without_user_id(self, app, client, db):
        token = _token(app, user_id=None)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_carries_role(self, app, admin):
        from task_manager.services.auth import decode_token, generate_token

        with app.app_context():
            payload = decode_token(generate_token(admin))
        assert payload["user_id"] == admin.id
        assert payload["role"] == "admin"


class TestErrorHandlers:
    def test_unknown_route(self, client, db):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.get_json()["message"] == "Not found"

    def test_method_not_allowed(self, client, db):
        response = client.patch("/api/auth/login")
        assert response.status_code == 405
        assert "message" in response.get_json()

    def test_unexpected_error_is_generic_500(self, client, auth_headers):
        with patch(
            "task_manager.routes.tasks.visible_tasks_query", side_effect=RuntimeError("boom")
        ):
            response = client.get("/api/tasks", headers=auth_headers)
        assert response.status_code == 500
        assert response.get_json() == {"message": "Server error"}


class TestHealth:
    def test_healthy(self, client, db):
        with patch("task_manager.routes.health.redis.from_url") as from_url:
            response = client.get("/api/health")
        from_url.return_value.ping.assert_called_once()
        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_redis_down(self, client, db):
        with patch("task_manager.routes.health.redis.from_url") as from_url:
            from_url.return_value.ping.side_effect = RedisConnectionError("down")
            response = client.get("/api/health")
        assert response.status_code == 503
        assert response.get_json()["components"]["redis"] == "unhealthy"
