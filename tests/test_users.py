"""Tests for user management endpoints."""


class TestListUsers:
    def test_admin_lists_users(self, client, admin_headers, user):
        response = client.get("/api/users", headers=admin_headers)
        assert response.status_code == 200
        data = response.get_json()
        assert data["pagination"] == {"page": 1, "limit": 10, "total": 2, "pages": 1}
        assert {u["username"] for u in data["data"]} == {"adminuser", "testuser"}
        assert all("password_hash" not in u for u in data["data"])

    def test_list_users_paginates(self, client, admin_headers, make_user):
        for i in range(4):
            make_user(f"user{i}", f"user{i}@example.com")

        response = client.get("/api/users?page=2&limit=2", headers=admin_headers)
        data = response.get_json()
        assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}
        assert len(data["data"]) == 2

    def test_non_admin_forbidden(self, client, auth_headers):
        response = client.get("/api/users", headers=auth_headers)
        assert response.status_code == 403
        assert "Admin privileges required" in response.get_json()["message"]

    def test_unauthenticated(self, client, db):
        response = client.get("/api/users")
        assert response.status_code == 401


class TestSearchUsers:
    def test_search_by_username_or_email(self, client, admin_headers, user, make_user):
        make_user("carol", "carol@test.org")

        by_name = client.get("/api/users/search/TESTUSER", headers=admin_headers).get_json()
        assert [u["username"] for u in by_name["data"]] == ["testuser"]

        by_email = client.get("/api/users/search/test.org", headers=admin_headers).get_json()
        assert [u["username"] for u in by_email["data"]] == ["carol"]

    def test_search_wildcards_are_literal(self, client, admin_headers, user):
        response = client.get("/api/users/search/%25", headers=admin_headers)
        assert response.get_json()["pagination"]["total"] == 0

    def test_search_requires_admin(self, client, auth_headers):
        response = client.get("/api/users/search/test", headers=auth_headers)
        assert response.status_code == 403


class TestGetUser:
    def test_user_reads_own_profile(self, client, user, auth_headers):
        response = client.get(f"/api/users/{user.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["user"]["username"] == "testuser"

    def test_user_cannot_read_others(self, client, auth_headers, other_user):
        response = client.get(f"/api/users/{other_user.id}", headers=auth_headers)
        assert response.status_code == 403

    def test_admin_reads_anyone(self, client, admin_headers, user):
        response = client.get(f"/api/users/{user.id}", headers=admin_headers)
        assert response.status_code == 200

    def test_not_found(self, client, admin_headers):
        response = client.get("/api/users/9999", headers=admin_headers)
        assert response.status_code == 404

    def test_malformed_id(self, client, admin_headers):
        response = client.get("/api/users/not-an-id", headers=admin_headers)
        assert response.status_code == 404

    def test_out_of_range_id(self, client, admin_headers):
        huge = "/api/users/9999999999999999999999999"
        assert client.get(huge, headers=admin_headers).status_code == 404
        assert client.put(huge, json={"role": "admin"}, headers=admin_headers).status_code == 404
        assert client.delete(huge, headers=admin_headers).status_code == 404


class TestUpdateUser:
    def test_admin_updates_role_and_active_flag(self, client, admin_headers, user):
        response = client.put(
            f"/api/users/{user.id}",
            json={"role": "admin", "isActive": False},
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.get_json()["user"]
        assert body["role"] == "admin"
        assert body["isActive"] is False

    def test_deactivated_user_token_rejected(self, client, admin_headers, user, auth_headers):
        client.put(f"/api/users/{user.id}", json={"isActive": False}, headers=admin_headers)

        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 401
        assert response.get_json()["message"] == "Account is deactivated."

    def test_invalid_role(self, client, admin_headers, user):
        response = client.put(f"/api/users/{user.id}", json={"role": "root"}, headers=admin_headers)
        assert response.status_code == 400
        assert "role" in response.get_json()["errors"]

    def test_duplicate_username(self, client, admin_headers, user, other_user):
        response = client.put(
            f"/api/users/{user.id}", json={"username": "otheruser"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.get_json()["message"] == "Username or email already exists"

    def test_not_found(self, client, admin_headers):
        response = client.put("/api/users/9999", json={"role": "user"}, headers=admin_headers)
        assert response.status_code == 404

    def test_non_admin_forbidden(self, client, user, auth_headers):
        response = client.put(f"/api/users/{user.id}", json={"role": "admin"}, headers=auth_headers)
        assert response.status_code == 403


class TestDeleteUser:
    def test_admin_deletes_user(self, client, admin_headers, user):
        user_id = user.id
        response = client.delete(f"/api/users/{user_id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()["message"] == "User deleted successfully"

        assert client.get(f"/api/users/{user_id}", headers=admin_headers).status_code == 404

    def test_admin_cannot_delete_self(self, client, admin, admin_headers):
        response = client.delete(f"/api/users/{admin.id}", headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Cannot delete your own account"

    def test_deleting_user_removes_their_tasks_and_assignments(
        self, client, admin_headers, user, auth_headers, other_user, other_headers
    ):
        own = client.post("/api/tasks", json={"title": "Mine"}, headers=auth_headers).get_json()
        delegated = client.post(
            "/api/tasks",
            json={"title": "For user", "assignedTo": user.id},
            headers=other_headers,
        ).get_json()

        response = client.delete(f"/api/users/{user.id}", headers=admin_headers)
        assert response.status_code == 200

        assert client.get(f"/api/tasks/{own['task']['id']}", headers=admin_headers).status_code == 404
        remaining = client.get(f"/api/tasks/{delegated['task']['id']}", headers=other_headers)
        assert remaining.status_code == 200
        assert remaining.get_json()["task"]["assignedTo"] is None

    def test_non_admin_forbidden(self, client, auth_headers, other_user):
        response = client.delete(f"/api/users/{other_user.id}", headers=auth_headers)
        assert response.status_code == 403
