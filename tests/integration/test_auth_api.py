"""Integration tests for the account endpoints."""

import pytest
from fastapi.testclient import TestClient


class TestRegister:
    def test_register_returns_user_and_token(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={
                "username": "alice",
                "email": "A@X.COM",
                "password": "secret1",
                "first_name": "Alice",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User created"
        user = body["data"]["user"]
        assert user["username"] == "alice"
        assert user["email"] == "a@x.com"
        assert user["firstName"] == "Alice"
        assert user["lastName"] is None
        assert "password" not in user
        assert "password_hash" not in user
        assert body["data"]["token"]

    def test_camel_case_names(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={
                "username": "bob",
                "email": "bob@example.com",
                "password": "secret1",
                "firstName": "Bob",
                "lastName": "Jones",
            },
        )

        assert response.status_code == 201
        user = response.json()["data"]["user"]
        assert user["firstName"] == "Bob"
        assert user["lastName"] == "Jones"

    def test_password_with_surrounding_spaces_can_log_in(self, client: TestClient):
        registration = {"username": "alice", "email": "a@x.com", "password": "  secret1  "}
        assert client.post("/api/auth/register", json=registration).status_code == 201

        response = client.post(
            "/api/auth/login", json={"identifier": "alice", "password": "  secret1  "}
        )

        assert response.status_code == 200
        assert response.json()["data"]["token"]

    def test_duplicate_username_conflicts(self, client: TestClient, register):
        register("alice")

        response = client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "other@example.com", "password": "secret1"},
        )

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Username is already taken"

    def test_duplicate_email_conflicts(self, client: TestClient, register):
        register("alice", email="shared@example.com")

        response = client.post(
            "/api/auth/register",
            json={"username": "bob", "email": "SHARED@example.com", "password": "secret1"},
        )

        assert response.status_code == 409

    def test_invalid_registration_lists_field_errors(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={"username": "al", "email": "not-an-email", "password": "123"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert {error["field"] for error in body["errors"]} == {
            "username",
            "email",
            "password",
        }

    def test_non_object_body_is_rejected(self, client: TestClient):
        response = client.post("/api/auth/register", json=["alice"])

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestLogin:
    @pytest.mark.parametrize(
        "credentials",
        [
            {"identifier": "alice"},
            {"identifier": "alice@example.com"},
            {"email": "alice@example.com"},
            {"username": "alice"},
        ],
    )
    def test_login_variants(self, client: TestClient, register, credentials):
        registered = register("alice")

        response = client.post(
            "/api/auth/login", json={**credentials, "password": "secret1"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["id"] == registered["user"]["id"]
        assert body["data"]["token"]

    @pytest.mark.parametrize(
        "credentials",
        [
            {"identifier": "alice", "password": "wrong-password"},
            {"identifier": "nobody", "password": "secret1"},
        ],
    )
    def test_failures_are_indistinguishable(self, client: TestClient, register, credentials):
        register("alice")

        response = client.post("/api/auth/login", json=credentials)

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials"}

    def test_missing_fields(self, client: TestClient):
        response = client.post("/api/auth/login", json={})

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"identifier", "password"}


class TestProfile:
    def test_profile_of_caller(self, client: TestClient, auth_headers):
        response = client.get("/api/auth/profile", headers=auth_headers("alice"))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["username"] == "alice"

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": ""},
            {"Authorization": "Token abc"},
            {"Authorization": "Bearer"},
            {"Authorization": "Bearer not.a.token"},
        ],
    )
    def test_rejected_credentials_share_one_message(self, client: TestClient, headers):
        response = client.get("/api/auth/profile", headers=headers)

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Unauthorized"}

    def test_token_of_deleted_user_is_rejected(self, client: TestClient, register):
        from src.mylibrary.entities.core.user import UserRepository

        data = register("alice")
        database_service = client.app.state.app_dependencies.database_service
        with database_service.session_scope() as session:
            UserRepository(session).delete(data["user"]["id"])

        response = client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {data['token']}"}
        )

        assert response.status_code == 401
