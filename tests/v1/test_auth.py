# tests/v1/test_auth.py
"""Tests for registration, login and the bearer token gate."""

from __future__ import annotations

from datetime import timedelta

from fastapi import status
from jose import jwt
from sqlalchemy import event

from social_backend.core.security import decode_access_token
from social_backend.core.settings import settings
from social_backend.db.time import utcnow
from social_backend.models import User
from social_backend.services.identity import find_user_by_username

TEST_PASSWORD = "secret-pass"


def _error(response) -> dict:
    return response.json()["error"]


class TestRegister:
    def test_register_returns_token_and_public_user(self, client, db_session) -> None:
        response = client.post("/auth/register", json={"username": "newuser", "password": "securepass"})
        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()

        user = db_session.query(User).filter_by(username="newuser").one()
        assert body["user"] == {"id": str(user.id), "username": "newuser"}
        identity = decode_access_token(body["token"])
        assert identity.id == user.id
        assert identity.username == "newuser"

    def test_register_stores_lowercase_username_with_defaults(self, client, db_session) -> None:
        response = client.post("/auth/register", json={"username": "  MixedCase ", "password": "securepass"})
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["user"]["username"] == "mixedcase"

        user = db_session.query(User).filter_by(username="mixedcase").one()
        assert user.status == "online"
        assert user.profile_image == settings.default_profile_image
        assert user.password_hash and user.password_hash != "securepass"

    def test_register_duplicate_in_any_case_conflicts(self, client) -> None:
        first = client.post("/auth/register", json={"username": "newuser", "password": "securepass"})
        assert first.status_code == status.HTTP_201_CREATED

        second = client.post("/auth/register", json={"username": "NewUser", "password": "otherpass"})
        assert second.status_code == status.HTTP_409_CONFLICT
        assert _error(second)["code"] == "username_taken"

    def test_register_short_username(self, client) -> None:
        response = client.post("/auth/register", json={"username": " ab ", "password": "securepass"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert _error(response) == {
            "code": "validation_error",
            "message": "Username must be at least 3 characters",
        }

    def test_register_short_password(self, client) -> None:
        response = client.post("/auth/register", json={"username": "newuser", "password": "12345"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert _error(response)["message"] == "Password must be at least 6 characters"

    def test_register_missing_fields(self, client) -> None:
        response = client.post("/auth/register", json={"username": "newuser"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert _error(response)["message"] == "Username and password are required"

    def test_register_malformed_json(self, client) -> None:
        response = client.post(
            "/auth/register",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        error = _error(response)
        assert error["code"] == "validation_error"
        assert isinstance(error["details"], list)

    def test_register_wrong_field_type(self, client) -> None:
        response = client.post("/auth/register", json={"username": 12345, "password": "securepass"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert _error(response)["code"] == "validation_error"


class TestLogin:
    def test_login_returns_fresh_token(self, client, alice) -> None:
        response = client.post("/auth/login", json={"username": "alice", "password": TEST_PASSWORD})
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["user"] == {"id": str(alice.id), "username": "alice"}
        assert decode_access_token(body["token"]).id == alice.id

    def test_login_username_is_case_insensitive(self, client, alice) -> None:
        response = client.post("/auth/login", json={"username": " ALICE ", "password": TEST_PASSWORD})
        assert response.status_code == status.HTTP_200_OK

    def test_username_lookup_compares_the_stored_column(self, engine, db_session, alice) -> None:
        statements: list[str] = []

        def _record(conn, cursor, statement, parameters, context, executemany) -> None:
            statements.append(statement)

        event.listen(engine, "before_cursor_execute", _record)
        try:
            found = find_user_by_username(db_session, "Alice")
        finally:
            event.remove(engine, "before_cursor_execute", _record)

        assert found is not None and found.id == alice.id
        assert len(statements) == 1
        # A bare column comparison lets the unique index on users.username serve it.
        assert "users.username = " in statements[0]
        assert "lower(" not in statements[0].lower()

    def test_wrong_password_and_unknown_user_fail_identically(self, client, alice) -> None:
        wrong_password = client.post("/auth/login", json={"username": "alice", "password": "nope-nope"})
        unknown_user = client.post("/auth/login", json={"username": "ghost", "password": TEST_PASSWORD})

        assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
        assert unknown_user.status_code == status.HTTP_401_UNAUTHORIZED
        assert _error(wrong_password) == _error(unknown_user) == {
            "code": "invalid_credentials",
            "message": "Invalid username or password",
        }

    def test_profile_user_without_password_cannot_login(self, client, make_user) -> None:
        make_user("profile_only")
        response = client.post("/auth/login", json={"username": "profile_only", "password": "password"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_missing_password(self, client) -> None:
        response = client.post("/auth/login", json={"username": "alice"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert _error(response)["code"] == "validation_error"


class TestTokenGate:
    def test_missing_header_is_unauthorized(self, client) -> None:
        response = client.get("/posts")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert _error(response) == {
            "code": "unauthorized",
            "message": "Missing or invalid authorization header",
            "details": {"expected": "Authorization: Bearer <token>"},
        }

    def test_header_without_bearer_prefix_is_unauthorized(self, client, alice_headers) -> None:
        token = alice_headers["Authorization"].split(" ", 1)[1]
        response = client.get("/posts", headers={"Authorization": token})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert _error(response)["code"] == "unauthorized"

    def test_malformed_token_is_invalid(self, client) -> None:
        response = client.get("/friends", headers={"Authorization": "Bearer not.a.valid.jwt"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert _error(response)["code"] == "invalid_token"

    def test_expired_token_is_invalid(self, client, alice) -> None:
        issued = utcnow() - timedelta(days=8)
        token = jwt.encode(
            {"sub": str(alice.id), "username": alice.username, "iat": issued, "exp": issued + timedelta(days=7)},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )
        response = client.get("/posts", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert _error(response)["code"] == "invalid_token"

    def test_token_signed_with_other_secret_is_invalid(self, client, alice) -> None:
        now = utcnow()
        token = jwt.encode(
            {"sub": str(alice.id), "username": alice.username, "iat": now, "exp": now + timedelta(hours=1)},
            "wrong_secret_key",
            algorithm=settings.jwt_algorithm,
        )
        response = client.get("/friends/requests", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert _error(response)["code"] == "invalid_token"

    def test_registered_token_unlocks_protected_routes(self, client) -> None:
        token = client.post(
            "/auth/register",
            json={"username": "newuser", "password": "securepass"},
        ).json()["token"]
        response = client.get("/friends", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_200_OK
