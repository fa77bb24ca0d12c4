"""Tests for authentication endpoints."""

import pytest

from tradersjournal.auth.captcha import CaptchaResult
from tradersjournal.web.routes import auth as auth_routes

from conftest import auth_headers

REGISTRATION = {
    "username": "charlie_fx",
    "email": "Charlie@Example.com",
    "password": "Str0ng!pass",
}


class TestLogin:
    def test_login_sets_cookies(self, client, fake_db, user_token):
        response = client.post("/auth/login", json={"username": "alice_trader", "password": "Secret#123"})
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == "user-1"
        assert body["session"]["access_token"] == "token-user-1"
        assert body["profile"]["username"] == "alice_trader"

        set_cookie = response.headers.get_list("set-cookie")
        assert any(c.startswith("access_token=") and "HttpOnly" in c for c in set_cookie)
        assert any(c.startswith("refresh_token=") for c in set_cookie)

        profile = next(p for p in fake_db.rows("profiles") if p["id"] == "user-1")
        assert profile["last_login"]

    def test_wrong_password(self, client, user_token):
        response = client.post("/auth/login", json={"username": "alice_trader", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid username or password"}

    def test_unknown_username(self, client):
        response = client.post("/auth/login", json={"username": "ghost", "password": "whatever"})
        assert response.status_code == 401

    def test_missing_fields(self, client):
        assert client.post("/auth/login", json={"username": "alice_trader"}).status_code == 400


class TestCurrentUser:
    def test_anonymous(self, client):
        response = client.get("/auth/user")
        assert response.status_code == 200
        assert response.json() == {"is_authenticated": False, "user": None}

    def test_signed_in(self, client, fake_db, admin_token):
        body = client.get("/auth/user", headers=auth_headers(admin_token)).json()
        assert body["is_authenticated"] is True
        assert body["user"]["id"] == "admin-1"
        assert body["user"]["role"] == "admin"
        assert body["user"]["bio"] == ""

    def test_invalid_token_is_anonymous(self, client):
        body = client.get("/auth/user", headers=auth_headers("forged")).json()
        assert body["is_authenticated"] is False


class TestRegister:
    """Tests for account registration."""

    def test_register(self, client, fake_db):
        response = client.post("/auth/register", json=REGISTRATION)
        assert response.status_code == 201
        assert response.json()["user"]["email"] == "charlie@example.com"

        profile = next(p for p in fake_db.rows("profiles") if p["username"] == "charlie_fx")
        assert profile["role"] == "user"
        assert profile["email"] == "charlie@example.com"

    def test_username_taken(self, client, fake_db):
        fake_db.add_user("u9", "other@example.com", "charlie_fx")
        response = client.post("/auth/register", json=REGISTRATION)
        assert response.status_code == 400
        assert response.json()["error"] == "This username is already taken."

    def test_email_taken(self, client, fake_db):
        client.post("/auth/register", json=REGISTRATION)
        response = client.post("/auth/register", json={**REGISTRATION, "username": "charlie_two"})
        assert response.status_code == 400
        assert response.json()["error"] == "This email is already registered."

    @pytest.mark.parametrize("password", ["short1!", "alllower1!", "ALLUPPER1!", "NoDigits!!", "NoSpecial11"])
    def test_weak_passwords(self, client, password):
        response = client.post("/auth/register", json={**REGISTRATION, "password": password})
        assert response.status_code == 400

    def test_short_username(self, client):
        response = client.post("/auth/register", json={**REGISTRATION, "username": "abc"})
        assert response.status_code == 400

    def test_captcha_required_when_configured(self, client, monkeypatch):
        monkeypatch.setenv("TURNSTILE_SECRET_KEY", "secret")
        response = client.post("/auth/register", json=REGISTRATION)
        assert response.status_code == 400
        assert response.json()["error"] == "CAPTCHA verification required"

    def test_captcha_rejected(self, client, monkeypatch):
        monkeypatch.setenv("TURNSTILE_SECRET_KEY", "secret")
        monkeypatch.setattr(
            auth_routes, "verify_turnstile",
            lambda token, ip: CaptchaResult(success=False, error_codes=["invalid-input-response"]),
        )
        response = client.post("/auth/register", json={**REGISTRATION, "captcha_token": "bad"})
        assert response.status_code == 400
        assert response.json()["details"] == ["invalid-input-response"]

    def test_captcha_accepted(self, client, monkeypatch):
        monkeypatch.setenv("TURNSTILE_SECRET_KEY", "secret")
        monkeypatch.setattr(auth_routes, "verify_turnstile", lambda token, ip: CaptchaResult(success=True))
        response = client.post("/auth/register", json={**REGISTRATION, "captcha_token": "good"})
        assert response.status_code == 201


class TestSessionLifecycle:
    def test_logout_clears_cookies(self, client, fake_db):
        response = client.post("/auth/logout")
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert fake_db.auth.revoked == []
        assert any(c.startswith("access_token=") for c in response.headers.get_list("set-cookie"))

    def test_logout_revokes_only_own_session(self, client, fake_db, user_token, other_token):
        response = client.post("/auth/logout", headers=auth_headers(other_token))
        assert response.status_code == 200
        assert fake_db.auth.revoked == [other_token]
        assert client.get("/auth/user", headers=auth_headers(user_token)).json()["is_authenticated"]
        assert not client.get("/auth/user", headers=auth_headers(other_token)).json()["is_authenticated"]

    def test_anonymous_logout_leaves_other_sessions(self, client, fake_db, user_token):
        login = client.post("/auth/login", json={"username": "alice_trader", "password": "Secret#123"})
        assert login.status_code == 200
        client.cookies.clear()

        response = client.post("/auth/logout")
        assert response.status_code == 200
        assert fake_db.auth.revoked == []
        assert client.get("/auth/user", headers=auth_headers(user_token)).json()["is_authenticated"]

    def test_logout_with_session_cookie(self, client, fake_db, user_token):
        client.cookies.set("access_token", user_token)
        response = client.post("/auth/logout")
        assert response.status_code == 200
        assert fake_db.auth.revoked == [user_token]

    def test_reset_password_always_succeeds(self, client, fake_db):
        response = client.post("/auth/reset-password", json={"email": "nobody@example.com"})
        assert response.status_code == 200
        assert response.json()["success"] is True
        email, options = fake_db.auth.reset_requests[0]
        assert email == "nobody@example.com"
        assert options["redirect_to"].endswith("/reset-password")

    def test_delete_account(self, client, fake_db, user_token, other_token):
        fake_db.insert("trades", {"user_id": "user-1", "profit_loss": 5})
        fake_db.insert("trades", {"user_id": "user-2", "profit_loss": 5})
        fake_db.insert("messages", {"sender_id": "user-2", "receiver_id": "user-1", "content": "hi"})
        fake_db.insert("user_settings", {"user_id": "user-1", "email_project_updates": True})

        response = client.post(
            "/auth/delete-account", json={"password": "Secret#123"}, headers=auth_headers(user_token)
        )
        assert response.status_code == 200
        assert fake_db.auth.deleted_users == ["user-1"]
        assert [t["user_id"] for t in fake_db.rows("trades")] == ["user-2"]
        assert fake_db.rows("messages") == []
        assert fake_db.rows("user_settings") == []
        assert [p["id"] for p in fake_db.rows("profiles")] == ["user-2"]

    def test_delete_account_wrong_password(self, client, fake_db, user_token):
        response = client.post(
            "/auth/delete-account", json={"password": "wrong"}, headers=auth_headers(user_token)
        )
        assert response.status_code == 401
        assert fake_db.auth.deleted_users == []

    def test_delete_account_requires_session(self, client):
        assert client.post("/auth/delete-account", json={"password": "x"}).status_code == 401
