"""Tests for administrator endpoints."""

import pytest

from tradersjournal.notify import email as mailer

from conftest import auth_headers

ADMIN_ENDPOINTS = [
    ("GET", "/api/admin/users"),
    ("GET", "/api/admin/project-update-stats"),
    ("GET", "/api/admin/trade-stats"),
    ("GET", "/api/admin/security-events"),
    ("POST", "/api/admin/announcements"),
]


@pytest.fixture
def populated(fake_db, user_token, other_token, admin_token):
    for user_id, first, last in (("user-1", "Alice", "Smith"), ("user-2", None, None)):
        profile = next(p for p in fake_db.rows("profiles") if p["id"] == user_id)
        profile.update({"first_name": first, "last_name": last})
    fake_db.insert("user_settings", {"user_id": "user-1", "email_project_updates": True})
    fake_db.insert("user_settings", {"user_id": "user-2", "email_project_updates": False})
    fake_db.insert("trades", {"user_id": "user-1", "profit_loss": 50})
    fake_db.insert("trades", {"user_id": "user-2", "profit_loss": -20})
    fake_db.insert("trades", {"user_id": "user-2", "profit_loss": 10})
    return fake_db


class TestAdminAccess:
    """Every admin endpoint rejects anonymous and non-admin callers."""

    @pytest.mark.parametrize("method,path", ADMIN_ENDPOINTS)
    def test_anonymous_is_401(self, client, method, path):
        assert client.request(method, path, json={}).status_code == 401

    @pytest.mark.parametrize("method,path", ADMIN_ENDPOINTS)
    def test_regular_user_is_403(self, client, user_token, method, path):
        response = client.request(method, path, json={}, headers=auth_headers(user_token))
        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden"}

    @pytest.mark.parametrize("role", ["admin", "Admin", "ADMIN"])
    def test_role_case_insensitive(self, client, fake_db, role):
        token = fake_db.add_user("boss", "boss@example.com", "the_boss", role=role)
        assert client.get("/api/admin/users", headers=auth_headers(token)).status_code == 200


class TestAdminDashboards:
    def test_users(self, client, populated, admin_token):
        body = client.get("/api/admin/users", headers=auth_headers(admin_token)).json()
        assert body["total_users"] == 3
        assert body["subscribed_users"] == 1
        by_id = {u["id"]: u for u in body["users"]}
        assert by_id["user-1"]["name"] == "Alice Smith"
        assert by_id["user-1"]["has_project_updates"] is True
        assert by_id["user-2"]["name"] == "bob_trader"
        assert by_id["admin-1"]["has_project_updates"] is False

    def test_project_update_stats(self, client, populated, admin_token):
        body = client.get("/api/admin/project-update-stats", headers=auth_headers(admin_token)).json()
        assert body == {"total_users": 3, "subscribed_users": 1, "last_sent": None}

    def test_trade_stats_cover_all_users(self, client, populated, admin_token):
        body = client.get("/api/admin/trade-stats", headers=auth_headers(admin_token)).json()
        assert body["total_trades"] == 3
        assert body["total_profit"] == 40
        assert body["win_rate"] == 2 / 3 * 100

    def test_security_events(self, client, fake_db, admin_token):
        events = [
            {"category": "SECURITY", "severity": "LOW"},
            {"category": "DATA", "severity": "CRITICAL"},
            {"category": "DATA", "severity": "LOW"},
            {"category": "AUTHENTICATION", "severity": "MEDIUM"},
        ]
        for event in events:
            fake_db.insert("audit_logs", {"action": "test", **event})
        body = client.get("/api/admin/security-events", headers=auth_headers(admin_token)).json()
        assert body["total"] == 3
        assert all(e["category"] != "DATA" or e["severity"] == "CRITICAL" for e in body["events"])

    def test_upstream_failure(self, client, fake_db, admin_token):
        fake_db.failing_tables.add("user_settings")
        response = client.get("/api/admin/users", headers=auth_headers(admin_token))
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to fetch user settings"
        assert "refused" in body["message"]


class TestAnnouncements:
    """Tests for project-update e-mails."""

    @pytest.fixture
    def outbox(self, monkeypatch):
        sent = []

        def fake_send(to, subject, html_body, text_body=None):
            sent.append(to)
            return True

        monkeypatch.setattr(mailer, "is_email_configured", lambda: True)
        monkeypatch.setattr(mailer, "send_email", fake_send)
        return sent

    def test_send_to_all_subscribers(self, client, populated, admin_token, outbox):
        response = client.post(
            "/api/admin/announcements",
            json={"subject": "v2", "message": "New features", "send_to_all": True},
            headers=auth_headers(admin_token),
        )
        assert response.status_code == 200
        assert response.json()["sent_count"] == 1
        assert outbox == ["alice@example.com"]

    def test_send_to_selected(self, client, populated, admin_token, outbox):
        response = client.post(
            "/api/admin/announcements",
            json={"subject": "v2", "message": "Hi", "selected_user_ids": ["user-2", "admin-1"]},
            headers=auth_headers(admin_token),
        )
        assert response.json()["sent_count"] == 2
        assert sorted(outbox) == ["admin@example.com", "bob@example.com"]

    def test_nobody_selected(self, client, populated, admin_token, outbox):
        response = client.post(
            "/api/admin/announcements",
            json={"subject": "v2", "message": "Hi"},
            headers=auth_headers(admin_token),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "No users selected for notification."
        assert outbox == []

    def test_send_to_all_beyond_one_page(self, client, fake_db, admin_token, outbox, monkeypatch):
        """Recipient lookups are paged and chunked, so nobody is dropped."""
        monkeypatch.setenv("DB_PAGE_SIZE", "40")
        fake_db.max_rows = 40
        fake_db.max_in_values = 100
        subscribers = [f"sub-{i:03d}" for i in range(230)]
        for user_id in subscribers:
            fake_db.insert("profiles", {"id": user_id, "email": f"{user_id}@example.com", "username": user_id})
            fake_db.insert("user_settings", {"user_id": user_id, "email_project_updates": True})

        response = client.post(
            "/api/admin/announcements",
            json={"subject": "v2", "message": "Hi all", "send_to_all": True},
            headers=auth_headers(admin_token),
        )
        assert response.status_code == 200
        assert response.json()["sent_count"] == 230
        assert sorted(outbox) == [f"{user_id}@example.com" for user_id in subscribers]

    def test_all_sends_failed_reports_counts(self, client, populated, admin_token, monkeypatch):
        monkeypatch.setattr(mailer, "is_email_configured", lambda: True)
        monkeypatch.setattr(mailer, "send_email", lambda to, subject, html_body, text_body=None: False)

        response = client.post(
            "/api/admin/announcements",
            json={"subject": "v2", "message": "Hi", "send_to_all": True},
            headers=auth_headers(admin_token),
        )
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to send emails."
        assert body["details"] == {"sent_count": 0, "failed_count": 1}
