"""Tests for announcement batching and e-mail rendering."""

import asyncio

import pytest

from tradersjournal.admin.announcements import send_announcement
from tradersjournal.errors import UpstreamFailure
from tradersjournal.notify import email as mailer


@pytest.fixture
def mail_log(monkeypatch):
    sent = []
    monkeypatch.setattr(mailer, "is_email_configured", lambda: True)

    def fake_send(to, subject, html_body, text_body=None):
        sent.append(to)
        return not to.startswith("bounce")

    monkeypatch.setattr(mailer, "send_email", fake_send)
    return sent


class TestSendAnnouncement:
    """Tests for batched delivery."""

    def test_batches_cover_everyone(self, mail_log):
        emails = [f"user{i}@example.com" for i in range(7)]
        result = asyncio.run(send_announcement(emails, "Update", "Body", batch_size=3))
        assert result.sent_count == 7
        assert result.failed_count == 0
        assert sorted(mail_log) == sorted(emails)
        assert result.message == "Announcement sent successfully to 7 users!"

    def test_partial_failure(self, mail_log):
        emails = ["a@example.com", "bounce@example.com", "b@example.com"]
        result = asyncio.run(send_announcement(emails, "Update", "Body", batch_size=2))
        assert result.to_dict() == {
            "message": "Announcement sent to 2 users; 1 failed.",
            "sent_count": 2,
            "failed_count": 1,
        }

    def test_all_failed_reports_counts(self, mail_log):
        with pytest.raises(UpstreamFailure) as exc_info:
            asyncio.run(send_announcement(["bounce1@example.com", "bounce2@example.com"], "s", "m"))
        assert exc_info.value.to_dict() == {
            "error": "Failed to send emails.",
            "message": "All 2 of 2 e-mails failed",
            "details": {"sent_count": 0, "failed_count": 2},
        }

    def test_no_recipients(self, mail_log):
        result = asyncio.run(send_announcement([], "s", "m"))
        assert result.sent_count == 0
        assert result.message == "No users to notify."
        assert mail_log == []

    def test_email_not_configured(self, monkeypatch):
        monkeypatch.setattr(mailer, "is_email_configured", lambda: False)
        with pytest.raises(UpstreamFailure):
            asyncio.run(send_announcement(["a@example.com"], "s", "m"))


class TestRenderAnnouncement:
    def test_escapes_html(self):
        html_body, text_body = mailer.render_announcement("New <b>release</b>", "Line 1 & line 2")
        assert "New &lt;b&gt;release&lt;/b&gt;" in html_body
        assert "Line 1 &amp; line 2" in html_body
        assert text_body.startswith("New <b>release</b>\n\nLine 1 & line 2")
        assert "/settings" in text_body
