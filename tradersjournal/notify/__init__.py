"""Outgoing e-mail notifications."""

from tradersjournal.notify.email import is_email_configured, render_announcement, send_email

__all__ = ["is_email_configured", "render_announcement", "send_email"]
