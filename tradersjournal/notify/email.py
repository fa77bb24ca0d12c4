"""
Email service.

Sends project-update announcements over SMTP.
Requires SMTP configuration in environment variables.
"""

import html
import os
import logging
import smtplib
from datetime import date
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from tradersjournal.config import get_site_url, settings

logger = logging.getLogger(__name__)

# SMTP Configuration from environment
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_FROM = os.getenv("SMTP_FROM", SMTP_USER)
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"


def is_email_configured() -> bool:
    """Check if email sending is properly configured."""
    return bool(SMTP_USER and SMTP_PASSWORD)


def send_email(to: str, subject: str, html_body: str, text_body: Optional[str] = None) -> bool:
    """
    Send an email using SMTP.

    Args:
        to: Recipient email address
        subject: Email subject
        html_body: HTML content
        text_body: Plain text fallback (optional)

    Returns:
        True if sent successfully
    """
    if not is_email_configured():
        logger.warning("Email not configured - skipping send")
        return False

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.announcement_sender_name} <{SMTP_FROM}>"
        msg["To"] = to

        if text_body:
            msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(SMTP_HOST, SMTP_PORT) as server:
            if SMTP_USE_TLS:
                server.starttls()
            server.login(SMTP_USER, SMTP_PASSWORD)
            server.sendmail(SMTP_FROM, to, msg.as_string())

        logger.info(f"Email sent: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email: {e}")
        return False


def render_announcement(subject: str, message: str) -> tuple[str, str]:
    """
    Render a project-update announcement.

    Returns:
        (html_body, text_body)
    """
    app_name = html.escape(settings.app_name)
    settings_url = f"{get_site_url()}/settings"
    year = date.today().year

    html_body = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background-color: #f5f5f5; padding: 20px; text-align: center;">
        <h1 style="color: #333; margin: 0;">{app_name}</h1>
        <p style="color: #666; margin: 5px 0 0 0;">Project Update</p>
      </div>
      <div style="padding: 20px; border: 1px solid #ddd; border-top: none;">
        <h2 style="color: #333; margin-top: 0;">{html.escape(subject)}</h2>
        <div style="white-space: pre-wrap; line-height: 1.6; color: #333;">{html.escape(message)}</div>
        <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
        <p style="color: #666; font-size: 14px;">
          You're receiving this email because you have project updates enabled in your notification settings.
          <br>
          <a href="{settings_url}" style="color: #007bff;">Manage your notification preferences</a>
        </p>
      </div>
      <div style="background-color: #f5f5f5; padding: 15px; text-align: center; font-size: 12px; color: #666;">
        <p>&copy; {year} {app_name}. All rights reserved.</p>
      </div>
    </div>
    """

    text_body = f"""{subject}

{message}

You're receiving this email because you have project updates enabled.
Manage your notification preferences: {settings_url}
"""
    return html_body, text_body
