"""
Project-update announcements.

Recipients are either every subscribed user or an explicit selection; mail
goes out in batches, each batch sent concurrently.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from tradersjournal.admin.users import emails_for, subscribed_user_ids
from tradersjournal.config import settings
from tradersjournal.errors import BadRequest, UpstreamFailure
from tradersjournal.notify import email as mailer

logger = logging.getLogger(__name__)


@dataclass
class AnnouncementResult:
    sent_count: int = 0
    failed_count: int = 0
    recipients: int = 0

    @property
    def message(self) -> str:
        if self.recipients == 0:
            return "No users to notify."
        if self.failed_count:
            return f"Announcement sent to {self.sent_count} users; {self.failed_count} failed."
        return f"Announcement sent successfully to {self.sent_count} users!"

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "sent_count": self.sent_count,
            "failed_count": self.failed_count,
        }


def resolve_recipients(db: Any, send_to_all: bool, selected_user_ids: Optional[list[str]]) -> list[str]:
    """
    E-mail addresses to notify.

    Raises:
        BadRequest: ``send_to_all`` is off and nobody was selected
    """
    if send_to_all:
        user_ids = subscribed_user_ids(db)
    else:
        if not selected_user_ids:
            raise BadRequest("No users selected for notification.")
        user_ids = list(selected_user_ids)
    return emails_for(db, user_ids)


async def send_announcement(
    emails: list[str],
    subject: str,
    message: str,
    batch_size: Optional[int] = None,
) -> AnnouncementResult:
    """Send the announcement to every address, ``batch_size`` at a time."""
    result = AnnouncementResult(recipients=len(emails))
    if not emails:
        return result
    if not mailer.is_email_configured():
        raise UpstreamFailure("Failed to send emails.", message="Email delivery is not configured")

    html_body, text_body = mailer.render_announcement(subject, message)
    size = batch_size or settings.announcement_batch_size

    for start in range(0, len(emails), size):
        batch = emails[start:start + size]
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(mailer.send_email, to, subject, html_body, text_body) for to in batch)
        )
        sent = sum(1 for ok in outcomes if ok)
        result.sent_count += sent
        result.failed_count += len(batch) - sent

    logger.info(f"Announcement '{subject}': {result.sent_count} sent, {result.failed_count} failed")
    if result.sent_count == 0:
        raise UpstreamFailure(
            "Failed to send emails.",
            message=f"All {result.failed_count} of {result.recipients} e-mails failed",
            details={"sent_count": result.sent_count, "failed_count": result.failed_count},
        )
    return result
