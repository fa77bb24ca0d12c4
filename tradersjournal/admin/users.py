"""
Admin dashboards: user list, subscription counts and security events.
"""

import logging
from typing import Any, Mapping, Optional

from tradersjournal.config import settings
from tradersjournal.db.tables import count_rows, iter_rows, iter_rows_in, run_query
from tradersjournal.journal.analytics import compute_subscriber_stats, SubscriberStats

logger = logging.getLogger(__name__)

SECURITY_CATEGORIES = {"SECURITY", "AUTHENTICATION"}
SECURITY_SEVERITIES = {"HIGH", "CRITICAL"}


def display_name(profile: Mapping[str, Any]) -> str:
    """Full name if set, else username, else e-mail."""
    full = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
    return full or profile.get("username") or profile.get("email") or ""


def _subscription_map(db: Any) -> dict[str, bool]:
    return {
        row["user_id"]: bool(row.get("email_project_updates"))
        for row in iter_rows(
            lambda: db.table("user_settings").select("user_id, email_project_updates"),
            "fetch user settings",
            key="user_id",
        )
    }


def list_users(db: Any) -> dict:
    """All profiles, newest first, with their project-update preference."""
    subscriptions = _subscription_map(db)
    users = [
        {
            "id": profile["id"],
            "email": profile.get("email"),
            "username": profile.get("username"),
            "name": display_name(profile),
            "has_project_updates": subscriptions.get(profile["id"], False),
            "created_at": profile.get("created_at"),
        }
        for profile in iter_rows(
            lambda: db.table("profiles").select("id, email, username, first_name, last_name, created_at"),
            "fetch users",
        )
    ]
    users.sort(key=lambda u: u["created_at"] or "", reverse=True)
    return {
        "users": users,
        "total_users": len(users),
        "subscribed_users": sum(1 for u in users if u["has_project_updates"]),
    }


def subscriber_stats(db: Any) -> SubscriberStats:
    total = count_rows(
        db.table("profiles").select("id", count="exact", head=True),
        "count users",
    )
    subscribed_rows = iter_rows(
        lambda: db.table("user_settings")
        .select("user_id, email_project_updates")
        .eq("email_project_updates", True),
        "fetch subscribed users",
        key="user_id",
    )
    return compute_subscriber_stats(subscribed_rows, total_users=total)


def subscribed_user_ids(db: Any) -> list[str]:
    return [
        row["user_id"]
        for row in iter_rows(
            lambda: db.table("user_settings")
            .select("user_id")
            .eq("email_project_updates", True),
            "fetch users",
            key="user_id",
        )
    ]


def emails_for(db: Any, user_ids: list[str]) -> list[str]:
    """E-mail addresses of the given users, read in bounded chunks."""
    return [
        row["email"]
        for row in iter_rows_in(
            lambda: db.table("profiles").select("id, email"),
            "id",
            user_ids,
            "fetch emails",
        )
        if row.get("email")
    ]


def is_security_event(event: Mapping[str, Any]) -> bool:
    return (
        event.get("category") in SECURITY_CATEGORIES
        or event.get("severity") in SECURITY_SEVERITIES
    )


def security_events(db: Any, limit: Optional[int] = None) -> dict:
    """Security-relevant entries among the latest audit logs."""
    response = run_query(
        db.table("audit_logs")
        .select("id, user_id, action, severity, category, ip_address, user_agent, created_at, metadata")
        .order("created_at", desc=True)
        .limit(limit or settings.security_event_limit),
        "fetch security events",
    )
    events = [e for e in (response.data or []) if is_security_event(e)]
    return {"events": events, "total": len(events)}
