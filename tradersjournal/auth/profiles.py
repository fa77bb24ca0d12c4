"""
Profile storage operations against the ``profiles`` and ``user_settings`` tables.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from tradersjournal.db.tables import first_row, run_query

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
SETTINGS_TABLE = "user_settings"


def get_profile(db: Any, user_id: str, columns: str = "*") -> Optional[dict]:
    return first_row(db.table(PROFILES_TABLE).select(columns).eq("id", user_id), "fetch profile")


def get_role(db: Any, user_id: str) -> Optional[str]:
    """Raw role text stored on the profile, or None when there is no profile."""
    profile = get_profile(db, user_id, columns="role")
    return profile.get("role") if profile else None


def find_by_username(db: Any, username: str) -> Optional[dict]:
    return first_row(
        db.table(PROFILES_TABLE).select("id, email").eq("username", username),
        "look up user",
    )


def username_taken(db: Any, username: str) -> bool:
    return find_by_username(db, username) is not None


def create_profile(db: Any, user_id: str, username: str, email: str) -> dict:
    now = datetime.now(timezone.utc).isoformat()
    response = run_query(
        db.table(PROFILES_TABLE).insert({
            "id": user_id,
            "username": username,
            "email": email,
            "role": "user",
            "created_at": now,
            "updated_at": now,
        }),
        "create profile",
    )
    rows = response.data or []
    return rows[0] if rows else {}


def touch_last_login(db: Any, user_id: str) -> None:
    """Record the login time; failures are logged and ignored."""
    try:
        db.table(PROFILES_TABLE).update({
            "last_login": datetime.now(timezone.utc).isoformat()
        }).eq("id", user_id).execute()
    except Exception as e:
        logger.warning(f"Failed to update last_login: {e}")


def delete_user_data(db: Any, user_id: str) -> None:
    """Remove every row owned by a user ahead of deleting the auth account."""
    from tradersjournal.journal.trades import delete_user_trades
    from tradersjournal.messaging.service import delete_user_messages

    delete_user_messages(db, user_id)
    delete_user_trades(db, user_id)
    run_query(db.table(SETTINGS_TABLE).delete().eq("user_id", user_id), "delete user settings")
    run_query(db.table(PROFILES_TABLE).delete().eq("id", user_id), "delete profile")
    logger.info(f"Deleted data for user {user_id}")
