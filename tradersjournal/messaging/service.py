"""
Direct messages between users.

Messages are never hard-deleted by users: deleting sets ``deleted_at`` and
soft-deleted rows are excluded from every read.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterator

from tradersjournal.db.tables import first_row, iter_rows, iter_rows_in, run_query
from tradersjournal.errors import Forbidden, NotFound, UpstreamFailure
from tradersjournal.journal.models import MessageCreate

logger = logging.getLogger(__name__)

MESSAGES_TABLE = "messages"
MESSAGE_COLUMNS = (
    "id, sender_id, receiver_id, content, message_type, file_url, file_name, "
    "is_read, created_at, updated_at"
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _iter_between(db: Any, sender_id: str, receiver_id: str, action: str) -> Iterator[dict]:
    """Visible messages sent by ``sender_id`` to ``receiver_id``."""
    return iter_rows(
        lambda: db.table(MESSAGES_TABLE)
        .select(MESSAGE_COLUMNS)
        .eq("sender_id", sender_id)
        .eq("receiver_id", receiver_id)
        .is_("deleted_at", "null"),
        action,
    )


def _iter_involving(db: Any, user_id: str, column: str) -> Iterator[dict]:
    return iter_rows(
        lambda: db.table(MESSAGES_TABLE)
        .select(MESSAGE_COLUMNS)
        .eq(column, user_id)
        .is_("deleted_at", "null"),
        "fetch conversations",
    )


def _profiles_by_id(db: Any, user_ids: list[str]) -> dict[str, dict]:
    return {
        row["id"]: row
        for row in iter_rows_in(
            lambda: db.table("profiles").select("id, username, avatar_url"),
            "id",
            user_ids,
            "fetch profiles",
        )
    }


def list_conversations(db: Any, user_id: str) -> list[dict]:
    """
    One entry per counterpart: latest message and unread count.

    Newest conversation first.
    """
    conversations: dict[str, dict] = {}

    def _fold(message: dict) -> None:
        other_id = message["receiver_id"] if message["sender_id"] == user_id else message["sender_id"]
        entry = conversations.get(other_id)
        if entry is None:
            entry = {
                "id": other_id,
                "user_id": user_id,
                "other_user_id": other_id,
                "last_message": message,
                "unread_count": 0,
                "updated_at": message.get("created_at"),
            }
            conversations[other_id] = entry
        elif (message.get("created_at") or "") > (entry["last_message"].get("created_at") or ""):
            entry["last_message"] = message
            entry["updated_at"] = message.get("created_at")

        if message["receiver_id"] == user_id and not message.get("is_read"):
            entry["unread_count"] += 1

    for message in _iter_involving(db, user_id, "sender_id"):
        _fold(message)
    for message in _iter_involving(db, user_id, "receiver_id"):
        # Messages to self were already folded from the sent side
        if message["sender_id"] != user_id:
            _fold(message)

    profiles = _profiles_by_id(db, list(conversations))
    for other_id, entry in conversations.items():
        profile = profiles.get(other_id, {})
        entry["other_user"] = {
            "id": other_id,
            "username": profile.get("username"),
            "avatar_url": profile.get("avatar_url"),
        }

    return sorted(conversations.values(), key=lambda c: c["updated_at"] or "", reverse=True)


def get_conversation(db: Any, user_id: str, other_user_id: str) -> list[dict]:
    """
    Messages between two users, oldest first.

    Marks the counterpart's unread messages to the caller as read.
    """
    messages = list(_iter_between(db, user_id, other_user_id, "fetch messages"))
    if other_user_id != user_id:
        messages.extend(_iter_between(db, other_user_id, user_id, "fetch messages"))
    messages.sort(key=lambda m: m.get("created_at") or "")

    run_query(
        db.table(MESSAGES_TABLE)
        .update({"is_read": True})
        .eq("receiver_id", user_id)
        .eq("sender_id", other_user_id)
        .eq("is_read", False),
        "mark messages read",
    )
    return messages


def send_message(db: Any, sender_id: str, message: MessageCreate) -> dict:
    response = run_query(
        db.table(MESSAGES_TABLE).insert({
            "sender_id": sender_id,
            "receiver_id": message.receiver_id,
            "content": message.content,
            "message_type": message.message_type,
            "file_url": message.file_url,
            "file_name": message.file_name,
            "is_read": False,
        }),
        "send message",
    )
    rows = response.data or []
    if not rows:
        raise UpstreamFailure("Failed to send message", message="No row returned from insert")
    return rows[0]


def delete_message(db: Any, user_id: str, message_id: str) -> None:
    """
    Soft-delete a message the caller sent.

    Raises:
        NotFound: no visible message with that id
        Forbidden: the caller is not the sender; the row is left untouched
    """
    message = first_row(
        db.table(MESSAGES_TABLE)
        .select("id, sender_id")
        .eq("id", message_id)
        .is_("deleted_at", "null"),
        "fetch message",
    )
    if message is None:
        raise NotFound("Message not found")
    if message["sender_id"] != user_id:
        raise Forbidden("Unauthorized: You can only delete your own messages")

    run_query(
        db.table(MESSAGES_TABLE)
        .update({"deleted_at": _now()})
        .eq("id", message_id)
        .eq("sender_id", user_id),
        "delete message",
    )
    logger.info(f"Message {message_id} deleted by {user_id}")


def delete_conversation(db: Any, user_id: str, other_user_id: str) -> None:
    """Soft-delete every message exchanged between the two users."""
    deleted_at = _now()
    for sender, receiver in ((user_id, other_user_id), (other_user_id, user_id)):
        run_query(
            db.table(MESSAGES_TABLE)
            .update({"deleted_at": deleted_at})
            .eq("sender_id", sender)
            .eq("receiver_id", receiver)
            .is_("deleted_at", "null"),
            "delete conversation",
        )
    logger.info(f"Conversation between {user_id} and {other_user_id} deleted")


def delete_user_messages(db: Any, user_id: str) -> None:
    """Hard-delete a user's messages (account deletion only)."""
    for column in ("sender_id", "receiver_id"):
        run_query(db.table(MESSAGES_TABLE).delete().eq(column, user_id), "delete messages")
