"""Direct messaging between users."""

from tradersjournal.messaging.service import (
    delete_conversation,
    delete_message,
    get_conversation,
    list_conversations,
    send_message,
)

__all__ = [
    "delete_conversation",
    "delete_message",
    "get_conversation",
    "list_conversations",
    "send_message",
]
