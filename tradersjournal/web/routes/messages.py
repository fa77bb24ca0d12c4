"""
Direct messaging API routes.
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tradersjournal.auth.authorizer import Identity
from tradersjournal.journal.models import MessageCreate
from tradersjournal.messaging import service
from tradersjournal.web.dependencies import get_current_identity, get_db
from tradersjournal.web.schemas import success_response

router = APIRouter(prefix="/api/messages", tags=["messages"])


# Conversation routes come first so "conversations" is never taken for a user id


@router.get("/conversations")
async def get_conversations(
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    """The caller's conversations, newest first."""
    conversations = await asyncio.to_thread(service.list_conversations, db, identity.user_id)
    return {"conversations": conversations}


@router.delete("/conversations/{other_user_id}")
async def delete_conversation(
    other_user_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    await asyncio.to_thread(service.delete_conversation, db, identity.user_id, other_user_id)
    return success_response(message="Conversation deleted successfully")


@router.get("/{other_user_id}")
async def get_messages(
    other_user_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    """Messages with one counterpart, oldest first; marks them read."""
    messages = await asyncio.to_thread(service.get_conversation, db, identity.user_id, other_user_id)
    return {"messages": messages}


@router.post("", status_code=201)
async def send_message(
    message: MessageCreate,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    row = await asyncio.to_thread(service.send_message, db, identity.user_id, message)
    return JSONResponse({"message": row}, status_code=201)


@router.delete("/{message_id}")
async def delete_message(
    message_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    """Delete one of the caller's own messages."""
    await asyncio.to_thread(service.delete_message, db, identity.user_id, message_id)
    return success_response(message="Message deleted successfully")
