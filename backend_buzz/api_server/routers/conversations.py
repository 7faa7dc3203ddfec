"""
/api/conversations: conversation list, message history, sending.

Sending with only a matchId creates the match's conversation on first use.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from backend_buzz.api_server.dependencies import get_db
from backend_buzz.api_server.schemas import SendMessageRequest
from backend_buzz.api_server.serializers import conversation_summary
from backend_buzz.core.exceptions import NotAParticipant, ValidationError
from backend_buzz.database import Database
from backend_buzz.services import matching, messaging

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("")
def get_conversations(
    user_id: Optional[int] = Query(None, alias="userId"),
    conversation_id: Optional[int] = Query(None, alias="conversationId"),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    if user_id is None:
        raise ValidationError("User ID is required")
    if conversation_id is not None:
        conversation = matching.get_conversation(db, conversation_id)
        if conversation is not None and user_id not in conversation.participants:
            raise NotAParticipant("Not a participant of this conversation")
        return {"messages": [m.to_dict() for m in messaging.list_messages(db, conversation_id)]}
    summaries = matching.list_conversations_for_user(db, user_id)
    return {"conversations": [conversation_summary(s) for s in summaries]}


@router.post("")
def send(body: SendMessageRequest = Body(...), db: Database = Depends(get_db)) -> dict[str, Any]:
    if body.conversationId is None and body.matchId is None:
        raise ValidationError("Conversation ID or Match ID is required")
    # conversation creation and the first message commit together
    with db.transaction():
        if body.conversationId is not None:
            conversation_id = body.conversationId
        else:
            match = matching.get_match(db, body.matchId)
            if match is not None and not match.involves(body.userId):
                raise NotAParticipant("Not a participant of this match")
            conversation_id = matching.get_or_create_conversation_for_match(db, body.matchId).id
        message = messaging.send_message(db, conversation_id, body.userId, body.content, body.messageType)
    return {"message": message.to_dict(), "conversationId": conversation_id}
