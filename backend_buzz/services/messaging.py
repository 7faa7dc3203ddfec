"""
Messages within a conversation.

Sending appends the message and moves the conversation's last-message pointer
in one transaction. Only participants may send.
"""

from __future__ import annotations

from backend_buzz.buzz_logging import get_logger
from backend_buzz.core.exceptions import EmptyContent, NotAParticipant, NotFoundError, ValidationError
from backend_buzz.database import Database, Message
from backend_buzz.database.models import MessageType, parse_ts

logger = get_logger(__name__)


def send_message(
    db: Database,
    conversation_id: int,
    sender_id: int,
    content: str,
    message_type: str = MessageType.TEXT.value,
) -> Message:
    if content is None or not str(content).strip():
        raise EmptyContent("Message content must not be empty")
    try:
        mtype = MessageType(message_type).value
    except ValueError as e:
        raise ValidationError(f"Invalid message type: {message_type!r}") from e
    with db.transaction():
        conversation = next((c for c in db.conversations if c.id == conversation_id), None)
        if conversation is None:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        if sender_id not in conversation.participants:
            logger.warning("message_sender_rejected", conversation_id=conversation_id, sender_id=sender_id)
            raise NotAParticipant(f"User {sender_id} is not a participant of conversation {conversation_id}")
        message = Message(
            id=db.next_id(),
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            message_type=mtype,
        )
        db.messages.append(message)
        conversation.last_message_id = message.id
        conversation.last_message_at = message.created_at
    logger.info(
        "message_sent",
        conversation_id=conversation_id,
        sender_id=sender_id,
        message_id=message.id,
        message_type=mtype,
    )
    return message


def list_messages(db: Database, conversation_id: int) -> list[Message]:
    """Oldest first; ties broken by id so chat order is stable."""
    with db.read():
        rows = [m for m in db.messages if m.conversation_id == conversation_id]
    return sorted(rows, key=lambda m: (parse_ts(m.created_at), m.id))
