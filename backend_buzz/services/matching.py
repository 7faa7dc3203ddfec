"""
Matches, the match queue and conversations.

A match is stored once per unordered pair as (min(user), max(user)). A
conversation is created lazily for a match on the first message, never at
match time. The match queue lists active matches with no conversation yet or
with a conversation that has no messages.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_buzz.buzz_logging import get_logger
from backend_buzz.core.exceptions import NotFoundError, ValidationError
from backend_buzz.database import Conversation, Database, Match, Message, Profile
from backend_buzz.database.models import MatchQueueStatus, parse_ts
from backend_buzz.services.profiles import latest_profiles_by_user

logger = get_logger(__name__)


@dataclass
class MatchQueueEntry:
    match: Match
    profile: Profile
    status: MatchQueueStatus


@dataclass
class ConversationSummary:
    conversation: Conversation
    other_user: Profile | None
    last_message: Message | None


def canonical_pair(user_a: int, user_b: int) -> tuple[int, int]:
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


def _active_match(db: Database, user_a: int, user_b: int) -> Match | None:
    pair = canonical_pair(user_a, user_b)
    return next(
        (m for m in db.matches if m.is_active and (m.user1_id, m.user2_id) == pair),
        None,
    )


def find_active_match(db: Database, user_a: int, user_b: int) -> Match | None:
    with db.read():
        return _active_match(db, user_a, user_b)


def get_match(db: Database, match_id: int) -> Match | None:
    with db.read():
        return next((m for m in db.matches if m.id == match_id), None)


def create_match(db: Database, user_a: int, user_b: int) -> Match | None:
    """Append an active match for the pair; None if one already exists."""
    if user_a == user_b:
        raise ValidationError("cannot match a user with themselves")
    with db.transaction():
        if _active_match(db, user_a, user_b) is not None:
            return None
        user1, user2 = canonical_pair(user_a, user_b)
        match = Match(id=db.next_id(), user1_id=user1, user2_id=user2)
        db.matches.append(match)
    logger.info("match_created", match_id=match.id, user1_id=user1, user2_id=user2)
    return match


def list_matches(db: Database, user_id: int) -> list[tuple[Match, Profile | None]]:
    """Active matches for the user, newest first, with the other user's current profile."""
    with db.read():
        current = latest_profiles_by_user(db)
        rows = [m for m in db.matches if m.is_active and m.involves(user_id)]
        rows.sort(key=lambda m: (parse_ts(m.created_at), m.id), reverse=True)
        return [(m, current.get(m.other(user_id))) for m in rows]


def get_match_queue(db: Database, user_id: int) -> list[MatchQueueEntry]:
    """Matches still waiting for a first message. Entries without a profile are dropped."""
    with db.read():
        current = latest_profiles_by_user(db)
        conversation_by_match = {c.match_id: c for c in db.conversations}
        conversations_with_messages = {m.conversation_id for m in db.messages}
        queue: list[MatchQueueEntry] = []
        for match in db.matches:
            if not match.is_active or not match.involves(user_id):
                continue
            conversation = conversation_by_match.get(match.id)
            if conversation is None:
                status = MatchQueueStatus.NO_CONVERSATION
            elif conversation.id not in conversations_with_messages:
                status = MatchQueueStatus.NO_MESSAGES
            else:
                continue
            profile = current.get(match.other(user_id))
            if profile is None:
                logger.debug("match_queue_profile_missing", user_id=user_id, match_id=match.id)
                continue
            queue.append(MatchQueueEntry(match=match, profile=profile, status=status))
    logger.debug("match_queue_built", user_id=user_id, size=len(queue))
    return queue


def get_conversation_by_match_id(db: Database, match_id: int) -> Conversation | None:
    with db.read():
        return next((c for c in db.conversations if c.match_id == match_id), None)


def get_conversation(db: Database, conversation_id: int) -> Conversation | None:
    with db.read():
        return next((c for c in db.conversations if c.id == conversation_id), None)


def get_or_create_conversation_for_match(db: Database, match_id: int) -> Conversation:
    """Existing conversation for the match, or a new empty one. NotFoundError for an unknown match."""
    with db.transaction():
        existing = next((c for c in db.conversations if c.match_id == match_id), None)
        if existing is not None:
            return existing
        match = next((m for m in db.matches if m.id == match_id), None)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        conversation = Conversation(
            id=db.next_id(),
            match_id=match_id,
            participants=[match.user1_id, match.user2_id],
        )
        db.conversations.append(conversation)
    logger.info("conversation_created", conversation_id=conversation.id, match_id=match_id)
    return conversation


def list_conversations_for_user(db: Database, user_id: int) -> list[ConversationSummary]:
    """Active conversations, most recent message first; conversations without messages last."""
    with db.read():
        current = latest_profiles_by_user(db)
        messages_by_id = {m.id: m for m in db.messages}
        rows = [c for c in db.conversations if c.is_active and user_id in c.participants]
        with_messages = [c for c in rows if c.last_message_at]
        without_messages = [c for c in rows if not c.last_message_at]
        with_messages.sort(key=lambda c: parse_ts(c.last_message_at), reverse=True)
        out: list[ConversationSummary] = []
        for c in with_messages + without_messages:
            other = c.other(user_id)
            out.append(
                ConversationSummary(
                    conversation=c,
                    other_user=current.get(other) if other is not None else None,
                    last_message=messages_by_id.get(c.last_message_id) if c.last_message_id else None,
                )
            )
        return out
