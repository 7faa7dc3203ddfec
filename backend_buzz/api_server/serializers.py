"""
Entity -> JSON payloads in the shapes the web client reads.

Credentials never leave this module: users go through public_user().
"""

from __future__ import annotations

from typing import Any

from backend_buzz.database import Profile, User
from backend_buzz.services.matching import ConversationSummary, MatchQueueEntry
from backend_buzz.database.models import Match

AUTH_USER_FIELDS = ("id", "email", "first_name", "gender", "verification_type", "verification_status")


def public_user(user: User | None) -> dict[str, Any] | None:
    return user.public_dict() if user is not None else None


def auth_user(user: User, *, with_profile_completed: bool = False) -> dict[str, Any]:
    out = {k: getattr(user, k) for k in AUTH_USER_FIELDS}
    if with_profile_completed:
        out["profile_completed"] = user.profile_completed
    return out


def profile_dict(profile: Profile | None) -> dict[str, Any] | None:
    return profile.to_dict() if profile is not None else None


def match_with_profile(match: Match, profile: Profile | None) -> dict[str, Any]:
    return {**match.to_dict(), "profile": profile_dict(profile)}


def match_queue_entry(entry: MatchQueueEntry) -> dict[str, Any]:
    m = entry.match
    return {
        "id": m.id,
        "user1_id": m.user1_id,
        "user2_id": m.user2_id,
        "created_at": m.created_at,
        "is_active": m.is_active,
        "otherUser": {
            "id": entry.profile.id,
            "user_id": entry.profile.user_id,
            "name": entry.profile.name,
            "photos": entry.profile.photos,
        },
        "status": entry.status.value,
    }


def conversation_summary(summary: ConversationSummary) -> dict[str, Any]:
    return {
        **summary.conversation.to_dict(),
        "otherUser": profile_dict(summary.other_user),
        "lastMessage": summary.last_message.to_dict() if summary.last_message else None,
    }
