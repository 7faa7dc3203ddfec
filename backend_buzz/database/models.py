"""
Domain models for stored entities.

Users, profiles, verification audit rows, swipe actions, matches,
conversations and messages. Plain dataclasses keyed exactly like the stored
JSON document (snake_case); no ORM coupling so backends stay swappable.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class VerificationType(str, Enum):
    WALLET = "wallet"
    FACE = "face"


class VerificationStatus(str, Enum):
    """Per-user gate for discovery: pending -> verified | failed, failed -> pending."""

    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class SwipeActionType(str, Enum):
    LIKE = "like"
    PASS = "pass"
    SUPER_LIKE = "super_like"


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    STICKER = "sticker"


class MatchQueueStatus(str, Enum):
    NO_CONVERSATION = "no_conversation"
    NO_MESSAGES = "no_messages"


USER_GENDERS = ("male", "female")
PROFILE_GENDERS = ("male", "female", "other")
LOOKING_FOR = ("male", "female", "both")

POSITIVE_SWIPES = frozenset({SwipeActionType.LIKE.value, SwipeActionType.SUPER_LIKE.value})


def utc_now_iso() -> str:
    """Current UTC time as ISO 8601, fixed microsecond precision so strings sort."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def parse_ts(value: str | None) -> datetime:
    """ISO 8601 string to aware datetime. Accepts a trailing Z; None sorts first."""
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class _Record:
    """to_dict/from_dict shared by all stored entities."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class User(_Record):
    """Account row. password_hash is never serialized to API responses."""

    id: int
    verification_type: str
    verification_status: str = VerificationStatus.PENDING.value
    profile_completed: bool = False
    wallet_address: str | None = None
    email: str | None = None
    password_hash: str | None = None
    first_name: str | None = None
    gender: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    def public_dict(self) -> dict[str, Any]:
        """Serializable view without the credential."""
        out = self.to_dict()
        out.pop("password_hash", None)
        return out

    def touch(self) -> None:
        self.updated_at = utc_now_iso()


@dataclass
class Profile(_Record):
    id: int
    user_id: int
    name: str
    age: int | None = None
    bio: str | None = None
    interests: list[str] | None = None
    """Stored as a list; duplicates are dropped on write."""
    photos: list[str] | None = None
    location: str | None = None
    gender: str | None = None
    looking_for: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)


@dataclass
class FaceVerification(_Record):
    """Append-only audit row for a face check."""

    id: int
    user_id: int
    face_token: str | None = None
    confidence_score: float | None = None
    verification_data: Any = None
    created_at: str = field(default_factory=utc_now_iso)


@dataclass
class WalletVerification(_Record):
    """Append-only audit row for a wallet connection."""

    id: int
    user_id: int
    wallet_address: str
    signature: str | None = None
    nonce: str | None = None
    eth_balance: str | None = None
    verification_data: Any = None
    created_at: str = field(default_factory=utc_now_iso)


@dataclass
class SwipeAction(_Record):
    id: int
    user_id: int
    target_user_id: int
    action_type: str
    created_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SwipeAction:
        # older documents stored the decision under "action"
        if "action_type" not in data and "action" in data:
            data = {**data, "action_type": data["action"]}
        return super().from_dict(data)


@dataclass
class Match(_Record):
    """Unordered pair stored canonically as (min, max)."""

    id: int
    user1_id: int
    user2_id: int
    created_at: str = field(default_factory=utc_now_iso)
    is_active: bool = True

    def involves(self, user_id: int) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def other(self, user_id: int) -> int:
        return self.user2_id if self.user1_id == user_id else self.user1_id


@dataclass
class Conversation(_Record):
    id: int
    match_id: int
    participants: list[int]
    last_message_id: int | None = None
    last_message_at: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    is_active: bool = True

    def other(self, user_id: int) -> int | None:
        return next((p for p in self.participants if p != user_id), None)


@dataclass
class Message(_Record):
    id: int
    conversation_id: int
    sender_id: int
    content: str
    message_type: str = MessageType.TEXT.value
    created_at: str = field(default_factory=utc_now_iso)
    is_read: bool = False
