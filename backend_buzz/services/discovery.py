"""
Discovery and swipes.

Candidates are re-derived on every call: other users' current profiles that
fit the viewer's gender preference, that the viewer has never swiped, and
whose owner is verified with a completed profile. The eligible set is shuffled
uniformly and truncated. A like or super-like that meets a like from the
other side promotes the pair to a match.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from backend_buzz.buzz_logging import get_logger
from backend_buzz.config.settings import SwipePolicy
from backend_buzz.core.exceptions import DuplicateSwipe, ValidationError
from backend_buzz.database import Database, Match, Profile, SwipeAction
from backend_buzz.database.models import (
    LOOKING_FOR,
    POSITIVE_SWIPES,
    SwipeActionType,
    VerificationStatus,
)
from backend_buzz.services import matching
from backend_buzz.services.profiles import latest_profiles_by_user

logger = get_logger(__name__)

DEFAULT_LIMIT = 10


@dataclass
class SwipeResult:
    swipe: SwipeAction
    is_match: bool
    """True when both sides currently like each other."""
    match: Match | None = None
    """Set only when this swipe created the match."""

    @property
    def match_created(self) -> bool:
        return self.match is not None


def list_candidates(
    db: Database,
    viewer_id: int,
    preference: str,
    limit: int = DEFAULT_LIMIT,
    *,
    rng: random.Random | None = None,
) -> list[Profile]:
    if preference not in LOOKING_FOR:
        raise ValidationError(f"preference must be one of {LOOKING_FOR}")
    if limit < 1:
        raise ValidationError("limit must be >= 1")
    rng = rng or random.Random()
    with db.read():
        swiped = {s.target_user_id for s in db.swipe_actions if s.user_id == viewer_id}
        eligible_owners = {
            u.id
            for u in db.users
            if u.verification_status == VerificationStatus.VERIFIED.value and u.profile_completed
        }
        eligible = [
            p
            for user_id, p in latest_profiles_by_user(db).items()
            if user_id != viewer_id
            and (preference == "both" or p.gender == preference)
            and user_id not in swiped
            and user_id in eligible_owners
        ]
    eligible.sort(key=lambda p: p.id)
    rng.shuffle(eligible)
    batch = eligible[:limit]
    logger.debug(
        "discover_candidates",
        user_id=viewer_id,
        preference=preference,
        eligible=len(eligible),
        returned=len(batch),
    )
    return batch


def _latest_decision(db: Database, actor_id: int, target_id: int) -> SwipeAction | None:
    rows = [s for s in db.swipe_actions if s.user_id == actor_id and s.target_user_id == target_id]
    return max(rows, key=lambda s: s.id) if rows else None


def has_mutual_like(db: Database, actor_id: int, target_id: int) -> bool:
    """Does target's current decision about actor count as a like?"""
    with db.read():
        decision = _latest_decision(db, target_id, actor_id)
        return decision is not None and decision.action_type in POSITIVE_SWIPES


def record_swipe(
    db: Database,
    actor_id: int,
    target_id: int,
    action_type: str,
    *,
    policy: SwipePolicy = SwipePolicy.SUPERSEDE,
) -> SwipeResult:
    """
    Append the decision and create the match when the like is mutual.

    SUPERSEDE: a repeat swipe appends a new row that becomes the current decision.
    REJECT: a repeat swipe raises DuplicateSwipe.
    """
    try:
        action = SwipeActionType(action_type).value
    except ValueError as e:
        raise ValidationError(f"Invalid action type: {action_type!r}") from e
    if actor_id == target_id:
        raise ValidationError("cannot swipe on yourself")
    with db.transaction():
        previous = _latest_decision(db, actor_id, target_id)
        if previous is not None and policy == SwipePolicy.REJECT:
            raise DuplicateSwipe(f"User {actor_id} already swiped on {target_id}")
        swipe = SwipeAction(id=db.next_id(), user_id=actor_id, target_user_id=target_id, action_type=action)
        db.swipe_actions.append(swipe)
        is_match = False
        created: Match | None = None
        if action in POSITIVE_SWIPES and has_mutual_like(db, actor_id, target_id):
            is_match = True
            created = matching.create_match(db, actor_id, target_id)
    logger.info(
        "swipe_recorded",
        user_id=actor_id,
        target_user_id=target_id,
        action_type=action,
        superseded=previous.id if previous else None,
        is_match=is_match,
        match_id=created.id if created else None,
    )
    return SwipeResult(swipe=swipe, is_match=is_match, match=created)


def list_swipes_by_user(db: Database, user_id: int) -> list[SwipeAction]:
    with db.read():
        return [s for s in db.swipe_actions if s.user_id == user_id]
