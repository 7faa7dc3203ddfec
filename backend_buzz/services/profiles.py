"""
Dating profiles: one current profile per user.

create() replaces every earlier row for the user and flips the owner's
profile_completed flag in the same transaction. update() merges fields into the
current row in place. Reads pick the newest row by created_at, so documents
written before replacement existed still resolve correctly.
"""

from __future__ import annotations

from typing import Any

from backend_buzz.buzz_logging import get_logger
from backend_buzz.core.exceptions import ValidationError
from backend_buzz.database import Database, Profile
from backend_buzz.database.models import LOOKING_FOR, PROFILE_GENDERS, parse_ts, utc_now_iso

logger = get_logger(__name__)

PROFILE_FIELDS = ("name", "age", "bio", "interests", "photos", "location", "gender", "looking_for")

MIN_AGE = 18
MAX_AGE = 120


def _clean_attributes(attributes: dict[str, Any], *, partial: bool) -> dict[str, Any]:
    """Keep known fields and validate them. Raises ValidationError."""
    out = {k: v for k, v in attributes.items() if k in PROFILE_FIELDS}
    if not partial or "name" in out:
        name = (out.get("name") or "").strip() if isinstance(out.get("name"), str) else ""
        if not name:
            raise ValidationError("name is required")
        out["name"] = name
    if out.get("age") is not None:
        try:
            age = int(out["age"])
        except (TypeError, ValueError) as e:
            raise ValidationError("age must be an integer") from e
        if not MIN_AGE <= age <= MAX_AGE:
            raise ValidationError(f"age must be between {MIN_AGE} and {MAX_AGE}")
        out["age"] = age
    if out.get("gender") is not None and out["gender"] not in PROFILE_GENDERS:
        raise ValidationError(f"gender must be one of {PROFILE_GENDERS}")
    if out.get("looking_for") is not None and out["looking_for"] not in LOOKING_FOR:
        raise ValidationError(f"looking_for must be one of {LOOKING_FOR}")
    if out.get("interests") is not None:
        # set semantics, first occurrence keeps its position
        out["interests"] = list(dict.fromkeys(str(i).strip() for i in out["interests"] if str(i).strip()))
    if out.get("photos") is not None:
        out["photos"] = [str(p) for p in out["photos"]]
    return out


def _latest(profiles: list[Profile], user_id: int) -> Profile | None:
    rows = [p for p in profiles if p.user_id == user_id]
    if not rows:
        return None
    return max(rows, key=lambda p: (parse_ts(p.created_at), p.id))


def latest_profiles_by_user(db: Database) -> dict[int, Profile]:
    """Current profile per user id. Caller holds the store lock."""
    out: dict[int, Profile] = {}
    for p in db.profiles:
        cur = out.get(p.user_id)
        if cur is None or (parse_ts(p.created_at), p.id) > (parse_ts(cur.created_at), cur.id):
            out[p.user_id] = p
    return out


def create_profile(db: Database, user_id: int, attributes: dict[str, Any]) -> Profile:
    """Replace the user's profile and mark the user's profile as completed, atomically."""
    clean = _clean_attributes(attributes, partial=False)
    with db.transaction():
        removed = [p.id for p in db.profiles if p.user_id == user_id]
        if removed:
            db.profiles = [p for p in db.profiles if p.user_id != user_id]
        profile = Profile(id=db.next_id(), user_id=user_id, **clean)
        db.profiles.append(profile)
        owner = next((u for u in db.users if u.id == user_id), None)
        if owner is not None:
            owner.profile_completed = True
            owner.touch()
    logger.info(
        "profile_created",
        user_id=user_id,
        profile_id=profile.id,
        replaced=removed,
        owner_found=owner is not None,
    )
    return profile


def get_latest_by_user_id(db: Database, user_id: int) -> Profile | None:
    with db.read():
        profile = _latest(db.profiles, user_id)
    logger.debug("profile_lookup", user_id=user_id, found=profile is not None)
    return profile


def update_profile(db: Database, user_id: int, partial: dict[str, Any]) -> int:
    """Merge provided fields into the current row. 0 if the user has no profile yet."""
    clean = _clean_attributes(partial, partial=True)
    with db.transaction():
        profile = _latest(db.profiles, user_id)
        if profile is None:
            return 0
        for key, value in clean.items():
            setattr(profile, key, value)
        profile.updated_at = utc_now_iso()
    logger.info("profile_updated", user_id=user_id, fields=sorted(clean))
    return 1
