"""
/api/discover: candidate batch for a viewer, and swipes.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from backend_buzz.api_server.dependencies import get_app_settings, get_db
from backend_buzz.api_server.schemas import SwipeRequest
from backend_buzz.api_server.serializers import profile_dict
from backend_buzz.config import Settings
from backend_buzz.core.exceptions import NotFoundError, ValidationError
from backend_buzz.database import Database
from backend_buzz.services import discovery, identity, profiles

router = APIRouter(prefix="/discover", tags=["discover"])


@router.get("")
def discover(
    user_id: Optional[int] = Query(None, alias="userId"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    if user_id is None:
        raise ValidationError("userId is required")
    if identity.get_user_by_id(db, user_id) is None:
        raise NotFoundError("User not found")
    own = profiles.get_latest_by_user_id(db, user_id)
    preference = (own.looking_for if own else None) or settings.default_looking_for
    batch = discovery.list_candidates(db, user_id, preference, limit or settings.discover_limit)
    return {"success": True, "profiles": [profile_dict(p) for p in batch]}


@router.post("")
def swipe(
    body: SwipeRequest = Body(...),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    result = discovery.record_swipe(
        db,
        body.userId,
        body.targetUserId,
        body.actionType,
        policy=settings.swipe_policy,
    )
    return {
        "success": True,
        "isMatch": result.is_match,
        "matchCreated": result.match_created,
        "matchId": result.match.id if result.match else None,
        "message": "It's a match!" if result.is_match else "Swipe recorded",
    }
