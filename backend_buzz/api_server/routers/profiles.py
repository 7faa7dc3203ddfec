"""
/api/profiles: create (replace), partial update, lookup by user id.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from backend_buzz.api_server.dependencies import get_db
from backend_buzz.api_server.schemas import (
    CreateProfileRequest,
    GetProfileRequest,
    ProfilesRequest,
    UpdateProfileRequest,
)
from backend_buzz.api_server.serializers import profile_dict
from backend_buzz.core.exceptions import ValidationError
from backend_buzz.database import Database
from backend_buzz.services import profiles

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("")
def profiles_action(body: ProfilesRequest, db: Database = Depends(get_db)) -> dict[str, Any]:
    if isinstance(body, CreateProfileRequest):
        profile = profiles.create_profile(db, body.user_id, body.attributes())
        return {"success": True, "profileId": profile.id, "message": "Profile created successfully"}
    if isinstance(body, UpdateProfileRequest):
        changes = profiles.update_profile(db, body.userId, body.attributes())
        return {"success": True, "changes": changes, "message": "Profile updated successfully"}
    if isinstance(body, GetProfileRequest):
        return {"success": True, "profile": profile_dict(profiles.get_latest_by_user_id(db, body.userId))}
    raise ValidationError("Invalid action")


@router.get("")
def get_profile(
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    if user_id is None:
        raise ValidationError("No userId parameter provided")
    profile = profiles.get_latest_by_user_id(db, user_id)
    if profile is None:
        return {"success": False, "profile": None, "message": "No profile found for this user"}
    return {"success": True, "profile": profile_dict(profile)}
