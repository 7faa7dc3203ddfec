"""
/api/matches and /api/match-queue.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from backend_buzz.api_server.dependencies import get_db
from backend_buzz.api_server.serializers import match_queue_entry, match_with_profile
from backend_buzz.core.exceptions import ValidationError
from backend_buzz.database import Database
from backend_buzz.services import matching

router = APIRouter(tags=["matches"])


@router.get("/matches")
def list_matches(
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    if user_id is None:
        raise ValidationError("User ID is required")
    # matches whose other user has no profile are left out of both lists
    rows = [(m, p) for m, p in matching.list_matches(db, user_id) if p is not None]
    return {
        "matches": [m.to_dict() for m, _ in rows],
        "matchedProfiles": [match_with_profile(m, p) for m, p in rows],
    }


@router.get("/match-queue")
def match_queue(
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    if user_id is None:
        raise ValidationError("User ID is required")
    queue = matching.get_match_queue(db, user_id)
    return {"success": True, "matchQueue": [match_queue_entry(e) for e in queue]}
