"""
/api/users: account lookup and the field mutations used by the verification flows.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from backend_buzz.api_server.dependencies import get_app_settings, get_db
from backend_buzz.api_server.schemas import (
    CreateUserRequest,
    GetByEmailRequest,
    GetByIdRequest,
    GetByWalletRequest,
    RetryVerificationRequest,
    UpdateProfileCompletedRequest,
    UpdateVerificationStatusRequest,
    UpdateWalletInfoRequest,
    UsersRequest,
)
from backend_buzz.api_server.serializers import profile_dict, public_user
from backend_buzz.config import Settings
from backend_buzz.core.exceptions import ValidationError
from backend_buzz.database import Database
from backend_buzz.services import identity, profiles

router = APIRouter(prefix="/users", tags=["users"])


@router.post("")
def users_action(
    body: UsersRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    if isinstance(body, CreateUserRequest):
        user = identity.create_user(
            db,
            verification_type=body.verification_type,
            wallet_address=body.wallet_address,
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            gender=body.gender,
            verification_status=body.verification_status,
            iterations=settings.pbkdf2_iterations,
        )
        return {"success": True, "userId": user.id, "message": "User created successfully"}
    if isinstance(body, GetByWalletRequest):
        return {"success": True, "user": public_user(identity.get_user_by_wallet(db, body.walletAddress))}
    if isinstance(body, GetByEmailRequest):
        return {"success": True, "user": public_user(identity.get_user_by_email(db, body.email))}
    if isinstance(body, GetByIdRequest):
        return {"success": True, "user": public_user(identity.get_user_by_id(db, body.id))}
    if isinstance(body, UpdateVerificationStatusRequest):
        changes = identity.update_verification_status(db, body.id, body.status)
        return {"success": True, "changes": changes, "message": "Verification status updated"}
    if isinstance(body, UpdateWalletInfoRequest):
        changes = identity.attach_wallet_info(db, body.id, body.wallet_address, body.verification_status)
        return {"success": True, "changes": changes, "message": "Wallet information updated"}
    if isinstance(body, UpdateProfileCompletedRequest):
        changes = identity.update_profile_completed(db, body.id, body.completed)
        return {"success": True, "changes": changes, "message": "Profile completion status updated"}
    if isinstance(body, RetryVerificationRequest):
        changes = identity.retry_verification(db, body.id)
        return {"success": True, "changes": changes, "message": "Verification reset to pending"}
    raise ValidationError("Invalid action")


@router.get("")
def get_user(
    id: Optional[int] = Query(None),
    wallet_address: Optional[str] = Query(None, alias="walletAddress"),
    email: Optional[str] = Query(None),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    if id is not None:
        return {
            "success": True,
            "user": public_user(identity.get_user_by_id(db, id)),
            "profile": profile_dict(profiles.get_latest_by_user_id(db, id)),
        }
    if wallet_address:
        return {"success": True, "user": public_user(identity.get_user_by_wallet(db, wallet_address))}
    if email:
        return {"success": True, "user": public_user(identity.get_user_by_email(db, email))}
    raise ValidationError("No search parameter provided")
