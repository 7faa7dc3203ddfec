"""
POST /api/auth: signup and login, keyed by `action`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend_buzz.api_server.dependencies import get_app_settings, get_db
from backend_buzz.api_server.schemas import AuthRequest, SignupRequest
from backend_buzz.api_server.serializers import auth_user
from backend_buzz.buzz_logging import bind_user
from backend_buzz.config import Settings
from backend_buzz.database import Database
from backend_buzz.services import identity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("")
def auth(
    body: AuthRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    if isinstance(body, SignupRequest):
        user = identity.create_user_with_email_password(
            db,
            body.email,
            body.password,
            body.first_name,
            body.gender,
            iterations=settings.pbkdf2_iterations,
        )
        bind_user(user.id).info("api_signup_completed", verification_type=user.verification_type)
        return {
            "success": True,
            "userId": user.id,
            "user": auth_user(user),
            "message": "User created successfully",
        }

    user = identity.authenticate(db, body.email, body.password)
    if user is None:
        return JSONResponse(
            status_code=401,
            content={"success": False, "message": "Invalid email or password", "code": "auth_error"},
        )
    bind_user(user.id).info("api_login_completed", profile_completed=user.profile_completed)
    return {
        "success": True,
        "user": auth_user(user, with_profile_completed=True),
        "message": "Login successful",
    }
