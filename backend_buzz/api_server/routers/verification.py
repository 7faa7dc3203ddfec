"""
/api/verification: audit rows and the face / wallet verification outcomes.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from backend_buzz.api_server.dependencies import get_app_settings, get_db, get_face_analyzer
from backend_buzz.api_server.schemas import (
    CompleteFaceVerificationRequest,
    CompleteWalletVerificationRequest,
    CreateFaceVerificationRequest,
    CreateWalletVerificationRequest,
    VerificationRequest,
)
from backend_buzz.config import Settings
from backend_buzz.core.exceptions import ValidationError
from backend_buzz.database import Database
from backend_buzz.services import verification
from backend_buzz.services.verification import FaceAnalyzer, FaceDetection

router = APIRouter(prefix="/verification", tags=["verification"])


@router.post("")
def verification_action(
    body: VerificationRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    analyzer: FaceAnalyzer = Depends(get_face_analyzer),
) -> dict[str, Any]:
    if isinstance(body, CreateFaceVerificationRequest):
        row = verification.create_face_verification(
            db,
            body.user_id,
            face_token=body.face_token,
            confidence_score=body.confidence_score,
            verification_data=body.verification_data,
        )
        return {"success": True, "verificationId": row.id, "message": "Face verification data saved"}
    if isinstance(body, CreateWalletVerificationRequest):
        row = verification.create_wallet_verification(
            db,
            body.user_id,
            body.wallet_address,
            signature=body.signature,
            nonce=body.nonce,
            eth_balance=body.eth_balance,
            verification_data=body.verification_data,
        )
        return {"success": True, "verificationId": row.id, "message": "Wallet verification data saved"}
    if isinstance(body, CompleteFaceVerificationRequest):
        if body.detection is not None:
            detection = FaceDetection(
                gender=body.detection.gender,
                confidence=body.detection.confidence,
                face_detected=body.detection.faceDetected,
            )
        elif body.image:
            detection = analyzer.analyze(body.image)
        else:
            raise ValidationError("detection or image is required")
        outcome = verification.complete_face_verification(
            db,
            body.user_id,
            detection,
            threshold=settings.face_confidence_threshold,
            face_token=body.face_token,
        )
        return {
            "success": True,
            "verificationId": outcome.verification_id,
            "verification_status": outcome.status,
            "detection": detection.to_dict(),
        }
    if isinstance(body, CompleteWalletVerificationRequest):
        outcome = verification.complete_wallet_verification(
            db,
            body.user_id,
            body.wallet_address,
            eth_balance=body.eth_balance,
            signature=body.signature,
            nonce=body.nonce,
        )
        return {"success": True, "verificationId": outcome.verification_id, "verification_status": outcome.status}
    raise ValidationError("Invalid action")
