"""
Identity verification flows and their audit rows.

Women verify with a face check: a FaceAnalyzer reports whether a face was
found, the inferred gender and a confidence (0-100). Men verify by connecting
a wallet. Every completed attempt appends an audit row; rows are never changed.
An attempt the status state machine refuses (a verified user failing a later
check) raises InvalidTransition and leaves no row behind.

The analyzer is a collaborator behind a protocol. SimulatedFaceAnalyzer
stands in when no inference service is configured: it detects a face 98% of
the time, picks a gender 50/50 and reports 80-100 confidence.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Protocol

from backend_buzz.buzz_logging import get_logger
from backend_buzz.core.exceptions import DuplicateWallet, NotFoundError
from backend_buzz.database import Database, FaceVerification, WalletVerification
from backend_buzz.database.models import VerificationStatus
from backend_buzz.services import identity

logger = get_logger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 50.0
REQUIRED_FACE_GENDER = "female"


@dataclass(frozen=True)
class FaceDetection:
    gender: str
    confidence: float
    face_detected: bool

    def to_dict(self) -> dict[str, Any]:
        return {"gender": self.gender, "confidence": self.confidence, "faceDetected": self.face_detected}


class FaceAnalyzer(Protocol):
    def analyze(self, image: bytes | str) -> FaceDetection: ...


class SimulatedFaceAnalyzer:
    """Random detections for demos and tests; ignores the image."""

    def __init__(self, rng: random.Random | None = None, detection_rate: float = 0.98) -> None:
        self._rng = rng or random.Random()
        self._detection_rate = detection_rate

    def analyze(self, image: bytes | str) -> FaceDetection:
        if self._rng.random() >= self._detection_rate:
            return FaceDetection(gender="male", confidence=0.0, face_detected=False)
        gender = "female" if self._rng.random() > 0.5 else "male"
        return FaceDetection(gender=gender, confidence=self._rng.random() * 20 + 80, face_detected=True)


@dataclass
class VerificationOutcome:
    status: str
    verification_id: int


def create_face_verification(
    db: Database,
    user_id: int,
    face_token: str | None = None,
    confidence_score: float | None = None,
    verification_data: Any = None,
) -> FaceVerification:
    with db.transaction():
        row = FaceVerification(
            id=db.next_id(),
            user_id=user_id,
            face_token=face_token,
            confidence_score=confidence_score,
            verification_data=verification_data,
        )
        db.face_verifications.append(row)
    logger.info("face_verification_recorded", user_id=user_id, verification_id=row.id, confidence=confidence_score)
    return row


def create_wallet_verification(
    db: Database,
    user_id: int,
    wallet_address: str,
    signature: str | None = None,
    nonce: str | None = None,
    eth_balance: str | None = None,
    verification_data: Any = None,
) -> WalletVerification:
    wallet_address = identity.validate_wallet_address(wallet_address)
    with db.transaction():
        row = WalletVerification(
            id=db.next_id(),
            user_id=user_id,
            wallet_address=wallet_address,
            signature=signature,
            nonce=nonce,
            eth_balance=eth_balance,
            verification_data=verification_data,
        )
        db.wallet_verifications.append(row)
    logger.info("wallet_verification_recorded", user_id=user_id, verification_id=row.id)
    return row


def face_check_passes(detection: FaceDetection, threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> bool:
    return (
        detection.face_detected
        and detection.gender == REQUIRED_FACE_GENDER
        and detection.confidence >= threshold
    )


def _start_attempt(db: Database, user_id: int) -> None:
    """A new attempt after a failure is a retry (failed -> pending). Caller holds the transaction."""
    user = identity.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    if user.verification_status == VerificationStatus.FAILED.value:
        identity.retry_verification(db, user_id)


def complete_face_verification(
    db: Database,
    user_id: int,
    detection: FaceDetection,
    *,
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    face_token: str | None = None,
) -> VerificationOutcome:
    """Record the attempt and move the user to verified or failed in one write."""
    status = VerificationStatus.VERIFIED.value if face_check_passes(detection, threshold) else VerificationStatus.FAILED.value
    with db.transaction():
        _start_attempt(db, user_id)
        identity.update_verification_status(db, user_id, status)
        row = create_face_verification(
            db,
            user_id,
            face_token=face_token,
            confidence_score=detection.confidence,
            verification_data=detection.to_dict(),
        )
    logger.info("face_verification_completed", user_id=user_id, status=status, confidence=round(detection.confidence, 1))
    return VerificationOutcome(status=status, verification_id=row.id)


def complete_wallet_verification(
    db: Database,
    user_id: int,
    wallet_address: str,
    *,
    eth_balance: str | None = None,
    signature: str | None = None,
    nonce: str | None = None,
) -> VerificationOutcome:
    """Link the wallet, mark the user verified and record the attempt in one write."""
    with db.transaction():
        _start_attempt(db, user_id)
        try:
            identity.attach_wallet_info(db, user_id, wallet_address, VerificationStatus.VERIFIED.value)
        except DuplicateWallet:
            logger.warning("wallet_verification_duplicate", user_id=user_id)
            raise
        row = create_wallet_verification(
            db,
            user_id,
            wallet_address,
            signature=signature,
            nonce=nonce,
            eth_balance=eth_balance,
            verification_data={"balance": eth_balance},
        )
    logger.info("wallet_verification_completed", user_id=user_id)
    return VerificationOutcome(status=VerificationStatus.VERIFIED.value, verification_id=row.id)
