"""
Identity and credentials: user creation, lookup, authentication, verification state.

Verification status is a small state machine:
    pending -> verified | failed, failed -> pending (retry); verified is terminal.
Setting the current status again is a no-op that still counts as a change.
Field mutations on an unknown id change nothing and return 0.
"""

from __future__ import annotations

import re

from backend_buzz.buzz_logging import get_logger
from backend_buzz.core.exceptions import (
    DuplicateEmail,
    DuplicateWallet,
    InvalidTransition,
    ValidationError,
)
from backend_buzz.database import Database, User
from backend_buzz.database.models import USER_GENDERS, VerificationStatus, VerificationType
from backend_buzz.services.passwords import DEFAULT_ITERATIONS, hash_password, verify_password

logger = get_logger(__name__)

_P = VerificationStatus.PENDING.value
_V = VerificationStatus.VERIFIED.value
_F = VerificationStatus.FAILED.value

ALLOWED_TRANSITIONS = frozenset({(_P, _V), (_P, _F), (_F, _P)})

_WALLET_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def validate_wallet_address(address: str | None) -> str:
    """Return the stripped address; raise ValidationError unless it is a 0x-prefixed 20-byte hex address."""
    address = (address or "").strip()
    if not address:
        raise ValidationError("wallet address must be non-empty")
    if not _WALLET_RE.match(address):
        raise ValidationError(f"Invalid wallet address: {address[:16]}")
    return address


def _check_status(status: str) -> str:
    try:
        return VerificationStatus(status).value
    except ValueError as e:
        raise ValidationError(f"Invalid verification status: {status!r}") from e


def _transition(user: User, status: str) -> None:
    current = user.verification_status
    if current != status and (current, status) not in ALLOWED_TRANSITIONS:
        raise InvalidTransition(f"Cannot change verification status from {current} to {status}")
    user.verification_status = status


def verification_type_for(gender: str) -> str:
    """Men verify by wallet, women by face."""
    return VerificationType.WALLET.value if gender == "male" else VerificationType.FACE.value


# --- Lookups (no locking beyond the store read lock; unknown -> None) ---


def get_user_by_id(db: Database, user_id: int) -> User | None:
    with db.read():
        return next((u for u in db.users if u.id == user_id), None)


def get_user_by_email(db: Database, email: str) -> User | None:
    with db.read():
        return next((u for u in db.users if u.email is not None and u.email == email), None)


def get_user_by_wallet(db: Database, wallet_address: str) -> User | None:
    with db.read():
        return next(
            (u for u in db.users if u.wallet_address is not None and u.wallet_address == wallet_address),
            None,
        )


def _find(db: Database, user_id: int) -> User | None:
    return next((u for u in db.users if u.id == user_id), None)


def _email_taken(db: Database, email: str) -> bool:
    return any(u.email is not None and u.email == email for u in db.users)


def _wallet_taken(db: Database, wallet_address: str, *, except_user: int | None = None) -> bool:
    return any(
        u.wallet_address is not None and u.wallet_address == wallet_address and u.id != except_user
        for u in db.users
    )


# --- Creation ---


def create_user_with_email_password(
    db: Database,
    email: str,
    password: str,
    first_name: str,
    gender: str,
    *,
    iterations: int = DEFAULT_ITERATIONS,
) -> User:
    """
    Sign up with email + password.

    Raises ValidationError on missing fields or unknown gender, DuplicateEmail when
    the email (exact, case-sensitive) is already registered.
    """
    if not email or not password or not first_name or not gender:
        raise ValidationError("Missing required fields")
    if gender not in USER_GENDERS:
        raise ValidationError(f"gender must be one of {USER_GENDERS}")
    with db.transaction():
        if _email_taken(db, email):
            logger.info("signup_duplicate_email")
            raise DuplicateEmail()
        user = User(
            id=db.next_id(),
            email=email,
            password_hash=hash_password(password, iterations),
            first_name=first_name,
            gender=gender,
            verification_type=verification_type_for(gender),
            verification_status=VerificationStatus.PENDING.value,
            profile_completed=False,
        )
        db.users.append(user)
    logger.info("user_signed_up", user_id=user.id, verification_type=user.verification_type)
    return user


def create_user(
    db: Database,
    *,
    verification_type: str,
    wallet_address: str | None = None,
    email: str | None = None,
    password: str | None = None,
    first_name: str | None = None,
    gender: str | None = None,
    verification_status: str | None = None,
    iterations: int = DEFAULT_ITERATIONS,
) -> User:
    """
    Placeholder user for the wallet/face flows (no signup form).

    Email and wallet stay unique among users that have one.
    """
    try:
        vtype = VerificationType(verification_type).value
    except ValueError as e:
        raise ValidationError(f"Invalid verification type: {verification_type!r}") from e
    status = _check_status(verification_status) if verification_status else VerificationStatus.PENDING.value
    if gender is not None and gender not in USER_GENDERS:
        raise ValidationError(f"gender must be one of {USER_GENDERS}")
    if wallet_address is not None:
        wallet_address = validate_wallet_address(wallet_address)
    with db.transaction():
        if email is not None and _email_taken(db, email):
            raise DuplicateEmail()
        if wallet_address is not None and _wallet_taken(db, wallet_address):
            raise DuplicateWallet()
        user = User(
            id=db.next_id(),
            wallet_address=wallet_address,
            email=email,
            password_hash=hash_password(password, iterations) if password else None,
            first_name=first_name,
            gender=gender,
            verification_type=vtype,
            verification_status=status,
        )
        db.users.append(user)
    logger.info("user_created", user_id=user.id, verification_type=vtype, verification_status=status)
    return user


# --- Authentication ---


def authenticate(db: Database, email: str, password: str) -> User | None:
    """Return the user iff the email exists and the password verifies; otherwise None."""
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed")
        return None
    logger.info("login_succeeded", user_id=user.id)
    return user


# --- Mutations ---


def update_verification_status(db: Database, user_id: int, status: str) -> int:
    status = _check_status(status)
    with db.transaction():
        user = _find(db, user_id)
        if user is None:
            return 0
        previous = user.verification_status
        _transition(user, status)
        user.touch()
    logger.info("verification_status_updated", user_id=user_id, previous=previous, status=status)
    return 1


def retry_verification(db: Database, user_id: int) -> int:
    """failed -> pending so the user can run the flow again."""
    return update_verification_status(db, user_id, VerificationStatus.PENDING.value)


def update_profile_completed(db: Database, user_id: int, completed: bool) -> int:
    with db.transaction():
        user = _find(db, user_id)
        if user is None:
            return 0
        user.profile_completed = bool(completed)
        user.touch()
    logger.info("profile_completed_updated", user_id=user_id, completed=bool(completed))
    return 1


def attach_wallet_info(db: Database, user_id: int, wallet_address: str, status: str | None = None) -> int:
    """Link a wallet to the user and optionally move verification status in the same write."""
    wallet_address = validate_wallet_address(wallet_address)
    if status:
        status = _check_status(status)
    with db.transaction():
        user = _find(db, user_id)
        if user is None:
            return 0
        if _wallet_taken(db, wallet_address, except_user=user_id):
            raise DuplicateWallet()
        user.wallet_address = wallet_address
        if status:
            _transition(user, status)
        user.touch()
    logger.info("wallet_attached", user_id=user_id, wallet=wallet_address[:10] + "...", status=status)
    return 1
