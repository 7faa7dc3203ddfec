"""
Tests for accounts: signup, lookup, authentication and the verification state machine.
"""

from __future__ import annotations

import pytest

from backend_buzz.core.exceptions import (
    DuplicateEmail,
    DuplicateWallet,
    InvalidTransition,
    ValidationError,
)
from backend_buzz.services import identity

WALLET_A = "0x" + "a1" * 20


def test_signup_picks_verification_type_from_gender(db):
    """Women verify by face, men by wallet; both start pending with no profile."""
    woman = identity.create_user_with_email_password(db, "w@example.com", "pw", "Wen", "female")
    man = identity.create_user_with_email_password(db, "m@example.com", "pw", "Max", "male")
    assert woman.verification_type == "face"
    assert man.verification_type == "wallet"
    assert woman.verification_status == man.verification_status == "pending"
    assert woman.profile_completed is False
    assert woman.password_hash != "pw"


def test_signup_duplicate_email_rejected(db):
    """Second signup with the same email fails and adds no row."""
    identity.create_user_with_email_password(db, "dup@example.com", "pw", "A", "female")
    with pytest.raises(DuplicateEmail):
        identity.create_user_with_email_password(db, "dup@example.com", "other", "B", "male")
    assert len(db.users) == 1


def test_email_comparison_is_case_sensitive(db):
    identity.create_user_with_email_password(db, "Case@example.com", "pw", "A", "female")
    identity.create_user_with_email_password(db, "case@example.com", "pw", "B", "female")
    assert identity.get_user_by_email(db, "CASE@example.com") is None
    assert len(db.users) == 2


def test_signup_missing_fields(db):
    with pytest.raises(ValidationError):
        identity.create_user_with_email_password(db, "", "pw", "A", "female")
    with pytest.raises(ValidationError):
        identity.create_user_with_email_password(db, "x@example.com", "pw", "A", "robot")


def test_authenticate(db):
    """Correct password -> user; wrong password or unknown email -> None."""
    user = identity.create_user_with_email_password(db, "a@example.com", "right", "A", "female")
    assert identity.authenticate(db, "a@example.com", "right").id == user.id
    assert identity.authenticate(db, "a@example.com", "wrong") is None
    assert identity.authenticate(db, "nobody@example.com", "right") is None


def test_placeholder_user_without_email_or_password(db):
    """Wallet/face flows create users without credentials; they can never log in."""
    user = identity.create_user(db, verification_type="wallet", wallet_address=WALLET_A)
    assert user.email is None
    assert user.password_hash is None
    assert identity.get_user_by_wallet(db, WALLET_A).id == user.id
    with pytest.raises(DuplicateWallet):
        identity.create_user(db, verification_type="wallet", wallet_address=WALLET_A)


def test_lookups_unknown_return_none(db):
    assert identity.get_user_by_id(db, 12345) is None
    assert identity.get_user_by_email(db, "ghost@example.com") is None
    assert identity.get_user_by_wallet(db, WALLET_A) is None


def test_verification_state_machine(db):
    """pending -> failed -> pending -> verified; verified is terminal."""
    user = identity.create_user(db, verification_type="face")
    assert identity.update_verification_status(db, user.id, "failed") == 1
    assert identity.retry_verification(db, user.id) == 1
    assert identity.get_user_by_id(db, user.id).verification_status == "pending"
    assert identity.update_verification_status(db, user.id, "verified") == 1
    # same status again is a no-op that still reports one change
    assert identity.update_verification_status(db, user.id, "verified") == 1
    with pytest.raises(InvalidTransition):
        identity.update_verification_status(db, user.id, "failed")
    with pytest.raises(InvalidTransition):
        identity.update_verification_status(db, user.id, "pending")
    assert identity.get_user_by_id(db, user.id).verification_status == "verified"


def test_failed_cannot_jump_to_verified(db):
    user = identity.create_user(db, verification_type="face", verification_status="failed")
    with pytest.raises(InvalidTransition):
        identity.update_verification_status(db, user.id, "verified")


def test_mutations_on_unknown_user_change_nothing(db):
    assert identity.update_verification_status(db, 999, "verified") == 0
    assert identity.update_profile_completed(db, 999, True) == 0
    assert identity.attach_wallet_info(db, 999, WALLET_A) == 0


def test_invalid_status_rejected(db):
    user = identity.create_user(db, verification_type="face")
    with pytest.raises(ValidationError):
        identity.update_verification_status(db, user.id, "approved")


def test_attach_wallet_info(db):
    """Links the wallet and moves status in one write; addresses stay unique."""
    user = identity.create_user(db, verification_type="wallet")
    other = identity.create_user(db, verification_type="wallet")
    assert identity.attach_wallet_info(db, user.id, WALLET_A, "verified") == 1
    refreshed = identity.get_user_by_id(db, user.id)
    assert refreshed.wallet_address == WALLET_A
    assert refreshed.verification_status == "verified"
    with pytest.raises(DuplicateWallet):
        identity.attach_wallet_info(db, other.id, WALLET_A)
    # re-linking the same wallet to its owner is fine
    assert identity.attach_wallet_info(db, user.id, WALLET_A) == 1


def test_wallet_address_format():
    assert identity.validate_wallet_address("  " + WALLET_A + " ") == WALLET_A
    with pytest.raises(ValidationError, match="non-empty"):
        identity.validate_wallet_address("")
    with pytest.raises(ValidationError, match="Invalid wallet"):
        identity.validate_wallet_address("0x1234")
