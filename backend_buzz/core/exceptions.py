"""
Application-level exceptions.

Every error a service raises on purpose is a BuzzError carrying a stable
`code` and the HTTP status the API layer maps it to. Read paths do not raise
for unknown ids; they return None and let the caller degrade quietly.
"""

from __future__ import annotations


class BuzzError(Exception):
    """Base for all domain errors."""

    code = "error"
    status_code = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict[str, object]:
        return {"success": False, "message": self.message, "code": self.code}


class ValidationError(BuzzError):
    """Missing or malformed input."""

    code = "validation_error"
    status_code = 400


class EmptyContent(ValidationError):
    code = "empty_content"


class InvalidTransition(ValidationError):
    """Verification status change not allowed by the state machine."""

    code = "invalid_transition"


class NotFoundError(BuzzError):
    code = "not_found"
    status_code = 404


class ConflictError(BuzzError):
    """Uniqueness violation. Surfaced as 400 to match the signup contract."""

    code = "conflict"
    status_code = 400


class DuplicateEmail(ConflictError):
    code = "duplicate_email"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "User with this email already exists")


class DuplicateWallet(ConflictError):
    code = "duplicate_wallet"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Wallet address is already linked to another user")


class DuplicateSwipe(ConflictError):
    code = "duplicate_swipe"


class AuthError(BuzzError):
    code = "auth_error"
    status_code = 401


class NotAParticipant(AuthError):
    """Sender is not one of the conversation's participants."""

    code = "not_participant"
    status_code = 403


class StorageError(BuzzError):
    """Backend read/write failure. Mapped to a generic 500."""

    code = "storage_error"
    status_code = 500


class ConfigError(BuzzError):
    """Invalid settings; raised at startup."""

    code = "config_error"
