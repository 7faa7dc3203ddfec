"""
Password hashing: PBKDF2-HMAC-SHA512, per-user random salt, 64-byte output.

Stored format: pbkdf2_sha512$<iterations>$<salt hex>$<hash hex>.
Legacy rows written as <salt hex>:<hash hex> use 10,000 iterations.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

ALGORITHM = "pbkdf2_sha512"
DEFAULT_ITERATIONS = 10_000
KEY_LENGTH = 64
SALT_BYTES = 16


def _derive(password: str, salt: str, iterations: int) -> str:
    return hashlib.pbkdf2_hmac(
        "sha512", password.encode("utf-8"), salt.encode("utf-8"), iterations, dklen=KEY_LENGTH
    ).hex()


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    salt = secrets.token_hex(SALT_BYTES)
    return f"{ALGORITHM}${iterations}${salt}${_derive(password, salt, iterations)}"


def verify_password(password: str, stored: str | None) -> bool:
    """True iff password derives to the stored hash. Malformed stored values never verify."""
    if not stored:
        return False
    if stored.startswith(ALGORITHM + "$"):
        parts = stored.split("$")
        if len(parts) != 4:
            return False
        _, iterations_raw, salt, expected = parts
        try:
            iterations = int(iterations_raw)
        except ValueError:
            return False
    else:
        salt, sep, expected = stored.partition(":")
        if not sep:
            return False
        iterations = DEFAULT_ITERATIONS
    return hmac.compare_digest(_derive(password, salt, iterations), expected)
