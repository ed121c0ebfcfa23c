"""Password hashing and secret comparison helpers.

Passwords are hashed with salted PBKDF2-HMAC-SHA256 and stored in a
self-describing form: ``pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>``.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

HASH_ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
DEFAULT_HASH_ITERATIONS = 120_000


def hash_password(password: str, *, iterations: int = DEFAULT_HASH_ITERATIONS) -> str:
    """Hash a password with a fresh random salt.

    Args:
        password: Plain-text password.
        iterations: PBKDF2 rounds; the user store passes
            AUTH_PASSWORD_HASH_ITERATIONS.

    Returns:
        Encoded hash string.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against an encoded hash in constant time.

    Malformed hashes never verify.
    """
    try:
        algorithm, rounds, salt_hex, digest_hex = encoded.split("$")
        iterations = int(rounds)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False

    if algorithm != HASH_ALGORITHM:
        return False

    candidate = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(candidate.hex(), digest_hex)


def constant_time_equals(provided: str, expected: str) -> bool:
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def hash_identifier(value: str) -> str:
    """Short SHA-256 digest used to log identifiers without exposing them."""
    return hashlib.sha256(value.encode()).hexdigest()[:16]
