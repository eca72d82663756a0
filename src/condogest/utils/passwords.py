"""Salted password hashing.

Hashes are stored as ``pbkdf2_sha256$<iterations>$<salt>$<digest>`` with
URL-safe base64 salt and digest, so the iteration count can be raised later
without invalidating stored hashes.
"""

import base64
import hashlib
import hmac
import os

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 260000


def _b64u_encode(value: bytes) -> str:
    return base64.urlsafe_b64encode(value).decode("ascii").rstrip("=")


def _b64u_decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def hash_password(password: str, *, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Hash a password with a fresh random salt."""
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=32)
    return f"{ALGORITHM}${iterations}${_b64u_encode(salt)}${_b64u_encode(digest)}"


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password against a stored hash.

    Malformed or missing hashes never verify.
    """
    if not password_hash:
        return False
    try:
        algorithm, iterations, salt_b64, digest_b64 = password_hash.split("$", 3)
        if algorithm != ALGORITHM:
            return False
        salt = _b64u_decode(salt_b64)
        expected = _b64u_decode(digest_b64)
        rounds = int(iterations)
    except ValueError:
        return False
    actual = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, rounds, dklen=len(expected)
    )
    return hmac.compare_digest(actual, expected)
