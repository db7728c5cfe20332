"""
security.py — USSD PIN hashing and verification.

Stored format (users.ussd_pin_hash):
    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>

A 6-digit PIN has only 10^6 values, so the hash alone does not stop an
offline attacker; the engine additionally ends the dialog after
settings.ussd_max_pin_attempts wrong PINs.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
import secrets

from wethrift.config import settings

logger = logging.getLogger(__name__)

PIN_HASH_ALGORITHM = "pbkdf2_sha256"
_SALT_BYTES = 16


def _derive(pin: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", pin.encode("utf-8"), salt, iterations)


def hash_pin(pin: str, iterations: int | None = None) -> str:
    """Hash a PIN for storage in users.ussd_pin_hash."""
    rounds = iterations or settings.pin_hash_iterations
    salt = secrets.token_bytes(_SALT_BYTES)
    digest = _derive(pin, salt, rounds)
    return f"{PIN_HASH_ALGORITHM}${rounds}${salt.hex()}${digest.hex()}"


def verify_pin(pin: str, encoded: str | None) -> bool:
    """
    Check a PIN against a stored hash in constant time.

    Returns False (never raises) for a missing or malformed hash, so a member
    without a USSD PIN simply cannot log in over USSD.
    """
    if not encoded:
        return False
    try:
        algorithm, rounds, salt_hex, digest_hex = encoded.split("$")
        if algorithm != PIN_HASH_ALGORITHM:
            logger.warning("Unsupported PIN hash algorithm=%s", algorithm)
            return False
        expected = bytes.fromhex(digest_hex)
        actual = _derive(pin, bytes.fromhex(salt_hex), int(rounds))
    except ValueError:
        logger.warning("Malformed PIN hash encountered")
        return False
    return hmac.compare_digest(actual, expected)
