"""
test_security.py — USSD PIN hashing.

Low iteration counts keep the suite fast; the format is what matters here.
"""
from __future__ import annotations

from wethrift.security import PIN_HASH_ALGORITHM, hash_pin, verify_pin


def test_hash_format() -> None:
    encoded = hash_pin("123456", iterations=1000)
    algorithm, rounds, salt_hex, digest_hex = encoded.split("$")

    assert algorithm == PIN_HASH_ALGORITHM
    assert rounds == "1000"
    assert len(bytes.fromhex(salt_hex)) == 16
    assert len(bytes.fromhex(digest_hex)) == 32
    assert "123456" not in encoded


def test_verify_correct_and_wrong_pin() -> None:
    encoded = hash_pin("123456", iterations=1000)

    assert verify_pin("123456", encoded) is True
    assert verify_pin("654321", encoded) is False


def test_same_pin_gets_different_salts() -> None:
    assert hash_pin("123456", iterations=1000) != hash_pin("123456", iterations=1000)


def test_missing_hash_never_verifies() -> None:
    assert verify_pin("123456", None) is False
    assert verify_pin("123456", "") is False


def test_malformed_hash_never_verifies() -> None:
    assert verify_pin("123456", "not-a-hash") is False
    assert verify_pin("123456", "pbkdf2_sha256$abc$zz$zz") is False
    assert verify_pin("123456", "md5$1000$00$00") is False
