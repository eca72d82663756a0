"""Tests for password hashing."""

from condogest.utils.passwords import hash_password, verify_password


def test_hash_and_verify():
    hashed = hash_password("secret1", iterations=1000)
    assert hashed.startswith("pbkdf2_sha256$1000$")
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)


def test_hash_is_salted():
    assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)


def test_plain_text_never_verifies():
    assert not verify_password("123", "123")
    assert not verify_password("123", None)
    assert not verify_password("123", "")
    assert not verify_password("123", "md5$1$abc$def")
