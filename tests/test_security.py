from datetime import timedelta

from accounts_api.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from accounts_api.application.services.user_service import is_valid_password


def test_hash_is_salted_and_never_plaintext():
    first = hash_password("password123")
    second = hash_password("password123")

    assert first != "password123"
    assert first != second
    assert first.startswith("$2")


def test_verify_matches_only_the_original_password():
    hashed = hash_password("password123")

    assert verify_password("password123", hashed) is True
    assert verify_password("other-password", hashed) is False
    assert is_valid_password("password123", hashed) is True
    assert is_valid_password("password123", hash_password("other-password")) is False


def test_verify_malformed_hash_is_false():
    assert verify_password("password123", "not-a-hash") is False
    assert verify_password("password123", "") is False
    assert verify_password("password123", None) is False


def test_access_token_roundtrip():
    token = create_access_token({"sub": "alice@example.com", "uid": "abc"})
    payload = decode_access_token(token)

    assert payload["sub"] == "alice@example.com"
    assert payload["uid"] == "abc"


def test_expired_or_tampered_token_is_rejected():
    expired = create_access_token({"sub": "alice@example.com"}, expires_delta=timedelta(minutes=-1))

    assert decode_access_token(expired) is None
    assert decode_access_token(expired[:-2] + "xx") is None
    assert decode_access_token("garbage") is None
