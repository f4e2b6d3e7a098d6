# tests/test_tokens.py
# PURPOSE: token issue/verify, distinct failure kinds, password hashing.

from datetime import timedelta

import pytest
from jose import jwt

from taskboard.auth import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from taskboard.config import settings
from taskboard.errors import TokenExpired, TokenInvalid, TokenMalformed


def test_issue_and_verify_roundtrip():
    token = create_access_token(7)
    assert decode_access_token(token) == 7

    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "7"
    assert claims["exp"] - claims["iat"] == settings.JWT_EXPIRE_MIN * 60


def test_malformed_token():
    with pytest.raises(TokenMalformed):
        decode_access_token("garbage")


def test_signature_mismatch_is_invalid():
    forged = jwt.encode({"sub": "7"}, "someone-elses-secret", algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(TokenInvalid):
        decode_access_token(forged)


def test_tampered_payload_is_invalid():
    header, _, signature = create_access_token(7).split(".")
    _, other_payload, _ = create_access_token(8).split(".")
    with pytest.raises(TokenInvalid):
        decode_access_token(f"{header}.{other_payload}.{signature}")


def test_expired_token():
    token = create_access_token(7, expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenExpired):
        decode_access_token(token)


def test_non_numeric_subject_is_invalid():
    token = jwt.encode({"sub": "someone"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(TokenInvalid):
        decode_access_token(token)


def test_password_hash_roundtrip():
    hashed = hash_password("Passw0rd")
    assert hashed != "Passw0rd"
    assert hashed.startswith("$2")
    assert verify_password("Passw0rd", hashed)
    assert not verify_password("passw0rd", hashed)
    # garbage stored hash never raises
    assert not verify_password("Passw0rd", "not-a-hash")
