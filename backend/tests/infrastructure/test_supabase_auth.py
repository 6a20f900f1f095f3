"""Tests for Supabase access-token verification."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from farmops.core.errors import AuthenticationError
from farmops.infrastructure.supabase_auth import verify_access_token

SECRET = "unit-test-secret-that-is-thirty-two-bytes-or-more"


def _token(secret=SECRET, **overrides):
    payload = {
        "sub": str(uuid.uuid4()),
        "aud": "authenticated",
        "email": "grower@example.com",
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
    }
    payload.update(overrides)
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, secret, algorithm="HS256"), payload


def test_valid_token_resolves_user():
    token, payload = _token()

    user = verify_access_token(token, SECRET)

    assert user.id == uuid.UUID(payload["sub"])
    assert user.email == "grower@example.com"
    assert user.role == "authenticated"


@pytest.mark.parametrize("overrides", [
    {"exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
    {"aud": "anon-service"},
    {"exp": None},
    {"sub": None},
])
def test_rejected_claims(overrides):
    token, _ = _token(**overrides)
    with pytest.raises(AuthenticationError):
        verify_access_token(token, SECRET)


def test_wrong_secret_rejected():
    token, _ = _token(secret="a-completely-different-secret-of-enough-length")
    with pytest.raises(AuthenticationError):
        verify_access_token(token, SECRET)


def test_non_uuid_subject_rejected():
    token, _ = _token(sub="service-account")
    with pytest.raises(AuthenticationError, match="subject"):
        verify_access_token(token, SECRET)


def test_garbage_rejected():
    with pytest.raises(AuthenticationError):
        verify_access_token("not.a.token", SECRET)
