"""Supabase Auth — verifies Supabase access tokens locally with the project JWT secret.

Invariants:
    - Only HS256 tokens signed with supabase_jwt_secret are accepted
    - Audience must match supabase_jwt_audience ("authenticated" by default)
    - `sub` must be a UUID (the Supabase auth user id)
    - Every failure raises AuthenticationError; callers decide whether that is fatal
"""

import uuid
from dataclasses import dataclass

import jwt

from farmops.core.errors import AuthenticationError


@dataclass(frozen=True)
class AuthenticatedUser:
    id: uuid.UUID
    email: str | None = None
    role: str | None = None


def verify_access_token(
    token: str, secret: str, audience: str = "authenticated",
) -> AuthenticatedUser:
    """Decode and validate a Supabase access token."""
    try:
        payload = jwt.decode(
            token, secret, algorithms=["HS256"], audience=audience,
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError:  # includes ExpiredSignatureError
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise AuthenticationError("Invalid token subject")
    return AuthenticatedUser(
        id=user_id, email=payload.get("email"), role=payload.get("role"),
    )
