"""Auth Dependencies — resolve the caller from the Supabase bearer token.

Invariants:
    - get_current_user never raises: missing/invalid tokens resolve to None (logged)
    - require_user raises AuthenticationError (401) when the caller is anonymous
"""

import logging

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from farmops.config import Settings, get_settings
from farmops.core.errors import AuthenticationError
from farmops.infrastructure.supabase_auth import (
    AuthenticatedUser, verify_access_token,
)

logger = logging.getLogger(__name__)
bearer = HTTPBearer(scheme_name="SupabaseAccessToken", bearerFormat="JWT", auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedUser | None:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return verify_access_token(
            credentials.credentials.strip(),
            settings.supabase_jwt_secret,
            settings.supabase_jwt_audience,
        )
    except AuthenticationError as e:
        logger.warning(f"Authentication error: {e.message}")
        return None


async def require_user(
    user: AuthenticatedUser | None = Depends(get_current_user),
) -> AuthenticatedUser:
    if user is None:
        raise AuthenticationError()
    return user
