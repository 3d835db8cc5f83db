"""
FastAPI dependencies for authentication.

``require_user_id`` rejects the request unless a valid Bearer token is
present.  ``resolve_scope`` never rejects: a missing or bad token simply
means the request runs in guest scope.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies import get_token_issuer
from auth.jwt import TokenIssuer
from database.scope import GUEST, Owned, RequestScope
from utils.errors import ApiError, AppError, ErrorKind

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


async def require_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> int:
    """
    Extract and verify the Bearer token, returning the authenticated
    user id.
    """
    if credentials is None or not credentials.credentials:
        raise ApiError(AppError(ErrorKind.UNAUTHENTICATED, "Access token required"))

    verified = tokens.verify(credentials.credentials)
    if not verified.ok:
        raise ApiError(AppError(verified.error.kind, "Invalid or expired token"))
    return verified.value


async def resolve_scope(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> RequestScope:
    if credentials is None or not credentials.credentials:
        return GUEST

    verified = tokens.verify(credentials.credentials)
    if not verified.ok:
        logger.debug("Ignoring bad token, continuing as guest: %s", verified.error.message)
        return GUEST
    return Owned(verified.value)
