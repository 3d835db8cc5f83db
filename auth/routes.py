"""
Auth API routes: register, login, current user.

Route prefix: /auth
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from api.dependencies import get_auth_service
from api.rate_limit import auth_rate_limit
from auth.dependencies import require_user_id
from auth.service import AuthService
from utils.schemas import AuthResponse, LoginRequest, MeResponse, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
async def register(
    req: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user and log them in straight away."""
    result = (await auth.register(req.username, req.email, req.password)).unwrap()
    return AuthResponse(message="User registered successfully", user=result.user, token=result.token)


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(auth_rate_limit)],
)
async def login(
    req: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login with username or email + password."""
    result = (await auth.login(req.username_or_email, req.password)).unwrap()
    return AuthResponse(message="Login successful", user=result.user, token=result.token)


@router.get("/me", response_model=MeResponse)
async def me(
    user_id: int = Depends(require_user_id),
    auth: AuthService = Depends(get_auth_service),
) -> MeResponse:
    return MeResponse(user=(await auth.current_user(user_id)).unwrap())
