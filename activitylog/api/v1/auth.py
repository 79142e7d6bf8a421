"""
Authentication routes.
POST /auth/login
"""
from __future__ import annotations

from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from activitylog.core.config import settings
from activitylog.core.dependencies import DBSession, get_request_context
from activitylog.schemas.user import LoginRequest, Token
from activitylog.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])

limiter = Limiter(key_func=get_remote_address)


@router.post(
    "/login",
    response_model=Token,
    summary="Authenticate and receive a JWT access token",
)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: DBSession,
) -> Token:
    return await auth_service.authenticate_user(
        db,
        email=credentials.email,
        password=credentials.password,
        context=get_request_context(request),
    )
