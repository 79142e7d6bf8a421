"""
Authentication service.
Verifies credentials, issues an access token and records the login activity.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from activitylog.core.exceptions import UnauthorizedException
from activitylog.core.security import create_access_token, verify_password
from activitylog.crud.activity import ActivityQueryRunner
from activitylog.crud.user import crud_user
from activitylog.schemas.activity import RequestContext
from activitylog.schemas.user import Token
from activitylog.services.activity_recorder import ActivityRecorder

logger = logging.getLogger(__name__)


class AuthService:

    async def authenticate_user(
        self,
        db: AsyncSession,
        *,
        email: str,
        password: str,
        context: RequestContext | None = None,
    ) -> Token:
        """
        Verify credentials and issue an access token.
        The login is recorded before the token is handed back.
        """
        user = await crud_user.get_active_by_email(db, email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Rejected login for %s", email)
            raise UnauthorizedException("Invalid email or password")

        recorder = ActivityRecorder(ActivityQueryRunner(db))
        await recorder.record_login(user.id, context)

        return Token(access_token=create_access_token(user.id))


auth_service = AuthService()
