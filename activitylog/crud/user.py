"""
User lookups.
Users are the actors named on every activity record; they are provisioned
directly, so only reads and a plain create are offered.
"""
from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from activitylog.core.exceptions import BadRequestException
from activitylog.core.security import hash_password
from activitylog.models.user import User


class CRUDUser:

    async def get(self, db: AsyncSession, user_id: uuid.UUID) -> User | None:
        return await db.get(User, user_id)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_active_by_email(self, db: AsyncSession, email: str) -> User | None:
        user = await self.get_by_email(db, email)
        return user if user is not None and user.is_active else None

    async def create_user(
        self,
        db: AsyncSession,
        *,
        email: str,
        username: str,
        password: str,
        full_name: str | None = None,
    ) -> User:
        """Insert an actor account. Duplicate emails are rejected."""
        if await self.get_by_email(db, email) is not None:
            raise BadRequestException("A user with this email already exists")

        user = User(
            email=email,
            username=username,
            hashed_password=hash_password(password),
            full_name=full_name,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user


crud_user = CRUDUser()
