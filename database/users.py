"""
User persistence: lookups by id, username or email, and registration inserts.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.models import User, utcnow
from utils.errors import ErrorKind, Result

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Username or email already exists"


class UserStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_conflict(self, username: str, email: str) -> Result[bool]:
        """True when either the username or the email is already taken."""
        stmt = select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
        try:
            async with self._session_factory() as session:
                existing = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError:
            logger.exception("Error checking for existing user")
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to check existing users")
        return Result.success(existing is not None)

    async def create_user(self, username: str, email: str, password_hash: str) -> Result[User]:
        now = utcnow()
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session_factory() as session:
                session.add(user)
                await session.commit()
                await session.refresh(user)
        except IntegrityError:
            # lost a race against a concurrent registration
            logger.info("Unique constraint hit while registering %s", username)
            return Result.failure(ErrorKind.DUPLICATE_USER, DUPLICATE_MESSAGE)
        except SQLAlchemyError:
            logger.exception("Error creating user %s", username)
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to create user")
        return Result.success(user)

    async def find_by_login(self, username_or_email: str) -> Result[Optional[User]]:
        stmt = (
            select(User)
            .where(or_(User.username == username_or_email, User.email == username_or_email))
            .order_by(User.id)
        )
        try:
            async with self._session_factory() as session:
                user = (await session.execute(stmt)).scalars().first()
        except SQLAlchemyError:
            logger.exception("Error looking up user for login")
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to look up user")
        return Result.success(user)

    async def get_user(self, user_id: int) -> Result[Optional[User]]:
        try:
            async with self._session_factory() as session:
                user = await session.get(User, user_id)
        except SQLAlchemyError:
            logger.exception("Error fetching user %s", user_id)
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to fetch user")
        return Result.success(user)
