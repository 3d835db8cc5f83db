"""
Registration, login and current-user lookups.

Composes the password hasher, the token issuer and the user store.  All
outcomes come back as ``Result`` values; nothing here knows about HTTP.
"""

from __future__ import annotations

import logging

from auth.jwt import TokenIssuer
from auth.password import PasswordHasher
from database.users import DUPLICATE_MESSAGE, UserStore
from utils.errors import ErrorKind, Result
from utils.schemas import AuthResult, UserOut

logger = logging.getLogger(__name__)

# same message for unknown user and wrong password
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class AuthService:
    def __init__(self, users: UserStore, hasher: PasswordHasher, tokens: TokenIssuer) -> None:
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    async def register(self, username: str, email: str, password: str) -> Result[AuthResult]:
        conflict = await self.users.find_conflict(username, email)
        if not conflict.ok:
            return Result(error=conflict.error)
        if conflict.value:
            return Result.failure(ErrorKind.DUPLICATE_USER, DUPLICATE_MESSAGE)

        password_hash = await self.hasher.hash(password)
        created = await self.users.create_user(username, email, password_hash)
        if not created.ok:
            return Result(error=created.error)

        user = created.value
        logger.info("Registered user %s (%s)", user.username, user.id)
        return Result.success(
            AuthResult(user=UserOut.model_validate(user), token=self.tokens.issue(user.id))
        )

    async def login(self, username_or_email: str, password: str) -> Result[AuthResult]:
        found = await self.users.find_by_login(username_or_email)
        if not found.ok:
            return Result(error=found.error)

        user = found.value
        if user is None or not await self.hasher.verify(password, user.password_hash):
            return Result.failure(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        logger.info("Login: %s (%s)", user.username, user.id)
        return Result.success(
            AuthResult(user=UserOut.model_validate(user), token=self.tokens.issue(user.id))
        )

    async def current_user(self, user_id: int) -> Result[UserOut]:
        found = await self.users.get_user(user_id)
        if not found.ok:
            return Result(error=found.error)
        if found.value is None:
            return Result.failure(ErrorKind.NOT_FOUND_OR_FORBIDDEN, "User not found")
        return Result.success(UserOut.model_validate(found.value))
