"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.  The async methods push the
CPU-bound work onto the threadpool so request handlers don't block the loop.
"""

from __future__ import annotations

import bcrypt
from fastapi.concurrency import run_in_threadpool

from config.settings import Settings

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt (auto-salted, work factor 12 by default)."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    raw = password.encode()
    if len(raw) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, password_hash.encode())
    except (ValueError, TypeError):
        return False


class PasswordHasher:
    def __init__(self, settings: Settings) -> None:
        self.rounds = settings.bcrypt_rounds

    async def hash(self, password: str) -> str:
        return await run_in_threadpool(hash_password, password, self.rounds)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await run_in_threadpool(verify_password, password, password_hash)
