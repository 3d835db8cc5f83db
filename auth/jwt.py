"""
JWT-style token creation and verification.

Tokens are base64-encoded JSON payloads signed with HMAC-SHA256.
Secret key is loaded from ``Settings.jwt_secret`` (env var: ``JWT_SECRET``),
which has no default.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Callable

from config.settings import Settings
from utils.errors import ErrorKind, Result


class TokenIssuer:
    def __init__(self, settings: Settings, clock: Callable[[], float] = time.time) -> None:
        self._secret = settings.jwt_secret.encode()
        self.expiry_seconds = settings.jwt_expiry_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, user_id: int) -> str:
        """Create a signed token containing ``user_id`` and expiry."""
        now = int(self._clock())
        payload = {
            "user_id": user_id,
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + self._sign(raw)

    def verify(self, token: str) -> Result[int]:
        """
        Verify token and return the embedded ``user_id``.

        Fails with ``INVALID_TOKEN`` for malformed or tampered tokens and
        ``EXPIRED_TOKEN`` once ``exp`` has been reached.
        """
        parts = token.split(".", 1)
        if len(parts) != 2:
            return Result.failure(ErrorKind.INVALID_TOKEN, "Invalid token: bad format")
        try:
            raw = urlsafe_b64decode(parts[0].encode())
        except (binascii.Error, ValueError):
            return Result.failure(ErrorKind.INVALID_TOKEN, "Invalid token: bad encoding")
        if not hmac.compare_digest(parts[1].encode(), self._sign(raw).encode()):
            return Result.failure(ErrorKind.INVALID_TOKEN, "Invalid token: bad signature")

        try:
            payload = json.loads(raw)
            user_id = payload["user_id"]
            exp = payload["exp"]
        except (ValueError, TypeError, KeyError):
            return Result.failure(ErrorKind.INVALID_TOKEN, "Invalid token: bad payload")
        if not isinstance(user_id, int) or not isinstance(exp, (int, float)):
            return Result.failure(ErrorKind.INVALID_TOKEN, "Invalid token: bad payload")

        if self._clock() >= exp:
            return Result.failure(ErrorKind.EXPIRED_TOKEN, "Token expired")
        return Result.success(user_id)
