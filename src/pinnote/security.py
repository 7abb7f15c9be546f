"""Credential hashing and identity tokens.

Both are opaque capabilities to the services: a one-way hash with verify
(passwords and PINs share it), and a signed token carrying a user id.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from pinnote.errors import AuthError, InternalError

logger = logging.getLogger("pinnote.security")


class CredentialHasher:
    """argon2 hash + verify via passlib."""

    def __init__(self, schemes: tuple[str, ...] = ("argon2",)):
        self._context = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, secret: str) -> str:
        try:
            return self._context.hash(secret)
        except Exception as exc:
            logger.exception("Hashing failed")
            raise InternalError() from exc

    def verify(self, secret: str, hashed: str | None) -> bool:
        """Check ``secret`` against ``hashed``. A missing or unrecognised hash never verifies."""
        if not hashed:
            return False
        try:
            return self._context.verify(secret, hashed)
        except ValueError:
            logger.warning("Stored hash could not be identified")
            return False


class TokenService:
    """Issues and verifies HMAC-signed JWTs with a ``userId`` claim."""

    claim = "userId"

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta | None = timedelta(days=7),
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl

    def issue(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {self.claim: user_id, "iat": now}
        if self._ttl is not None:
            payload["exp"] = now + self._ttl
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Return the embedded user id, or raise AuthError."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise AuthError("Invalid token") from exc
        user_id = payload.get(self.claim)
        if not isinstance(user_id, str) or not user_id:
            raise AuthError("Invalid token")
        return user_id
