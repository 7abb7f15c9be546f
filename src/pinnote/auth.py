"""Bearer token authentication for pinnote routes.

The single gate for "must be logged in": resolves the acting user id
from an ``Authorization: Bearer <token>`` header or rejects with 401.
"""

from __future__ import annotations

from fastapi import Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pinnote.errors import AuthError
from pinnote.security import TokenService

_bearer = HTTPBearer(auto_error=False)


def authenticate(token: str | None, tokens: TokenService) -> str:
    """Return the user id embedded in ``token``."""
    if not token:
        raise AuthError("Access token not found")
    return tokens.verify(token)


async def require_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> str:
    token = credentials.credentials if credentials is not None else None
    return authenticate(token, request.app.state.tokens)
