"""Request-scoped caller resolution.

Session tokens arrive as ``Authorization: Bearer <token>`` or in the
``curalink_session`` cookie set by sign-in.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from curalink.application.services.identity_resolver import IdentityResolver
from curalink.domain.identity import Principal

SESSION_COOKIE = "curalink_session"
# Largest id SQLite INTEGER columns can hold.
MAX_ROW_ID = 2**63 - 1

_bearer = HTTPBearer(auto_error=False)
_identity_resolver = IdentityResolver()


def session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE) or None


def current_principal(token: Optional[str] = Depends(session_token)) -> Principal:
    return _identity_resolver.resolve(token)


def optional_principal(token: Optional[str] = Depends(session_token)) -> Optional[Principal]:
    return _identity_resolver.resolve_optional(token)
