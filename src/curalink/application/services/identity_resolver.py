"""IdentityResolver: session token → persisted user + typed role.

The role is re-read from the users table on every call, so a role change is
visible on the caller's next request.
"""

from __future__ import annotations

from typing import Optional

from curalink.domain.errors import Forbidden, Unauthenticated
from curalink.domain.identity import Principal, Role
from curalink.infrastructure.stores.auth_store import AuthTokenStore
from curalink.infrastructure.stores.user_store import UserStore


class IdentityResolver:
    def __init__(
        self,
        user_store: Optional[UserStore] = None,
        auth_store: Optional[AuthTokenStore] = None,
        db_url: Optional[str] = None,
    ):
        self._users = user_store or UserStore(db_url=db_url)
        self._auth = auth_store or AuthTokenStore(db_url=db_url)

    def resolve(self, token: Optional[str]) -> Principal:
        principal = self.resolve_optional(token)
        if principal is None:
            raise Unauthenticated()
        return principal

    def resolve_optional(self, token: Optional[str]) -> Optional[Principal]:
        session = self._auth.get_session(token or "")
        if session is None:
            return None
        return self.principal_for_user(int(session["user_id"]))

    def principal_for_user(self, user_id: int) -> Optional[Principal]:
        user = self._users.get_by_id(user_id)
        if user is None:
            return None
        return Principal(
            user_id=int(user["id"]),
            email=user["email"],
            name=user.get("name"),
            image=user.get("image"),
            role=Role.parse(user.get("role")),
        )


def require_role(principal: Principal, role: Role, message: str) -> Principal:
    if principal.role is not role:
        raise Forbidden(message)
    return principal
