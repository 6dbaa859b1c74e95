"""Registration, email verification, credential sign-in and role selection."""

from __future__ import annotations

import hmac
import logging
import os
import re
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

from curalink.application.services.resend_service import ResendEmailService, deliver_quietly
from curalink.domain.errors import Conflict, Forbidden, InvalidRequest, NotFound, Unauthenticated
from curalink.domain.identity import Principal, Role
from curalink.infrastructure.stores.auth_store import AuthTokenStore
from curalink.infrastructure.stores.user_store import UserStore, normalize_email
from curalink.utils.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")
MIN_PASSWORD_LENGTH = 6
# bcrypt rejects passwords longer than 72 bytes.
MAX_PASSWORD_BYTES = 72
DEFAULT_SESSION_TTL_HOURS = 720
OAUTH_SECRET_ENV = "CURALINK_OAUTH_CALLBACK_SECRET"


def session_ttl() -> timedelta:
    raw = os.getenv("CURALINK_SESSION_TTL_HOURS", "").strip()
    try:
        hours = int(raw) if raw else DEFAULT_SESSION_TTL_HOURS
    except ValueError:
        hours = DEFAULT_SESSION_TTL_HOURS
    return timedelta(hours=max(1, hours))


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in user.items() if k != "password_hash"}


class AccountService:
    def __init__(
        self,
        user_store: Optional[UserStore] = None,
        auth_store: Optional[AuthTokenStore] = None,
        mailer: Optional[ResendEmailService] = None,
        *,
        db_url: Optional[str] = None,
    ):
        self._users = user_store or UserStore(db_url=db_url)
        self._auth = auth_store or AuthTokenStore(db_url=db_url)
        self._mailer = mailer

    def register(
        self, *, name: str, email: str, password: str, role: Optional[str] = None
    ) -> Dict[str, Any]:
        name = str(name or "").strip()
        email = normalize_email(email)
        if not 2 <= len(name) <= 100:
            raise InvalidRequest("Invalid input: name must be 2-100 characters")
        if not _EMAIL_RE.match(email):
            raise InvalidRequest("Invalid input: email is not valid")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise InvalidRequest(f"Invalid input: password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidRequest(f"Invalid input: password must be at most {MAX_PASSWORD_BYTES} bytes")
        parsed_role = None
        if role:
            parsed_role = Role.parse(role)
            if parsed_role is None:
                raise InvalidRequest("Invalid user type")

        existing = self._users.get_by_email(email, include_private=True)
        if existing is not None:
            self._raise_taken(existing)

        try:
            user = self._users.create_user(
                email=email,
                name=name,
                password_hash=hash_password(password),
                role=parsed_role.value if parsed_role else None,
            )
        except IntegrityError:
            existing = self._users.get_by_email(email, include_private=True)
            if existing is None:
                raise
            self._raise_taken(existing)

        self._send_verification(email)
        logger.info("Registered user id=%s", user["id"])
        return {"id": user["id"], "name": user["name"], "email": user["email"]}

    def verify_email(self, token: str) -> Dict[str, Any]:
        token = str(token or "").strip()
        if not token:
            raise InvalidRequest("Token is required")
        record = self._auth.find_valid_verification_token(token)
        if record is None:
            raise InvalidRequest("Invalid or expired token")
        user = self._users.get_by_email(record["identifier"])
        if user is None:
            raise NotFound("User not found")
        self._users.mark_email_verified(int(user["id"]))
        self._auth.consume_verification_token(token)
        return {"message": "Email verified successfully", "verified": True}

    def resend_verification(self, email: str) -> Dict[str, Any]:
        email = normalize_email(email)
        if not email:
            raise InvalidRequest("Email is required")
        user = self._users.get_by_email(email)
        if user is None:
            raise NotFound("User not found")
        if user["email_verified"]:
            raise InvalidRequest("Email is already verified")
        self._send_verification(email)
        return {"message": "Verification email sent"}

    def sign_in(self, *, email: str, password: str) -> Dict[str, Any]:
        user = self._users.get_by_email(email, include_private=True)
        if user is None or not verify_password(password, user.get("password_hash")):
            raise Unauthenticated("Invalid email or password")
        if not user["email_verified"]:
            raise Forbidden(
                "Please verify your email before signing in. "
                "Check your inbox for the verification link."
            )
        session = self._auth.create_session(int(user["id"]), ttl=session_ttl())
        logger.info("Signed in user id=%s", user["id"])
        return {
            "token": session["token"],
            "expiresAt": session["expires_at"],
            "user": _public_user(user),
        }

    def sign_out(self, token: Optional[str]) -> None:
        if token:
            self._auth.delete_session(token)

    def current_user(self, principal: Principal) -> Dict[str, Any]:
        user = self._users.get_by_id(principal.user_id)
        if user is None:
            raise Unauthenticated()
        return user

    def select_role(self, principal: Principal, role: Optional[str]) -> Dict[str, Any]:
        """Set the caller's role once; repeating the same role is a no-op."""
        parsed = Role.parse(role)
        if parsed is None:
            raise InvalidRequest("Invalid user type")
        if principal.role is not None and principal.role is not parsed:
            raise Conflict("User type already selected", extra={"userType": principal.role.value})
        user = self._users.update_user(principal.user_id, role=parsed.value)
        if user is None:
            raise Unauthenticated()
        return _public_user(user)

    def upsert_oauth_user(
        self,
        *,
        email: str,
        name: Optional[str] = None,
        image: Optional[str] = None,
        orcid_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """First OAuth sign-in creates a pre-verified user; ORCID sign-in records the iD."""
        if not _EMAIL_RE.match(normalize_email(email)):
            raise InvalidRequest("OAuth profile has no usable email")
        return _public_user(
            self._users.upsert_oauth_user(email=email, name=name, image=image, orcid_id=orcid_id)
        )

    def open_session(self, user_id: int) -> Dict[str, Any]:
        """Issue a session for a user the identity provider already authenticated."""
        return self._auth.create_session(int(user_id), ttl=session_ttl())

    def oauth_sign_in(
        self,
        *,
        secret: Optional[str],
        email: str,
        name: Optional[str] = None,
        image: Optional[str] = None,
        orcid_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Sign in a profile the identity-provider callback has already verified.

        The callback proves itself with the shared ``CURALINK_OAUTH_CALLBACK_SECRET``.
        """
        expected = os.getenv(OAUTH_SECRET_ENV, "").strip()
        if not expected:
            raise Forbidden("OAuth sign-in is not configured")
        if not secret or not hmac.compare_digest(secret.encode("utf-8"), expected.encode("utf-8")):
            raise Unauthenticated("Invalid OAuth callback credentials")
        user = self.upsert_oauth_user(email=email, name=name, image=image, orcid_id=orcid_id)
        session = self.open_session(int(user["id"]))
        logger.info("OAuth sign-in user id=%s", user["id"])
        return {"token": session["token"], "expiresAt": session["expires_at"], "user": user}

    def _send_verification(self, email: str) -> None:
        record = self._auth.issue_verification_token(email)
        if self._mailer is None:
            logger.info("Mailer not configured; verification token issued for %s", email)
            logger.debug("Verification link for %s: /api/auth/verify?token=%s", email, record["token"])
            return
        deliver_quietly("verification", self._mailer.send_verification, to=email, token=record["token"])

    @staticmethod
    def _raise_taken(existing: Dict[str, Any]) -> None:
        if existing.get("password_hash"):
            raise Conflict("Email already registered. Please sign in.")
        raise Conflict("This email is registered with an external sign-in provider. Please sign in with it.")
