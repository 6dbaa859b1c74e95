"""Session and email-verification tokens."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import delete, select

from curalink.infrastructure.stores.models import AuthSessionModel, Base, VerificationTokenModel
from curalink.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url

VERIFICATION_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthTokenStore:
    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    # --- sessions ---

    def create_session(self, user_id: int, *, ttl: timedelta) -> Dict[str, Any]:
        now = _utcnow()
        row = AuthSessionModel(
            token=uuid4().hex + uuid4().hex,
            user_id=int(user_id),
            expires_at=now + ttl,
            created_at=now,
        )
        with self._provider.session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._session_to_dict(row)

    def get_session(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the live session for *token*; expired sessions are removed and yield None."""
        token = str(token or "").strip()
        if not token:
            return None
        with self._provider.session() as session:
            row = session.execute(
                select(AuthSessionModel).where(AuthSessionModel.token == token)
            ).scalar_one_or_none()
            if row is None:
                return None
            if as_utc(row.expires_at) <= _utcnow():
                session.delete(row)
                session.commit()
                return None
            return self._session_to_dict(row)

    def delete_session(self, token: str) -> bool:
        with self._provider.session() as session:
            result = session.execute(
                delete(AuthSessionModel).where(AuthSessionModel.token == str(token or ""))
            )
            session.commit()
            return bool(result.rowcount)

    # --- verification tokens ---

    def issue_verification_token(self, email: str) -> Dict[str, Any]:
        """Replace any outstanding tokens for *email* with a fresh one."""
        now = _utcnow()
        with self._provider.session() as session:
            session.execute(
                delete(VerificationTokenModel).where(VerificationTokenModel.identifier == email)
            )
            row = VerificationTokenModel(
                identifier=email, token=uuid4().hex, expires_at=now + VERIFICATION_TTL
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._token_to_dict(row)

    def find_valid_verification_token(self, token: str) -> Optional[Dict[str, Any]]:
        with self._provider.session() as session:
            row = session.execute(
                select(VerificationTokenModel).where(VerificationTokenModel.token == token)
            ).scalar_one_or_none()
            if row is None or as_utc(row.expires_at) <= _utcnow():
                return None
            return self._token_to_dict(row)

    def consume_verification_token(self, token: str) -> None:
        with self._provider.session() as session:
            session.execute(
                delete(VerificationTokenModel).where(VerificationTokenModel.token == token)
            )
            session.commit()

    @staticmethod
    def _session_to_dict(row: AuthSessionModel) -> Dict[str, Any]:
        return {
            "token": row.token,
            "user_id": int(row.user_id),
            "expires_at": as_utc(row.expires_at).isoformat(),
        }

    @staticmethod
    def _token_to_dict(row: VerificationTokenModel) -> Dict[str, Any]:
        return {
            "identifier": row.identifier,
            "token": row.token,
            "expires_at": as_utc(row.expires_at).isoformat(),
        }
