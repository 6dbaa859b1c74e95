"""User store: CRUD for the users table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from curalink.infrastructure.stores.models import Base, UserModel
from curalink.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


class UserStore:
    """Persisted user identities. Users are never deleted."""

    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    # --- writes ---

    def create_user(
        self,
        *,
        email: str,
        name: Optional[str] = None,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
        image: Optional[str] = None,
        orcid_id: Optional[str] = None,
        email_verified: bool = False,
    ) -> Dict[str, Any]:
        """Insert a user. Raises IntegrityError when the email is taken."""
        now = _utcnow()
        row = UserModel(
            email=normalize_email(email),
            name=name,
            image=image,
            password_hash=password_hash,
            role=role,
            orcid_id=orcid_id,
            email_verified_at=now if email_verified else None,
            created_at=now,
            updated_at=now,
        )
        with self._provider.session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._row_to_dict(row, include_private=True)

    def upsert_oauth_user(
        self,
        *,
        email: str,
        name: Optional[str] = None,
        image: Optional[str] = None,
        orcid_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Ensure an OAuth user exists; OAuth accounts count as verified."""
        email = normalize_email(email)
        existing = self.get_by_email(email, include_private=True)
        if existing is None:
            try:
                return self.create_user(
                    email=email, name=name, image=image, orcid_id=orcid_id, email_verified=True
                )
            except IntegrityError:
                logger.info(f"oauth user {email} created concurrently, re-reading")
                existing = self.get_by_email(email, include_private=True)
                if existing is None:
                    raise
        if orcid_id and not existing.get("orcid_id"):
            return self.update_user(int(existing["id"]), orcid_id=orcid_id) or existing
        return existing

    def update_user(self, user_id: int, **fields: Any) -> Optional[Dict[str, Any]]:
        allowed = {"name", "image", "password_hash", "role", "orcid_id", "email_verified_at"}
        with self._provider.session() as session:
            row = session.get(UserModel, int(user_id))
            if row is None:
                return None
            for key, value in fields.items():
                if key not in allowed:
                    raise ValueError(f"unsupported user field: {key}")
                setattr(row, key, value)
            row.updated_at = _utcnow()
            session.commit()
            session.refresh(row)
            return self._row_to_dict(row, include_private=True)

    def mark_email_verified(self, user_id: int) -> Optional[Dict[str, Any]]:
        return self.update_user(user_id, email_verified_at=_utcnow())

    # --- reads ---

    def get_by_id(self, user_id: int, *, include_private: bool = False) -> Optional[Dict[str, Any]]:
        with self._provider.session() as session:
            row = session.get(UserModel, int(user_id))
            return self._row_to_dict(row, include_private=include_private) if row else None

    def get_by_email(self, email: str, *, include_private: bool = False) -> Optional[Dict[str, Any]]:
        with self._provider.session() as session:
            row = session.execute(
                select(UserModel).where(UserModel.email == normalize_email(email))
            ).scalar_one_or_none()
            return self._row_to_dict(row, include_private=include_private) if row else None

    def get_public_many(self, user_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
        ids = sorted({int(uid) for uid in user_ids})
        if not ids:
            return {}
        with self._provider.session() as session:
            rows = session.execute(select(UserModel).where(UserModel.id.in_(ids))).scalars().all()
            return {int(r.id): self.public_fields(r) for r in rows}

    @staticmethod
    def public_fields(row: UserModel) -> Dict[str, Any]:
        return {"id": int(row.id), "name": row.name, "email": row.email, "image": row.image}

    @staticmethod
    def _row_to_dict(row: UserModel, *, include_private: bool = False) -> Dict[str, Any]:
        data = {
            "id": int(row.id),
            "email": row.email,
            "name": row.name,
            "image": row.image,
            "role": row.role,
            "orcid_id": row.orcid_id,
            "email_verified": row.email_verified_at is not None,
            "created_at": _iso(row.created_at),
            "updated_at": _iso(row.updated_at),
        }
        if include_private:
            data["password_hash"] = row.password_hash
        return data
