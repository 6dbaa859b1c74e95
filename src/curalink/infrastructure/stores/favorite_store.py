from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from curalink.domain.favorites import FavoriteKind
from curalink.infrastructure.stores.models import Base, FavoriteModel
from curalink.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FavoriteStore:
    """Per-user saved references, unique on (user_id, kind, item_id)."""

    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    def list_grouped(self, user_id: int) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = {kind.value: [] for kind in FavoriteKind}
        with self._provider.session() as session:
            rows = (
                session.execute(
                    select(FavoriteModel)
                    .where(FavoriteModel.user_id == int(user_id))
                    .order_by(FavoriteModel.id)
                )
                .scalars()
                .all()
            )
            for row in rows:
                grouped.setdefault(row.kind, []).append(row.item_id)
        return grouped

    def add(self, user_id: int, kind: FavoriteKind, item_id: str) -> bool:
        """Insert if absent. Returns True if a row was created."""
        with self._provider.session() as session:
            existing = session.execute(
                select(FavoriteModel.id).where(
                    FavoriteModel.user_id == int(user_id),
                    FavoriteModel.kind == kind.value,
                    FavoriteModel.item_id == item_id,
                )
            ).first()
            if existing is not None:
                return False
            session.add(
                FavoriteModel(
                    user_id=int(user_id), kind=kind.value, item_id=item_id, created_at=_utcnow()
                )
            )
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return False
            return True

    def remove(self, user_id: int, kind: FavoriteKind, item_id: str) -> bool:
        """Delete if present. Returns True if a row was removed."""
        with self._provider.session() as session:
            result = session.execute(
                delete(FavoriteModel).where(
                    FavoriteModel.user_id == int(user_id),
                    FavoriteModel.kind == kind.value,
                    FavoriteModel.item_id == item_id,
                )
            )
            session.commit()
            return bool(result.rowcount)
