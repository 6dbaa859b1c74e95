"""Connection store: researcher_connections rows and their status."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError

from curalink.domain.connection import ConnectionStatus, ordered_pair
from curalink.infrastructure.stores.models import Base, ConnectionModel
from curalink.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _involves(user_id: int):
    return or_(ConnectionModel.requester_id == user_id, ConnectionModel.receiver_id == user_id)


class ConnectionStore:
    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    # --- writes ---

    def create_request(self, requester_id: int, receiver_id: int) -> Tuple[Dict[str, Any], bool]:
        """Insert a pending connection for the pair.

        Returns ``(row, True)`` when created, or ``(existing_row, False)`` when
        any connection already exists for the unordered pair. The unique pair
        constraint decides races between concurrent requests.
        """
        existing = self.get_between(requester_id, receiver_id)
        if existing is not None:
            return existing, False

        low, high = ordered_pair(int(requester_id), int(receiver_id))
        now = _utcnow()
        row = ConnectionModel(
            requester_id=int(requester_id),
            receiver_id=int(receiver_id),
            pair_low_id=low,
            pair_high_id=high,
            status=ConnectionStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        with self._provider.session() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.info(f"connection pair ({low}, {high}) inserted concurrently")
                existing = self.get_between(requester_id, receiver_id)
                if existing is None:
                    raise
                return existing, False
            session.refresh(row)
            return self._row_to_dict(row), True

    def transition(
        self, connection_id: int, *, from_status: ConnectionStatus, to_status: ConnectionStatus
    ) -> Optional[Dict[str, Any]]:
        """Compare-and-set the status. Returns the updated row, or None if the status had moved."""
        with self._provider.session() as session:
            result = session.execute(
                update(ConnectionModel)
                .where(
                    ConnectionModel.id == int(connection_id),
                    ConnectionModel.status == from_status.value,
                )
                .values(status=to_status.value, updated_at=_utcnow())
            )
            session.commit()
            if not result.rowcount:
                return None
            row = session.get(ConnectionModel, int(connection_id))
            session.refresh(row)
            return self._row_to_dict(row)

    # --- reads ---

    def get(self, connection_id: int) -> Optional[Dict[str, Any]]:
        with self._provider.session() as session:
            row = session.get(ConnectionModel, int(connection_id))
            return self._row_to_dict(row) if row else None

    def get_between(self, user_a: int, user_b: int) -> Optional[Dict[str, Any]]:
        low, high = ordered_pair(int(user_a), int(user_b))
        with self._provider.session() as session:
            row = session.execute(
                select(ConnectionModel).where(
                    and_(ConnectionModel.pair_low_id == low, ConnectionModel.pair_high_id == high)
                )
            ).scalar_one_or_none()
            return self._row_to_dict(row) if row else None

    def is_accepted_between(self, user_a: int, user_b: int) -> bool:
        row = self.get_between(user_a, user_b)
        return bool(row and row["status"] == ConnectionStatus.ACCEPTED.value)

    def list_for_user(
        self, user_id: int, *, status: Optional[ConnectionStatus] = None
    ) -> List[Dict[str, Any]]:
        with self._provider.session() as session:
            stmt = select(ConnectionModel).where(_involves(int(user_id)))
            if status is not None:
                stmt = stmt.where(ConnectionModel.status == status.value)
            stmt = stmt.order_by(ConnectionModel.id)
            rows = session.execute(stmt).scalars().all()
            return [self._row_to_dict(r) for r in rows]

    @staticmethod
    def _row_to_dict(row: ConnectionModel) -> Dict[str, Any]:
        return {
            "id": int(row.id),
            "requesterId": int(row.requester_id),
            "receiverId": int(row.receiver_id),
            "status": row.status,
            "createdAt": row.created_at.isoformat() if row.created_at else None,
            "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
        }
