from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, select, update

from curalink.domain.notification import NotificationType
from curalink.infrastructure.stores.models import Base, NotificationModel
from curalink.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationStore:
    """Per-user notification feed."""

    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    def add(
        self,
        user_id: int,
        *,
        type: NotificationType,
        title: str,
        message: str,
        link: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        row = NotificationModel(
            user_id=int(user_id),
            type=type.value,
            title=title,
            message=message,
            link=link,
            is_read=False,
            created_at=_utcnow(),
        )
        row.set_metadata(metadata or {})
        with self._provider.session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._row_to_dict(row)

    def list_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        with self._provider.session() as session:
            rows = (
                session.execute(
                    select(NotificationModel)
                    .where(NotificationModel.user_id == int(user_id))
                    .order_by(desc(NotificationModel.created_at), desc(NotificationModel.id))
                )
                .scalars()
                .all()
            )
            return [self._row_to_dict(r) for r in rows]

    def mark_read(self, user_id: int, notification_id: int) -> bool:
        with self._provider.session() as session:
            result = session.execute(
                update(NotificationModel)
                .where(
                    NotificationModel.id == int(notification_id),
                    NotificationModel.user_id == int(user_id),
                )
                .values(is_read=True)
            )
            session.commit()
            return bool(result.rowcount)

    def mark_all_read(self, user_id: int) -> int:
        with self._provider.session() as session:
            result = session.execute(
                update(NotificationModel)
                .where(
                    NotificationModel.user_id == int(user_id),
                    NotificationModel.is_read.is_(False),
                )
                .values(is_read=True)
            )
            session.commit()
            return int(result.rowcount or 0)

    def delete(self, user_id: int, notification_id: int) -> bool:
        with self._provider.session() as session:
            result = session.execute(
                delete(NotificationModel).where(
                    NotificationModel.id == int(notification_id),
                    NotificationModel.user_id == int(user_id),
                )
            )
            session.commit()
            return bool(result.rowcount)

    def clear(self, user_id: int) -> int:
        with self._provider.session() as session:
            result = session.execute(
                delete(NotificationModel).where(NotificationModel.user_id == int(user_id))
            )
            session.commit()
            return int(result.rowcount or 0)

    @staticmethod
    def _row_to_dict(row: NotificationModel) -> Dict[str, Any]:
        return {
            "id": int(row.id),
            "type": row.type,
            "title": row.title,
            "message": row.message,
            "link": row.link,
            "metadata": row.get_metadata(),
            "read": bool(row.is_read),
            "timestamp": row.created_at.isoformat() if row.created_at else None,
        }
