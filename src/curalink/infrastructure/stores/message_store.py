"""Message store: chat_messages between two users."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, desc, func, or_, select, update

from curalink.infrastructure.stores.models import Base, ChatMessageModel
from curalink.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _between(user_a: int, user_b: int):
    return or_(
        and_(ChatMessageModel.sender_id == user_a, ChatMessageModel.receiver_id == user_b),
        and_(ChatMessageModel.sender_id == user_b, ChatMessageModel.receiver_id == user_a),
    )


def _unread_from(sender_id: int, receiver_id: int):
    return and_(
        ChatMessageModel.sender_id == sender_id,
        ChatMessageModel.receiver_id == receiver_id,
        ChatMessageModel.is_read.is_(False),
    )


class MessageStore:
    """Messages are append-only; the only mutation is the read flag."""

    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    def add_message(self, sender_id: int, receiver_id: int, body: str) -> Dict[str, Any]:
        row = ChatMessageModel(
            sender_id=int(sender_id),
            receiver_id=int(receiver_id),
            body=body,
            is_read=False,
            created_at=_utcnow(),
        )
        with self._provider.session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._row_to_dict(row)

    def read_thread(self, viewer_id: int, counterpart_id: int) -> List[Dict[str, Any]]:
        """Return the pair's messages oldest first and mark counterpart→viewer messages read.

        The returned rows carry the read flags as they were before this call.
        """
        viewer_id, counterpart_id = int(viewer_id), int(counterpart_id)
        with self._provider.session() as session:
            rows = (
                session.execute(
                    select(ChatMessageModel)
                    .where(_between(viewer_id, counterpart_id))
                    .order_by(ChatMessageModel.created_at, ChatMessageModel.id)
                )
                .scalars()
                .all()
            )
            messages = [self._row_to_dict(r) for r in rows]
            session.execute(
                update(ChatMessageModel)
                .where(_unread_from(counterpart_id, viewer_id))
                .values(is_read=True)
                .execution_options(synchronize_session=False)
            )
            session.commit()
            return messages

    def latest_between(self, user_a: int, user_b: int) -> Optional[Dict[str, Any]]:
        with self._provider.session() as session:
            row = session.execute(
                select(ChatMessageModel)
                .where(_between(int(user_a), int(user_b)))
                .order_by(desc(ChatMessageModel.created_at), desc(ChatMessageModel.id))
                .limit(1)
            ).scalar_one_or_none()
            return self._row_to_dict(row) if row else None

    def count_unread(self, *, sender_id: int, receiver_id: int) -> int:
        with self._provider.session() as session:
            value = session.execute(
                select(func.count(ChatMessageModel.id)).where(
                    _unread_from(int(sender_id), int(receiver_id))
                )
            ).scalar_one()
            return int(value or 0)

    @staticmethod
    def _row_to_dict(row: ChatMessageModel) -> Dict[str, Any]:
        return {
            "id": int(row.id),
            "senderId": int(row.sender_id),
            "receiverId": int(row.receiver_id),
            "message": row.body,
            "isRead": bool(row.is_read),
            "createdAt": row.created_at.isoformat() if row.created_at else None,
        }
