from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from curalink.infrastructure.stores.models import Base, FaqChatExchangeModel
from curalink.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FaqChatStore:
    """Log of FAQ assistant exchanges, keyed by browser session id."""

    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    def add_exchange(
        self,
        *,
        session_id: str,
        user_message: str,
        assistant_response: str,
        user_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        row = FaqChatExchangeModel(
            user_id=int(user_id) if user_id is not None else None,
            session_id=session_id,
            user_message=user_message,
            assistant_response=assistant_response,
            created_at=_utcnow(),
        )
        with self._provider.session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._row_to_dict(row)

    def list_session(self, session_id: str) -> List[Dict[str, Any]]:
        with self._provider.session() as session:
            rows = (
                session.execute(
                    select(FaqChatExchangeModel)
                    .where(FaqChatExchangeModel.session_id == session_id)
                    .order_by(FaqChatExchangeModel.id)
                )
                .scalars()
                .all()
            )
            return [self._row_to_dict(r) for r in rows]

    @staticmethod
    def _row_to_dict(row: FaqChatExchangeModel) -> Dict[str, Any]:
        return {
            "id": int(row.id),
            "user_id": row.user_id,
            "session_id": row.session_id,
            "user_message": row.user_message,
            "assistant_response": row.assistant_response,
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }
